from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from attendance import services
from attendance.schemas import DayQuery, parse_args
from attendance.utils.decorators import role_required

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/stats', methods=['GET'])
@jwt_required()
@role_required()
def stats(caller):
    query = parse_args(DayQuery, request.args)
    return jsonify(services.daily_stats(caller, query.date).to_dict()), 200


@dashboard_bp.route('/summary', methods=['GET'])
@jwt_required()
@role_required()
def summary(caller):
    query = parse_args(DayQuery, request.args)
    return jsonify(services.dashboard_summary(caller, query.date)), 200
