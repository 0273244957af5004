from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from attendance import services
from attendance.schemas import AttendanceQuery, parse_args
from attendance.utils.decorators import role_required

attendance_bp = Blueprint("attendance", __name__)


@attendance_bp.route('/list', methods=['GET'])
@jwt_required()
@role_required()
def list_attendance(caller):
    query = parse_args(AttendanceQuery, request.args)
    records = services.list_attendance(caller, query.to_filter())
    return jsonify([r.to_dict() for r in records]), 200


@attendance_bp.route('/<int:record_id>', methods=['GET'])
@jwt_required()
@role_required()
def get_attendance(record_id, caller):
    return jsonify(services.get_attendance(caller, record_id).to_dict()), 200


@attendance_bp.route('/record', methods=['POST'])
@jwt_required()
@role_required()
def record_attendance(caller):
    record = services.record_attendance(caller, request.get_json(silent=True))
    return jsonify(record.to_dict()), 201


@attendance_bp.route('/update/<int:record_id>', methods=['PUT'])
@jwt_required()
@role_required()
def update_attendance(record_id, caller):
    record = services.update_attendance(caller, record_id, request.get_json(silent=True))
    return jsonify(record.to_dict()), 200
