from flask import Blueprint, request, jsonify, Response
from flask_jwt_extended import jwt_required
from attendance import services
from attendance.schemas import AttendanceQuery, ReportQuery, parse_args
from attendance.utils.decorators import role_required

reports_bp = Blueprint('reports', __name__)

CSV_FILENAME = "attendance-report.csv"


@reports_bp.route('/attendance', methods=['GET'])
@jwt_required()
@role_required()
def attendance_report(caller):
    query = parse_args(ReportQuery, request.args)
    rows = services.attendance_report(caller, query.start_date, query.end_date, query.class_name)
    return jsonify([row.to_dict() for row in rows]), 200


@reports_bp.route('/attendance/summary', methods=['GET'])
@jwt_required()
@role_required()
def attendance_report_summary(caller):
    query = parse_args(ReportQuery, request.args)
    return jsonify(services.report_summary(caller, query.start_date, query.end_date, query.class_name)), 200


@reports_bp.route('/export/attendance-csv', methods=['GET'])
@jwt_required()
@role_required()
def export_attendance_csv(caller):
    query = parse_args(AttendanceQuery, request.args)
    content = services.export_csv(caller, query.to_filter())
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={CSV_FILENAME}"}
    )
