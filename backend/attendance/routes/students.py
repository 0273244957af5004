from io import BytesIO
from flask import Blueprint, request, jsonify, send_file
from flask_jwt_extended import jwt_required
from attendance import services
from attendance.models import Student
from attendance.qrcodes import qr_download_name
from attendance.schemas import QrLookup, StudentQuery, parse, parse_args
from attendance.utils.decorators import role_required
from attendance.utils.formSchema import generate_schema_from_model
from attendance.utils.pagination import paginate_items

students_bp = Blueprint("students", __name__)


@students_bp.route('/list', methods=['GET'])
@jwt_required()
@role_required()
def list_students(caller):
    query = parse_args(StudentQuery, request.args)
    students = [s.to_dict() for s in services.list_students(caller, query.to_filter())]

    # unpaginated unless the client asks for a page
    if "page" not in request.args:
        return jsonify(students), 200

    paginated = paginate_items(
        students,
        request.args.get("page", 1, type=int),
        request.args.get("per_page", 10, type=int)
    )
    return jsonify({
        "students": paginated["items"],
        "total": paginated["total"],
        "page": paginated["page"],
        "pages": paginated["pages"]
    }), 200


@students_bp.route('/classes', methods=['GET'])
@jwt_required()
@role_required()
def list_classes(caller):
    return jsonify(services.list_classes(caller)), 200


@students_bp.route("/form_schema", methods=["GET"])
@jwt_required()
@role_required()
def form_schema(caller):
    return jsonify(generate_schema_from_model(Student, "Student"))


@students_bp.route('/<int:student_id>', methods=['GET'])
@jwt_required()
@role_required()
def get_student(student_id, caller):
    return jsonify(services.get_student(caller, student_id).to_dict()), 200


@students_bp.route('/<int:student_id>/qr', methods=['GET'])
@jwt_required()
@role_required()
def student_qr(student_id, caller):
    student, png = services.student_qr_png(caller, student_id)
    return send_file(
        BytesIO(png),
        mimetype="image/png",
        as_attachment=request.args.get("download", "false").lower() in ("true", "1", "yes"),
        download_name=qr_download_name(student)
    )


@students_bp.route("/create", methods=["POST"])
@jwt_required()
@role_required("admin")
def create_student(caller):
    student = services.create_student(caller, request.get_json(silent=True))
    return jsonify(student.to_dict()), 201


@students_bp.route('/update/<int:student_id>', methods=['PUT'])
@jwt_required()
@role_required("admin")
def update_student(student_id, caller):
    student = services.update_student(caller, student_id, request.get_json(silent=True))
    return jsonify(student.to_dict()), 200


@students_bp.route("/remove/<int:student_id>", methods=["DELETE"])
@jwt_required()
@role_required("admin")
def delete_student(student_id, caller):
    student = services.deactivate_student(caller, student_id)
    return jsonify({"message": "Student deactivated successfully", "student": student.to_dict()}), 200


@students_bp.route("/restore/<int:student_id>", methods=["POST"])
@jwt_required()
@role_required("admin")
def restore_student(student_id, caller):
    student = services.restore_student(caller, student_id)
    return jsonify({"message": "Student restored successfully", "student": student.to_dict()}), 200


@students_bp.route("/search-by-qr", methods=["POST"])
@jwt_required()
@role_required()
def search_by_qr(caller):
    data = parse(QrLookup, request.get_json(silent=True), "Invalid QR code")
    return jsonify(services.find_student_by_token(caller, data.qr_code).to_dict()), 200
