"""
Operations behind the HTTP layer. Each takes an explicit Caller and checks
it before reading or writing anything.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from attendance.errors import Conflict, NotFound, ValidationFailed
from attendance.extensions import db
from attendance.models import AttendanceRecord, AttendanceStatus, Student, UserRole
from attendance.qrcodes import render_qr_png
from attendance.reports import (
    compute_attendance_report,
    compute_daily_stats,
    export_attendance_csv,
    summarize_report,
)
from attendance.schemas import (
    AttendanceCreate,
    AttendanceUpdate,
    StudentCreate,
    StudentUpdate,
    parse,
)
from attendance.store import AttendanceRow, SqlStore, StudentFilter, StudentRow
from attendance.utils.access_control import authorize

ADMIN = UserRole.admin


def _get_student_or_404(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        raise NotFound("Student not found")
    return student


def _get_record_or_404(record_id):
    record = db.session.get(AttendanceRecord, record_id)
    if not record:
        raise NotFound("Attendance record not found")
    return record


# Students

def list_students(caller, filters=None, store=None):
    authorize(caller)
    return (store or SqlStore()).list_students(filters or StudentFilter())


def list_classes(caller, store=None):
    authorize(caller)
    return (store or SqlStore()).class_names()


def get_student(caller, student_id):
    authorize(caller)
    return StudentRow.from_model(_get_student_or_404(student_id))


def find_student_by_token(caller, token):
    """Active and inactive students both resolve; tokens are never reused."""
    authorize(caller)
    student = Student.query.filter_by(qr_code=token).first()
    if not student:
        raise NotFound("Student not found")
    return StudentRow.from_model(student)


def create_student(caller, payload):
    authorize(caller, ADMIN)
    data = parse(StudentCreate, payload, "Invalid student data")

    token = Student.token_for(data.nis)
    if Student.query.filter(
        (Student.nis == data.nis) | (Student.qr_code == token)
    ).first():
        raise Conflict("NIS already exists")

    student = Student(
        nis=data.nis,
        name=data.name,
        class_name=data.class_name,
        gender=data.gender,
        birth_date=data.birth_date,
        address=data.address,
        qr_code=token,
        is_active=data.is_active,
    )
    db.session.add(student)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("NIS already exists")

    current_app.logger.info("Student %s created by %s", student.nis, caller.username)
    return StudentRow.from_model(student)


def update_student(caller, student_id, payload):
    authorize(caller, ADMIN)
    data = parse(StudentUpdate, payload, "Invalid student data")
    student = _get_student_or_404(student_id)

    changes = data.model_dump(exclude_unset=True)
    nis = changes.pop("nis", None)
    if nis is not None and nis != student.nis:
        raise ValidationFailed.for_field("nis", "NIS cannot be changed", "Invalid student data")

    for field in ("name", "class_name", "gender"):
        if field in changes and changes[field] is None:
            raise ValidationFailed.for_field(field, "Field cannot be null", "Invalid student data")

    active = changes.pop("is_active", None)
    for field, value in changes.items():
        setattr(student, field, value)
    if active is True and not student.is_active:
        student.restore()
    elif active is False and student.is_active:
        student.deactivate()

    db.session.commit()
    return StudentRow.from_model(student)


def deactivate_student(caller, student_id):
    """
    Deleting a student is a soft delete: the row, its scan token and every
    attendance record that references it stay in place.
    """
    authorize(caller, ADMIN)
    student = _get_student_or_404(student_id)
    if student.is_active:
        student.deactivate()
        db.session.commit()
        current_app.logger.info("Student %s deactivated by %s", student.nis, caller.username)
    return StudentRow.from_model(student)


def restore_student(caller, student_id):
    authorize(caller, ADMIN)
    student = _get_student_or_404(student_id)
    if not student.is_active:
        student.restore()
        db.session.commit()
    return StudentRow.from_model(student)


def student_qr_png(caller, student_id):
    authorize(caller)
    student = StudentRow.from_model(_get_student_or_404(student_id))
    png = render_qr_png(
        student.qr_code,
        box_size=current_app.config.get("QR_CODE_BOX_SIZE", 10),
        border=current_app.config.get("QR_CODE_BORDER", 4),
    )
    return student, png


# Attendance

def _apply_late_rule(status, moment):
    late_after = current_app.config.get("LATE_AFTER_HOUR")
    if late_after is not None and status == AttendanceStatus.present and moment.hour > late_after:
        return AttendanceStatus.late
    return status


def record_attendance(caller, payload, now=None):
    """
    Append one attendance record stamped with the server clock. Same-day
    records for a student are not merged; each call adds a row.
    """
    authorize(caller)
    data = parse(AttendanceCreate, payload, "Invalid attendance data")
    student = _get_student_or_404(data.student_id)

    moment = now or datetime.now()
    record = AttendanceRecord(
        student_id=student.id,
        date=moment.date(),
        time=moment,
        status=_apply_late_rule(data.status, moment),
        notes=data.notes,
        recorded_by=caller.user_id,
    )
    db.session.add(record)
    db.session.commit()

    current_app.logger.info(
        "Attendance %s recorded for %s by %s", record.status.value, student.nis, caller.username
    )
    return AttendanceRow.from_model(record)


def update_attendance(caller, record_id, payload):
    authorize(caller)
    data = parse(AttendanceUpdate, payload, "Invalid attendance data")
    record = _get_record_or_404(record_id)

    changes = data.model_dump(exclude_unset=True)
    if "status" in changes:
        if changes["status"] is None:
            raise ValidationFailed.for_field("status", "Field cannot be null", "Invalid attendance data")
        record.status = changes["status"]
    if "notes" in changes:
        record.notes = changes["notes"]

    db.session.commit()
    return AttendanceRow.from_model(record)


def get_attendance(caller, record_id):
    authorize(caller)
    return AttendanceRow.from_model(_get_record_or_404(record_id))


def list_attendance(caller, filters=None, store=None):
    authorize(caller)
    return (store or SqlStore()).list_attendance(filters)


# Dashboard & reports

def daily_stats(caller, day=None, store=None):
    authorize(caller)
    return compute_daily_stats(store or SqlStore(), day or datetime.now().date())


def dashboard_summary(caller, day=None, store=None):
    authorize(caller)
    store = store or SqlStore()
    stats = compute_daily_stats(store, day or datetime.now().date())
    active = StudentFilter(is_active=True)

    return {
        "activeStudents": stats.total_students,
        "inactiveStudents": store.count_students(StudentFilter(is_active=False)),
        "totalClasses": len(store.class_names(active)),
        "studentsByClass": store.count_by("class_name", active),
        "studentsByGender": store.count_by("gender", active),
        "today": stats.to_dict(),
    }


def attendance_report(caller, start_date=None, end_date=None, class_name=None, store=None):
    authorize(caller)
    return compute_attendance_report(store or SqlStore(), start_date, end_date, class_name)


def report_summary(caller, start_date=None, end_date=None, class_name=None, store=None):
    rows = attendance_report(caller, start_date, end_date, class_name, store)
    return summarize_report(rows, current_app.config.get("REPORT_LOW_ATTENDANCE_THRESHOLD", 75))


def export_csv(caller, filters=None, store=None):
    authorize(caller)
    return export_attendance_csv((store or SqlStore()).list_attendance(filters))
