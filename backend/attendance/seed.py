import os
from datetime import date, datetime, timedelta
from flask import current_app
from attendance.extensions import db
from attendance.models import AttendanceRecord, AttendanceStatus, GenderEnum, Student, User, UserRole


def ensure_user(username, password, role):
    user = User.query.filter_by(username=username).first()
    if user:
        return user, False

    user = User(username=username, role=UserRole(role))
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user, True


SAMPLE_STUDENTS = [
    ("2023001", "Ahmad Fauzi", "X-1", GenderEnum.L, date(2008, 3, 14)),
    ("2023002", "Siti Nurhaliza", "X-1", GenderEnum.P, date(2008, 7, 2)),
    ("2023003", "Budi Santoso", "X-2", GenderEnum.L, date(2008, 1, 21)),
    ("2023004", "Dewi Lestari", "X-2", GenderEnum.P, None),
]


def seed_data(with_samples=True):
    """Create the default admin and teacher accounts and, optionally, a small roster."""
    admin, _ = ensure_user("admin", os.getenv("ADMIN_PASSWORD", "admin123"), "admin")
    teacher, _ = ensure_user("teacher", os.getenv("TEACHER_PASSWORD", "teacher123"), "teacher")

    if not with_samples:
        return

    created = []
    for nis, name, class_name, gender, birth_date in SAMPLE_STUDENTS:
        if Student.query.filter_by(nis=nis).first():
            continue
        student = Student(
            nis=nis,
            name=name,
            class_name=class_name,
            gender=gender,
            birth_date=birth_date,
            qr_code=Student.token_for(nis),
        )
        db.session.add(student)
        created.append(student)
    db.session.commit()

    # one morning of scans so the dashboard is not empty
    morning = datetime.combine(date.today(), datetime.min.time()) + timedelta(hours=7)
    statuses = [AttendanceStatus.present, AttendanceStatus.present, AttendanceStatus.late, AttendanceStatus.sick]
    for offset, (student, status) in enumerate(zip(created, statuses)):
        scanned = morning + timedelta(minutes=5 * offset)
        db.session.add(AttendanceRecord(
            student_id=student.id,
            date=scanned.date(),
            time=scanned,
            status=status,
            recorded_by=teacher.id
        ))
    db.session.commit()

    current_app.logger.info("Seeded %d students and attendance for %s", len(created), date.today())
