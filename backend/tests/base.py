import unittest
from datetime import datetime

from attendance import create_app
from attendance.config import TestConfig
from attendance.extensions import db
from attendance.models import AttendanceRecord, AttendanceStatus, GenderEnum, Student, User
from attendance.seed import ensure_user
from attendance.utils.access_control import Caller

PASSWORDS = {"admin": "adminpass", "teacher": "teacherpass"}


class AppTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(TestConfig)
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.admin, _ = ensure_user("admin", PASSWORDS["admin"], "admin")
        self.teacher, _ = ensure_user("teacher", PASSWORDS["teacher"], "teacher")
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def login(self, username="admin"):
        response = self.client.post("/auth/login", json={"username": username, "password": PASSWORDS[username]})
        self.assertEqual(response.status_code, 200, response.get_json())
        return response

    def caller(self, username="admin"):
        return Caller.from_user(User.query.filter_by(username=username).first())

    def make_student(self, nis, name, class_name="X-1", gender=GenderEnum.L, is_active=True):
        student = Student(
            nis=nis,
            name=name,
            class_name=class_name,
            gender=gender,
            qr_code=Student.token_for(nis),
            is_active=is_active,
        )
        db.session.add(student)
        db.session.commit()
        return student

    def make_record(self, student, status, when, notes=None):
        if isinstance(status, str):
            status = AttendanceStatus(status)
        record = AttendanceRecord(
            student_id=student.id,
            date=when.date(),
            time=when,
            status=status,
            notes=notes,
            recorded_by=self.teacher.id,
        )
        db.session.add(record)
        db.session.commit()
        return record


def at(year, month, day, hour=7, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second)
