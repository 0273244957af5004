from datetime import datetime
from attendance.extensions import db
from .base import ActiveFlagMixin, GenderEnum

QR_TOKEN_PREFIX = "STD_"


class Student(db.Model, ActiveFlagMixin):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    nis = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False, index=True)
    class_name = db.Column('class', db.String(50), nullable=False, index=True)
    gender = db.Column(db.Enum(GenderEnum), nullable=False)
    birth_date = db.Column(db.Date, nullable=True)
    address = db.Column(db.Text, nullable=True)
    qr_code = db.Column(db.String(80), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.now)

    attendance_records = db.relationship('AttendanceRecord', back_populates='student', lazy=True)

    @staticmethod
    def token_for(nis):
        return f"{QR_TOKEN_PREFIX}{nis}"
