from datetime import datetime
from attendance.extensions import db
from .base import AttendanceStatus


class AttendanceRecord(db.Model):
    __tablename__ = 'attendance_records'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    time = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)
    recorded_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.now)

    student = db.relationship('Student', back_populates='attendance_records')
    recorder = db.relationship('User', back_populates='recorded_attendance')
