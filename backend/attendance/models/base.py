from datetime import datetime
from attendance.extensions import db
import enum


class ActiveFlagMixin:
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    deactivated_at = db.Column(db.DateTime)

    def deactivate(self):
        self.is_active = False
        self.deactivated_at = datetime.now()

    def restore(self):
        self.is_active = True
        self.deactivated_at = None


class UserRole(enum.Enum):
    admin = "admin"
    teacher = "teacher"


class GenderEnum(enum.Enum):
    L = "L"  # laki-laki
    P = "P"  # perempuan


class AttendanceStatus(enum.Enum):
    present = "present"
    late = "late"
    sick = "sick"
    permission = "permission"
    absent = "absent"
