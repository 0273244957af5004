from .base import ActiveFlagMixin, UserRole, GenderEnum, AttendanceStatus
from .User import User, TokenBlocklist
from .Student import Student
from .AttendanceRecord import AttendanceRecord
