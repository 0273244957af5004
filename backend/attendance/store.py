"""
Repository layer over students and attendance records.

Both stores expose the same read interface and return frozen value rows, so
the report engine never sees ORM instances:

    list_students(StudentFilter) -> [StudentRow]      ordered by name
    list_attendance(AttendanceFilter) -> [AttendanceRow]  newest scan first
    count_students(StudentFilter) -> int
    class_names(StudentFilter) -> [str]
    count_by(field, StudentFilter) -> {value: int}

SqlStore reads through the Flask-SQLAlchemy session, MemoryStore keeps plain
lists and is used where a database would only get in the way.
"""
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func

from attendance.extensions import db
from attendance.models import Student, AttendanceRecord, AttendanceStatus, GenderEnum
from attendance.utils.pagination import apply_search


def as_day(value):
    """Drop the time-of-day part; a calendar day covers 00:00:00.000 to 23:59:59.999."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def _plain(value):
    return value.value if hasattr(value, "value") else value


@dataclass(frozen=True)
class StudentFilter:
    search: Optional[str] = None
    class_name: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class AttendanceFilter:
    student_id: Optional[int] = None
    day: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None
    class_name: Optional[str] = None

    def __post_init__(self):
        # frozen dataclass, so normalise through object.__setattr__
        for name in ("day", "start_date", "end_date"):
            object.__setattr__(self, name, as_day(getattr(self, name)))
        if isinstance(self.status, str):
            object.__setattr__(self, "status", AttendanceStatus(self.status))


@dataclass(frozen=True)
class StudentRow:
    id: int
    nis: str
    name: str
    class_name: str
    gender: GenderEnum
    qr_code: str
    is_active: bool = True
    birth_date: Optional[date] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, student):
        return cls(
            id=student.id,
            nis=student.nis,
            name=student.name,
            class_name=student.class_name,
            gender=student.gender,
            qr_code=student.qr_code,
            is_active=bool(student.is_active),
            birth_date=student.birth_date,
            address=student.address,
            created_at=student.created_at,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "nis": self.nis,
            "name": self.name,
            "class": self.class_name,
            "gender": self.gender.value if self.gender else None,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "address": self.address,
            "qr_code": self.qr_code,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class AttendanceRow:
    id: int
    student: StudentRow
    date: date
    time: datetime
    status: AttendanceStatus
    notes: Optional[str] = None
    recorded_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def student_id(self):
        return self.student.id

    @classmethod
    def from_model(cls, record, student=None):
        return cls(
            id=record.id,
            student=student or StudentRow.from_model(record.student),
            date=record.date,
            time=record.time,
            status=record.status,
            notes=record.notes,
            recorded_by=record.recorded_by,
            created_at=record.created_at,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "date": self.date.isoformat(),
            "time": self.time.isoformat(),
            "status": self.status.value,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "student": self.student.to_dict(),
        }


class SqlStore:
    def __init__(self, session=None):
        self.session = session or db.session

    def _student_query(self, filters):
        query = self.session.query(Student)
        query = apply_search(query, Student, filters.search, ["name", "nis"])
        if filters.class_name:
            query = query.filter(Student.class_name == filters.class_name)
        if filters.is_active is not None:
            query = query.filter(Student.is_active == filters.is_active)
        return query

    def list_students(self, filters=None) -> List[StudentRow]:
        query = self._student_query(filters or StudentFilter())
        return [StudentRow.from_model(s) for s in query.order_by(Student.name, Student.id).all()]

    def count_students(self, filters=None) -> int:
        return self._student_query(filters or StudentFilter()).count()

    def list_attendance(self, filters=None) -> List[AttendanceRow]:
        filters = filters or AttendanceFilter()
        query = self.session.query(AttendanceRecord, Student).join(
            Student, AttendanceRecord.student_id == Student.id
        )

        if filters.student_id is not None:
            query = query.filter(AttendanceRecord.student_id == filters.student_id)
        if filters.day:
            query = query.filter(AttendanceRecord.date == filters.day)
        if filters.start_date:
            query = query.filter(AttendanceRecord.date >= filters.start_date)
        if filters.end_date:
            query = query.filter(AttendanceRecord.date <= filters.end_date)
        if filters.status:
            query = query.filter(AttendanceRecord.status == filters.status)
        if filters.class_name:
            query = query.filter(Student.class_name == filters.class_name)

        rows = query.order_by(AttendanceRecord.time.desc(), AttendanceRecord.id.desc()).all()

        students = {}
        result = []
        for record, student in rows:
            if student.id not in students:
                students[student.id] = StudentRow.from_model(student)
            result.append(AttendanceRow.from_model(record, students[student.id]))
        return result

    def class_names(self, filters=None):
        query = self._student_query(filters or StudentFilter())
        rows = (
            query.with_entities(Student.class_name)
            .distinct()
            .order_by(Student.class_name)
            .all()
        )
        return [row[0] for row in rows]

    def count_by(self, field, filters=None):
        """Student counts grouped by one StudentRow field, e.g. "class_name"."""
        column = getattr(Student, field)
        query = self._student_query(filters or StudentFilter())
        return {
            _plain(key): count
            for key, count in query.with_entities(column, func.count(Student.id)).group_by(column).all()
        }


class MemoryStore:
    def __init__(self, students=None, records=None):
        self.students = list(students or [])
        self.records = list(records or [])

    def add_student(self, student):
        self.students.append(student)
        return student

    def add_record(self, record):
        self.records.append(record)
        return record

    @staticmethod
    def _student_matches(student, filters):
        if filters.search:
            needle = filters.search.casefold()
            if needle not in student.name.casefold() and needle not in student.nis.casefold():
                return False
        if filters.class_name and student.class_name != filters.class_name:
            return False
        if filters.is_active is not None and student.is_active != filters.is_active:
            return False
        return True

    @staticmethod
    def _record_matches(record, filters):
        if filters.student_id is not None and record.student.id != filters.student_id:
            return False
        if filters.day and record.date != filters.day:
            return False
        if filters.start_date and record.date < filters.start_date:
            return False
        if filters.end_date and record.date > filters.end_date:
            return False
        if filters.status and record.status != filters.status:
            return False
        if filters.class_name and record.student.class_name != filters.class_name:
            return False
        return True

    def list_students(self, filters=None):
        filters = filters or StudentFilter()
        matches = [s for s in self.students if self._student_matches(s, filters)]
        return sorted(matches, key=lambda s: (s.name, s.id))

    def count_students(self, filters=None):
        return len(self.list_students(filters))

    def list_attendance(self, filters=None):
        filters = filters or AttendanceFilter()
        matches = [r for r in self.records if self._record_matches(r, filters)]
        return sorted(matches, key=lambda r: (r.time, r.id), reverse=True)

    def class_names(self, filters=None):
        return sorted({s.class_name for s in self.list_students(filters)})

    def count_by(self, field, filters=None):
        return dict(Counter(_plain(getattr(s, field)) for s in self.list_students(filters)))
