"""
Attendance aggregation: the daily dashboard snapshot, the per-student report
over a date range and the CSV export of attendance rows.

Every record counts once under its own status. Several records for the same
student on the same day are separate events and are never collapsed.
"""
import io
import math
from collections import Counter
from dataclasses import dataclass
from datetime import date

from attendance.models import AttendanceStatus
from attendance.store import AttendanceFilter, StudentFilter, as_day

STATUS_ORDER = (
    AttendanceStatus.present,
    AttendanceStatus.late,
    AttendanceStatus.sick,
    AttendanceStatus.permission,
    AttendanceStatus.absent,
)

CSV_HEADER = ("Tanggal", "Waktu", "Nama Siswa", "NIS", "Kelas", "Status", "Keterangan")


def round1(value):
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    late: int = 0
    sick: int = 0
    permission: int = 0
    absent: int = 0

    @classmethod
    def tally(cls, records):
        counter = Counter(record.status for record in records)
        return cls(**{status.value: counter.get(status, 0) for status in STATUS_ORDER})

    @property
    def total(self):
        return self.present + self.late + self.sick + self.permission + self.absent

    @property
    def attended(self):
        return self.present + self.late

    @property
    def percentage(self):
        if self.total == 0:
            return 0
        return round1(self.attended / self.total * 100)


@dataclass(frozen=True)
class DailyStats:
    day: date
    total_students: int
    counts: StatusCounts

    def to_dict(self):
        return {
            "date": self.day.isoformat(),
            "totalStudents": self.total_students,
            "presentToday": self.counts.present,
            "lateToday": self.counts.late,
            "absentToday": self.counts.absent,
            "sickToday": self.counts.sick,
            "permissionToday": self.counts.permission,
        }


@dataclass(frozen=True)
class ReportRow:
    student: object
    counts: StatusCounts

    @property
    def percentage(self):
        return self.counts.percentage

    def to_dict(self):
        return {
            "student": self.student.to_dict(),
            "present": self.counts.present,
            "late": self.counts.late,
            "sick": self.counts.sick,
            "permission": self.counts.permission,
            "absent": self.counts.absent,
            "totalDays": self.counts.total,
            "percentage": self.counts.percentage,
        }


def compute_daily_stats(store, day, active_student_count=None):
    """
    Count the records of one calendar day per status.

    totalStudents is the number of active students whether or not they were
    scanned that day; a student without a record is not counted as absent.
    """
    day = as_day(day)
    if active_student_count is None:
        active_student_count = store.count_students(StudentFilter(is_active=True))

    records = store.list_attendance(AttendanceFilter(day=day))
    return DailyStats(day=day, total_students=active_student_count, counts=StatusCounts.tally(records))


def compute_attendance_report(store, start_date=None, end_date=None, class_name=None):
    """
    One row per active student (optionally of one class), in the store's
    student order, with status counts over [start_date, end_date].

    Students without records in range still get an all-zero row.
    """
    students = store.list_students(StudentFilter(class_name=class_name, is_active=True))
    records = store.list_attendance(
        AttendanceFilter(start_date=start_date, end_date=end_date, class_name=class_name)
    )

    by_student = {}
    for record in records:
        by_student.setdefault(record.student.id, []).append(record)

    return [
        ReportRow(student=student, counts=StatusCounts.tally(by_student.get(student.id, ())))
        for student in students
    ]


def summarize_report(rows, threshold=75):
    if not rows:
        return {
            "students": 0, "averagePercentage": 0, "belowThreshold": 0, "totalLate": 0, "threshold": threshold
        }

    average = sum(row.percentage for row in rows) / len(rows)
    return {
        "students": len(rows),
        "averagePercentage": round1(average),
        "belowThreshold": sum(1 for row in rows if row.percentage < threshold),
        "totalLate": sum(row.counts.late for row in rows),
        "threshold": threshold,
    }


def _quoted(value):
    return '"' + (value or "").replace('"', '""') + '"'


def format_csv_date(value):
    return f"{value.day}/{value.month}/{value.year}"


def format_csv_time(value):
    return value.strftime("%H.%M.%S")


def export_attendance_csv(records):
    """
    Render attendance rows as CSV text. The header line is always present;
    name, class and notes are quoted, status is the raw enum value. Lines are
    newline separated, with no newline after the last one.
    """
    out = io.StringIO()
    out.write(",".join(CSV_HEADER))
    for record in records:
        out.write("\n")
        out.write(",".join([
            format_csv_date(record.date),
            format_csv_time(record.time),
            _quoted(record.student.name),
            record.student.nis,
            _quoted(record.student.class_name),
            record.status.value,
            _quoted(record.notes),
        ]))
    return out.getvalue()
