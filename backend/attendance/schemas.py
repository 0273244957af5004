import datetime as dt
from typing import Annotated, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from attendance.errors import ValidationFailed
from attendance.models import AttendanceStatus, GenderEnum
from attendance.store import AttendanceFilter, StudentFilter, as_day


def _calendar_day(value):
    # "2025-01-06T15:30:00" and "2025-01-06T08:30:00.000Z" both mean 2025-01-06
    if isinstance(value, str) and ("T" in value or " " in value.strip()):
        value = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return as_day(value)


Day = Annotated[Optional[dt.date], BeforeValidator(_calendar_day)]


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid", populate_by_name=True)


class QueryModel(BaseModel):
    # query strings carry unrelated params (page, per_page, cache busters)
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class LoginRequest(RequestModel):
    username: str = Field(min_length=3, max_length=80, pattern=r"^[\w.@+-]+$")
    password: str = Field(min_length=1)


class StudentCreate(RequestModel):
    nis: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    class_name: str = Field(min_length=1, max_length=50, validation_alias=AliasChoices("class", "class_name"))
    gender: GenderEnum
    birth_date: Optional[dt.date] = Field(default=None, validation_alias=AliasChoices("birth_date", "birthDate"))
    address: Optional[str] = None
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"))


class StudentUpdate(RequestModel):
    """Partial update. NIS may be echoed back but never changed; the scan token is not accepted."""
    nis: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    class_name: Optional[str] = Field(
        default=None, min_length=1, max_length=50, validation_alias=AliasChoices("class", "class_name")
    )
    gender: Optional[GenderEnum] = None
    birth_date: Optional[dt.date] = Field(default=None, validation_alias=AliasChoices("birth_date", "birthDate"))
    address: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, validation_alias=AliasChoices("is_active", "isActive"))


class QrLookup(RequestModel):
    qr_code: str = Field(min_length=1, validation_alias=AliasChoices("qr_code", "qrCode"))


class AttendanceCreate(RequestModel):
    student_id: int = Field(validation_alias=AliasChoices("student_id", "studentId"))
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceUpdate(RequestModel):
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class StudentQuery(QueryModel):
    search: Optional[str] = None
    class_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("class", "class_name"))
    is_active: Optional[bool] = Field(default=None, validation_alias=AliasChoices("is_active", "isActive"))

    def to_filter(self):
        return StudentFilter(search=self.search, class_name=self.class_name, is_active=self.is_active)


class AttendanceQuery(QueryModel):
    student_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("student_id", "studentId"))
    date: Day = None
    start_date: Day = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Day = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    status: Optional[AttendanceStatus] = None
    class_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("class", "class_name"))

    def to_filter(self):
        return AttendanceFilter(
            student_id=self.student_id,
            day=self.date,
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
            class_name=self.class_name,
        )


class ReportQuery(QueryModel):
    start_date: Day = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Day = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    class_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("class", "class_name"))


class DayQuery(QueryModel):
    date: Day = None


def parse(model, data, message=None):
    """Validate a mapping against model, raising ValidationFailed with per-field errors."""
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e, message)


def parse_args(model, args):
    return parse(model, args.to_dict() if hasattr(args, "to_dict") else args, "Invalid query parameters")
