"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from libcard.lifecycle import StudentChanges, StudentDetails

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Student models


class StudentCreate(BaseModel):
    """Request model for registering a student."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    student_number: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    course: str = Field(..., min_length=1, max_length=255)
    year: str = Field(..., min_length=1, max_length=32)
    gender: str = Field(default="", max_length=32)
    section: str = Field(default="", max_length=64)
    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)
    birthday: str = Field(default="", max_length=32)
    card_expiry: str = Field(default="", max_length=32)
    photo: str = ""
    registered_date: str | None = Field(default=None, max_length=32)
    registered_time: str | None = Field(default=None, max_length=32)
    registered_datetime: AwareDatetime | None = None

    def to_details(self) -> StudentDetails:
        return StudentDetails(**self.model_dump())


class StudentUpdate(BaseModel):
    """Request model for updating a student (partial update).

    The student number is fixed at registration and is rejected here.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    gender: str | None = Field(default=None, max_length=32)
    course: str | None = Field(default=None, min_length=1, max_length=255)
    year: str | None = Field(default=None, min_length=1, max_length=32)
    section: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    birthday: str | None = Field(default=None, max_length=32)
    card_expiry: str | None = Field(default=None, max_length=32)
    photo: str | None = None
    is_new: bool | None = None

    def to_changes(self) -> StudentChanges:
        return StudentChanges(**self.model_dump())


class StudentResponse(BaseModel):
    """Response model for an active student."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_number: str
    name: str
    gender: str
    course: str
    year: str
    section: str
    email: str
    phone: str
    birthday: str
    card_expiry: str
    photo: str
    registered_date: str
    registered_time: str
    registered_datetime: str
    is_new: bool
    created_at: datetime


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


class ArchivedStudentResponse(BaseModel):
    """Response model for an archived student."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    original_id: int | None
    student_number: str
    name: str
    gender: str
    course: str
    year: str
    section: str
    email: str
    phone: str
    birthday: str
    card_expiry: str
    photo: str
    registered_date: str
    registered_time: str
    registered_datetime: str
    archived_date: str
    archived_time: str
    created_at: datetime


def archived_to_response(archived: Any) -> ArchivedStudentResponse:
    """Convert an ArchivedStudent model to ArchivedStudentResponse."""
    return ArchivedStudentResponse.model_validate(archived)


class ConfirmationResponse(BaseModel):
    """Response model for archive/restore/purge."""

    model_config = ConfigDict(from_attributes=True)

    message: str
    record_id: int


def confirmation_to_response(confirmation: Any) -> ConfirmationResponse:
    """Convert a Confirmation to ConfirmationResponse."""
    return ConfirmationResponse.model_validate(confirmation)


# Activity models


class ActivityCreate(BaseModel):
    """Request model for appending an activity entry."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    action: str = Field(..., min_length=1, max_length=64)
    details: str | None = None


class ActivityResponse(BaseModel):
    """Response model for an activity entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    details: str | None
    timestamp: datetime


def activity_to_response(entry: Any) -> ActivityResponse:
    """Convert an ActivityEntry model to ActivityResponse."""
    return ActivityResponse.model_validate(entry)


# Settings models


class SettingUpdate(BaseModel):
    """Request model for writing a setting. The whole value is replaced."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    value: str | None


class SettingResponse(BaseModel):
    """Response model for a setting."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str | None
    updated_at: datetime


def setting_to_response(setting: Any) -> SettingResponse:
    """Convert a Setting model to SettingResponse."""
    return SettingResponse.model_validate(setting)
