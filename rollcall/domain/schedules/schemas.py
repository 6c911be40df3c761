"""Schedule domain schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import normalize_id, to_naive_utc
from ...utils.sanitization import sanitize_string, sanitize_text


def _clean_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("title is required")
    if len(v) > 255:
        raise ValueError("title must be less than 255 characters")
    return sanitize_string(v)


class CandidateInput(BaseModel):
    """One desired candidate date; identity is (date, startTime, endTime)"""

    date: date
    startTime: Optional[time] = None
    endTime: Optional[time] = None

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_local_time(cls, v):
        # Wall-clock times of the event
        if v is not None and v.utcoffset() is not None:
            raise ValueError("time must not carry a UTC offset")
        return v


class ScheduleCreate(BaseModel):
    """Schema for creating a date schedule"""

    title: str
    description: Optional[str] = None
    eventId: Optional[str] = None
    candidates: list[CandidateInput] = Field(min_length=1)
    deadline: Optional[datetime] = None
    groupIds: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return sanitize_text(v)

    @field_validator("eventId")
    @classmethod
    def validate_event_id(cls, v):
        if v is None:
            return v
        normalized = normalize_id(v)
        if normalized is None:
            raise ValueError("invalid eventId")
        return normalized

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v):
        return to_naive_utc(v)


class ScheduleUpdate(BaseModel):
    """Schema for updating a schedule. Omitted fields are left unchanged."""

    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    clearDeadline: bool = False
    candidates: Optional[list[CandidateInput]] = None
    groupIds: Optional[list[str]] = None
    forceDeleteCandidateResponses: bool = False

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v):
        return to_naive_utc(v)


class DecideRequest(BaseModel):
    candidateId: str


class ResponseEntry(BaseModel):
    candidateId: str
    availability: str  # available, unavailable, maybe - checked by the service
    note: Optional[str] = ""

    @field_validator("note")
    @classmethod
    def validate_note(cls, v):
        return sanitize_text(v, max_length=1000)


class SubmitResponsesRequest(BaseModel):
    """Public response submission (token in the URL path)"""

    memberId: str
    responses: list[ResponseEntry]


class ConvertToAttendanceRequest(BaseModel):
    candidateIds: list[str] = Field(min_length=1)
    title: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is None or not v.strip():
            return None
        return _clean_title(v)


class CandidateOut(BaseModel):
    candidateId: str
    date: date
    startTime: Optional[time] = None
    endTime: Optional[time] = None
    displayOrder: int


class ScheduleOut(BaseModel):
    scheduleId: str
    tenantId: str
    title: str
    description: Optional[str]
    eventId: Optional[str] = None
    publicToken: str
    status: str
    deadline: Optional[datetime] = None
    decidedCandidateId: Optional[str] = None
    candidates: list[CandidateOut]
    groupIds: list[str] = []
    createdAt: datetime
    updatedAt: datetime
    deletedAt: Optional[datetime] = None


class PublicScheduleOut(BaseModel):
    """What a token holder sees; no tenant or group details"""

    scheduleId: str
    title: str
    description: Optional[str]
    status: str
    deadline: Optional[datetime] = None
    decidedCandidateId: Optional[str] = None
    candidates: list[CandidateOut]


class ScheduleResponseOut(BaseModel):
    responseId: str
    memberId: str
    candidateId: str
    availability: str
    note: str
    respondedAt: datetime


class ScheduleResponsesOut(BaseModel):
    scheduleId: str
    responses: list[ScheduleResponseOut]


class PublicResponseOut(BaseModel):
    memberId: str
    memberName: str
    candidateId: str
    availability: str
    note: str


class PublicResponsesOut(BaseModel):
    responses: list[PublicResponseOut]


class SubmitResponseResult(BaseModel):
    scheduleId: str
    memberId: str
    respondedAt: datetime


class ConvertToAttendanceResult(BaseModel):
    collectionId: str
    publicToken: str
    title: str
