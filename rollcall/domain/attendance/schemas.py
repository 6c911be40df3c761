"""Attendance domain schemas - Pydantic models for responses"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class TargetDateOut(BaseModel):
    targetDateId: str
    date: date
    startTime: Optional[str] = None  # HH:MM
    endTime: Optional[str] = None
    displayOrder: int


class CollectionOut(BaseModel):
    collectionId: str
    tenantId: str
    title: str
    description: Optional[str]
    targetType: str
    targetId: Optional[str] = None
    publicToken: str
    status: str
    deadline: Optional[datetime] = None
    targetDates: list[TargetDateOut]
    groupIds: list[str] = []
    createdAt: datetime
    updatedAt: datetime


class AttendanceResponseOut(BaseModel):
    responseId: str
    memberId: str
    targetDateId: str
    response: str
    note: str
    availableFrom: Optional[str] = None
    availableTo: Optional[str] = None
    respondedAt: datetime


class CollectionResponsesOut(BaseModel):
    collectionId: str
    responses: list[AttendanceResponseOut]
