import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a new entity ID"""
    return str(uuid.uuid4())


def generate_public_token():
    """Generate an unguessable token for public (unauthenticated) access"""
    return str(uuid.uuid4())


# ============================================================================
# MEMBERS
# ============================================================================


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class MemberGroup(Base):
    __tablename__ = "member_groups"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    memberships = relationship(
        "MemberGroupMembership", back_populates="group", cascade="all, delete-orphan"
    )


class MemberGroupMembership(Base):
    __tablename__ = "member_group_memberships"

    group_id = Column(
        String(36), ForeignKey("member_groups.id", ondelete="CASCADE"), primary_key=True
    )
    member_id = Column(
        String(36), ForeignKey("members.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_at = Column(DateTime, server_default=func.now())

    group = relationship("MemberGroup", back_populates="memberships")


# ============================================================================
# DATE SCHEDULES
# ============================================================================


class DateSchedule(Base):
    __tablename__ = "date_schedules"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_id = Column(String(36), nullable=True)  # Optional event this schedule is for
    public_token = Column(
        String(36), unique=True, index=True, nullable=False, default=generate_public_token
    )
    status = Column(String(20), nullable=False, default="open")  # open, closed, decided, deleted
    deadline = Column(DateTime, nullable=True)  # Naive UTC
    decided_candidate_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    candidates = relationship(
        "ScheduleCandidate",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleCandidate.display_order",
    )
    group_assignments = relationship(
        "ScheduleGroupAssignment", back_populates="schedule", cascade="all, delete-orphan"
    )


class ScheduleCandidate(Base):
    __tablename__ = "schedule_candidates"

    id = Column(String(36), primary_key=True, default=generate_id)
    schedule_id = Column(
        String(36), ForeignKey("date_schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    candidate_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)

    schedule = relationship("DateSchedule", back_populates="candidates")


class ScheduleResponse(Base):
    __tablename__ = "schedule_responses"
    __table_args__ = (
        UniqueConstraint(
            "schedule_id", "member_id", "candidate_id", name="uq_schedule_response_member_candidate"
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False)
    schedule_id = Column(
        String(36), ForeignKey("date_schedules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    candidate_id = Column(
        String(36), ForeignKey("schedule_candidates.id", ondelete="CASCADE"), nullable=False
    )
    availability = Column(String(20), nullable=False)  # available, unavailable, maybe
    note = Column(Text, nullable=False, default="")
    responded_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class ScheduleGroupAssignment(Base):
    __tablename__ = "date_schedule_group_assignments"

    schedule_id = Column(
        String(36), ForeignKey("date_schedules.id", ondelete="CASCADE"), primary_key=True
    )
    group_id = Column(
        String(36), ForeignKey("member_groups.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime, nullable=False)

    schedule = relationship("DateSchedule", back_populates="group_assignments")


# ============================================================================
# ATTENDANCE COLLECTIONS
# ============================================================================


class AttendanceCollection(Base):
    __tablename__ = "attendance_collections"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    target_type = Column(String(20), nullable=False, default="event")  # event, business_day
    target_id = Column(String(36), nullable=True)
    public_token = Column(
        String(36), unique=True, index=True, nullable=False, default=generate_public_token
    )
    status = Column(String(20), nullable=False, default="open")  # open, closed
    deadline = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    target_dates = relationship(
        "AttendanceTargetDate",
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="AttendanceTargetDate.display_order",
    )
    group_assignments = relationship(
        "CollectionGroupAssignment", back_populates="collection", cascade="all, delete-orphan"
    )


class AttendanceTargetDate(Base):
    __tablename__ = "attendance_target_dates"

    id = Column(String(36), primary_key=True, default=generate_id)
    collection_id = Column(
        String(36),
        ForeignKey("attendance_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    target_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)  # HH:MM format
    end_time = Column(String(5), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)

    collection = relationship("AttendanceCollection", back_populates="target_dates")


class AttendanceResponse(Base):
    __tablename__ = "attendance_responses"
    __table_args__ = (
        UniqueConstraint(
            "collection_id",
            "member_id",
            "target_date_id",
            name="uq_attendance_response_member_target_date",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), nullable=False)
    collection_id = Column(
        String(36),
        ForeignKey("attendance_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    target_date_id = Column(
        String(36), ForeignKey("attendance_target_dates.id", ondelete="CASCADE"), nullable=False
    )
    response = Column(String(20), nullable=False)  # attending, absent, undecided
    note = Column(Text, nullable=False, default="")
    available_from = Column(String(5), nullable=True)  # HH:MM format
    available_to = Column(String(5), nullable=True)
    responded_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class CollectionGroupAssignment(Base):
    __tablename__ = "attendance_collection_group_assignments"

    collection_id = Column(
        String(36), ForeignKey("attendance_collections.id", ondelete="CASCADE"), primary_key=True
    )
    group_id = Column(
        String(36), ForeignKey("member_groups.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = Column(DateTime, nullable=False)

    collection = relationship("AttendanceCollection", back_populates="group_assignments")
