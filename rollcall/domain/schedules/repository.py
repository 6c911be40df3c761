"""Schedule repository - Database operations for date schedules.

Methods flush or execute but never commit; the calling service owns the transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...database import upsert_insert
from ...models import (
    DateSchedule,
    ScheduleCandidate,
    ScheduleGroupAssignment,
    ScheduleResponse,
    generate_id,
)
from .candidates import CandidatePlan
from .state import STATUS_DELETED


class ScheduleRepository:
    """Repository for date schedule database operations"""

    @staticmethod
    def get_schedules(db: Session, tenant_id: str) -> list[DateSchedule]:
        """Get all non-deleted schedules for a tenant, newest first"""
        return (
            db.query(DateSchedule)
            .options(selectinload(DateSchedule.candidates))
            .filter(
                DateSchedule.tenant_id == tenant_id,
                DateSchedule.deleted_at.is_(None),
                DateSchedule.status != STATUS_DELETED,
            )
            .order_by(DateSchedule.created_at.desc())
            .all()
        )

    @staticmethod
    def get_schedule_by_id(db: Session, tenant_id: str, schedule_id: str) -> Optional[DateSchedule]:
        """Get a non-deleted schedule within a tenant"""
        return (
            db.query(DateSchedule)
            .options(
                selectinload(DateSchedule.candidates),
                selectinload(DateSchedule.group_assignments),
            )
            .filter(
                DateSchedule.id == schedule_id,
                DateSchedule.tenant_id == tenant_id,
                DateSchedule.deleted_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def get_schedule_by_token(db: Session, public_token: str) -> Optional[DateSchedule]:
        """Get a non-deleted schedule by its public token"""
        return (
            db.query(DateSchedule)
            .options(selectinload(DateSchedule.candidates))
            .filter(DateSchedule.public_token == public_token, DateSchedule.deleted_at.is_(None))
            .first()
        )

    @staticmethod
    def add_schedule(db: Session, schedule: DateSchedule) -> DateSchedule:
        db.add(schedule)
        db.flush()
        return schedule

    @staticmethod
    def apply_candidate_plan(db: Session, schedule: DateSchedule, plan: CandidatePlan) -> None:
        """
        Persist a reconciled candidate list: reorder kept candidates, insert new
        ones, delete removed ones together with their responses.
        """
        current = {c.id: c for c in schedule.candidates}

        removed_ids = plan.removed_ids
        if removed_ids:
            db.query(ScheduleResponse).filter(
                ScheduleResponse.schedule_id == schedule.id,
                ScheduleResponse.candidate_id.in_(removed_ids),
            ).delete(synchronize_session=False)

        ordered = []
        for planned in plan.candidates:
            candidate = current.get(planned.id)
            if candidate is None:
                candidate = ScheduleCandidate(
                    id=planned.id,
                    schedule_id=schedule.id,
                    candidate_date=planned.candidate_date,
                    start_time=planned.start_time,
                    end_time=planned.end_time,
                    created_at=planned.created_at,
                )
            candidate.display_order = planned.display_order
            ordered.append(candidate)

        # delete-orphan removes candidates dropped from the collection
        schedule.candidates = ordered
        db.flush()

    @staticmethod
    def replace_group_assignments(
        db: Session, schedule: DateSchedule, group_ids: list[str], now: datetime
    ) -> None:
        """Replace the schedule's group assignments"""
        keep = set(group_ids)
        assignments = [a for a in schedule.group_assignments if a.group_id in keep]
        existing = {a.group_id for a in assignments}
        for group_id in group_ids:
            if group_id not in existing:
                assignments.append(
                    ScheduleGroupAssignment(schedule_id=schedule.id, group_id=group_id, created_at=now)
                )
                existing.add(group_id)
        schedule.group_assignments = assignments
        db.flush()

    @staticmethod
    def get_group_assignments(db: Session, schedule_id: str) -> list[ScheduleGroupAssignment]:
        return (
            db.query(ScheduleGroupAssignment)
            .filter(ScheduleGroupAssignment.schedule_id == schedule_id)
            .order_by(ScheduleGroupAssignment.created_at, ScheduleGroupAssignment.group_id)
            .all()
        )

    # Response Methods
    @staticmethod
    def get_responses(db: Session, schedule_id: str) -> list[ScheduleResponse]:
        """Get all responses for a schedule"""
        return (
            db.query(ScheduleResponse)
            .filter(ScheduleResponse.schedule_id == schedule_id)
            .order_by(ScheduleResponse.member_id, ScheduleResponse.candidate_id)
            .all()
        )

    @staticmethod
    def get_responded_candidate_ids(
        db: Session, schedule_id: str, candidate_ids: list[str]
    ) -> set[str]:
        """Subset of ``candidate_ids`` referenced by at least one response"""
        if not candidate_ids:
            return set()
        rows = (
            db.query(ScheduleResponse.candidate_id)
            .filter(
                ScheduleResponse.schedule_id == schedule_id,
                ScheduleResponse.candidate_id.in_(candidate_ids),
            )
            .distinct()
            .all()
        )
        return {row.candidate_id for row in rows}

    @staticmethod
    def upsert_response(
        db: Session,
        tenant_id: str,
        schedule_id: str,
        member_id: str,
        candidate_id: str,
        availability: str,
        note: str,
        responded_at: datetime,
    ) -> None:
        """Insert or overwrite the response for (schedule, member, candidate) in one statement"""
        stmt = upsert_insert(db, ScheduleResponse.__table__).values(
            id=generate_id(),
            tenant_id=tenant_id,
            schedule_id=schedule_id,
            member_id=member_id,
            candidate_id=candidate_id,
            availability=availability,
            note=note,
            responded_at=responded_at,
            created_at=responded_at,
            updated_at=responded_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["schedule_id", "member_id", "candidate_id"],
            set_={
                "availability": stmt.excluded.availability,
                "note": stmt.excluded.note,
                "responded_at": stmt.excluded.responded_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)
