"""Attendance service - Collection reads and schedule conversion"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    AttendanceCollection,
    AttendanceResponse,
    AttendanceTargetDate,
    generate_id,
    generate_public_token,
)
from ...shared.clock import Clock, SystemClock
from ...shared.errors import NotFoundError, ValidationError
from ...shared.transaction import TransactionManager
from ...shared.validators import format_hhmm, parse_id
from ..members.repository import MemberGroupRepository
from ..schedules.repository import ScheduleRepository
from .conversion import (
    COLLECTION_STATUS_OPEN,
    TARGET_TYPE_EVENT,
    build_target_responses,
    index_responses,
    select_candidates,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service layer for reading attendance collections"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AttendanceRepository()

    def get_collection(self, tenant_id: str, collection_id: str) -> AttendanceCollection:
        collection_id = parse_id(collection_id, "collection_id")
        collection = self.repo.get_collection_by_id(self.db, tenant_id, collection_id)
        if not collection:
            raise NotFoundError.for_resource("Attendance collection", collection_id)
        return collection

    def get_responses(self, tenant_id: str, collection_id: str) -> list[AttendanceResponse]:
        collection = self.get_collection(tenant_id, collection_id)
        return self.repo.get_responses(self.db, collection.id)


class AttendanceConversionService:
    """Turns a date schedule into a new, independent attendance collection"""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        tx: Optional[TransactionManager] = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.tx = tx or TransactionManager(db)
        self.repo = AttendanceRepository()
        self.schedule_repo = ScheduleRepository()
        self.member_repo = MemberGroupRepository()

    def convert_schedule(
        self,
        tenant_id: str,
        schedule_id: str,
        candidate_ids: list[str],
        title: Optional[str] = None,
    ) -> dict:
        """
        Convert selected candidates of a schedule into an attendance collection.

        Every selected candidate becomes a target date. Each target date gets a
        response for everyone who answered that candidate and for every member of
        the schedule's groups: answers map available->attending,
        unavailable->absent and anything else->undecided, keeping the original
        note and time; members without an answer start out undecided.

        Runs in a single transaction. Converting the same schedule twice creates
        two collections.

        Raises:
            ValidationError: Malformed IDs, nothing selected, or a candidate not on the schedule
            NotFoundError: Schedule does not exist in the tenant
        """
        schedule_id = parse_id(schedule_id, "schedule_id")
        if not candidate_ids:
            raise ValidationError("at least one candidate_id is required")
        requested = [parse_id(cid, "candidate_id") for cid in candidate_ids]

        logger.info(
            f"🔄 Converting schedule {schedule_id} to attendance "
            f"(tenant={tenant_id}, candidates={len(requested)})"
        )

        def _convert(db: Session) -> dict:
            schedule = self.schedule_repo.get_schedule_by_id(db, tenant_id, schedule_id)
            if not schedule:
                raise NotFoundError.for_resource("Schedule", schedule_id)

            selected = select_candidates(schedule.candidates, requested)
            group_assignments = self.schedule_repo.get_group_assignments(db, schedule.id)
            responses = self.schedule_repo.get_responses(db, schedule.id)
            now = self.clock.now()

            collection = self.repo.add_collection(
                db,
                AttendanceCollection(
                    id=generate_id(),
                    tenant_id=tenant_id,
                    title=title or schedule.title,
                    description=schedule.description,
                    target_type=TARGET_TYPE_EVENT,
                    target_id=schedule.event_id,
                    public_token=generate_public_token(),
                    status=COLLECTION_STATUS_OPEN,
                    deadline=schedule.deadline,
                    created_at=now,
                    updated_at=now,
                ),
            )

            # Target dates get fresh IDs; this map only lives for the conversion
            target_dates = []
            target_date_ids = {}
            for order, candidate in enumerate(selected):
                target_date = AttendanceTargetDate(
                    id=generate_id(),
                    collection_id=collection.id,
                    target_date=candidate.candidate_date,
                    start_time=format_hhmm(candidate.start_time),
                    end_time=format_hhmm(candidate.end_time),
                    display_order=order,
                    created_at=now,
                )
                target_dates.append(target_date)
                target_date_ids[candidate.id] = target_date.id
            self.repo.save_target_dates(db, collection, target_dates)

            group_ids = [a.group_id for a in group_assignments]
            self.repo.save_group_assignments(db, collection, group_ids, now)

            group_member_ids: set[str] = set()
            for group_id in group_ids:
                group_member_ids.update(
                    self.member_repo.get_member_ids_by_group_id(db, tenant_id, group_id)
                )

            by_candidate = index_responses(responses)
            carried = synthesized = 0
            for candidate in selected:
                rows = build_target_responses(
                    by_candidate.get(candidate.id, {}), group_member_ids, now
                )
                for row in rows:
                    self.repo.upsert_response(
                        db,
                        tenant_id=tenant_id,
                        collection_id=collection.id,
                        member_id=row.member_id,
                        target_date_id=target_date_ids[candidate.id],
                        response=row.response,
                        note=row.note,
                        responded_at=row.responded_at,
                        now=now,
                    )
                    if row.answered:
                        carried += 1
                    else:
                        synthesized += 1

            logger.info(
                f"✅ [AUDIT] ConvertToAttendance: tenant={tenant_id} schedule={schedule.id} "
                f"collection={collection.id} target_dates={len(target_dates)} "
                f"responses={carried} undecided_added={synthesized}"
            )
            return {
                "collectionId": collection.id,
                "publicToken": collection.public_token,
                "title": collection.title,
            }

        return self.tx.with_tx(_convert)
