"""Schedule service - Business logic for date coordination"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import DateSchedule, ScheduleResponse, generate_id, generate_public_token
from ...shared.clock import Clock, SystemClock
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ...shared.transaction import TransactionManager
from ...shared.validators import normalize_id, parse_id
from ..members.repository import MemberGroupRepository
from .availability import parse_availability
from .candidates import (
    DesiredCandidate,
    candidate_removal_message,
    find_blocking_candidate,
    reconcile_candidates,
)
from .repository import ScheduleRepository
from .schemas import CandidateInput, ResponseEntry, ScheduleCreate, ScheduleUpdate
from .state import (
    STATUS_OPEN,
    close_schedule,
    decide_schedule,
    delete_schedule,
    ensure_can_respond,
)

logger = logging.getLogger(__name__)

# Public callers never learn whether a token exists
PUBLIC_NOT_FOUND = "Schedule not found"


def _desired(candidates: list[CandidateInput]) -> list[DesiredCandidate]:
    return [DesiredCandidate(c.date, c.startTime, c.endTime) for c in candidates]


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        tx: Optional[TransactionManager] = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.tx = tx or TransactionManager(db)
        self.repo = ScheduleRepository()
        self.member_repo = MemberGroupRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_schedules(self, tenant_id: str) -> list[DateSchedule]:
        return self.repo.get_schedules(self.db, tenant_id)

    def get_schedule(self, tenant_id: str, schedule_id: str) -> DateSchedule:
        """Get a specific schedule (admin)"""
        schedule_id = parse_id(schedule_id, "schedule_id")
        schedule = self.repo.get_schedule_by_id(self.db, tenant_id, schedule_id)
        if not schedule:
            raise NotFoundError.for_resource("Schedule", schedule_id)
        return schedule

    def get_schedule_by_token(self, public_token: str) -> DateSchedule:
        """Get a schedule by public token; unknown and malformed tokens look the same"""
        token = normalize_id(public_token)
        if token is None:
            raise NotFoundError(PUBLIC_NOT_FOUND)
        schedule = self.repo.get_schedule_by_token(self.db, token)
        if not schedule:
            raise NotFoundError(PUBLIC_NOT_FOUND)
        return schedule

    def get_responses(self, tenant_id: str, schedule_id: str) -> list[ScheduleResponse]:
        schedule = self.get_schedule(tenant_id, schedule_id)
        return self.repo.get_responses(self.db, schedule.id)

    def get_public_responses(self, public_token: str) -> list[dict]:
        """All responses of a schedule with member display names (public table view)"""
        schedule = self.get_schedule_by_token(public_token)
        responses = self.repo.get_responses(self.db, schedule.id)

        member_names = {
            m.id: m.display_name for m in self.member_repo.get_members(self.db, schedule.tenant_id)
        }
        return [
            {
                "memberId": r.member_id,
                "memberName": member_names.get(r.member_id, ""),
                "candidateId": r.candidate_id,
                "availability": r.availability,
                "note": r.note or "",
            }
            for r in responses
        ]

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------

    def _validate_group_ids(self, tenant_id: str, group_ids: list[str]) -> list[str]:
        """Normalize, de-duplicate and check that every group belongs to the tenant"""
        normalized = []
        for group_id in group_ids:
            group_id = parse_id(group_id, "group_id")
            if group_id not in normalized:
                normalized.append(group_id)

        found = {g.id for g in self.member_repo.get_groups_by_ids(self.db, tenant_id, normalized)}
        for group_id in normalized:
            if group_id not in found:
                raise ValidationError(f"group not found: {group_id}")
        return normalized

    def create_schedule(self, tenant_id: str, data: ScheduleCreate) -> DateSchedule:
        """Create a schedule with its candidates and optional target groups"""
        logger.info(f"📥 Creating schedule for tenant_id: {tenant_id}")

        group_ids = self._validate_group_ids(tenant_id, data.groupIds)
        now = self.clock.now()
        plan = reconcile_candidates([], _desired(data.candidates), now)

        schedule = DateSchedule(
            id=generate_id(),
            tenant_id=tenant_id,
            title=data.title,
            description=data.description,
            event_id=data.eventId,
            public_token=generate_public_token(),
            status=STATUS_OPEN,
            deadline=data.deadline,
            created_at=now,
            updated_at=now,
        )

        def _create(db: Session) -> DateSchedule:
            self.repo.add_schedule(db, schedule)
            self.repo.apply_candidate_plan(db, schedule, plan)
            if group_ids:
                self.repo.replace_group_assignments(db, schedule, group_ids, now)
            return schedule

        self.tx.with_tx(_create)
        logger.info(
            f"✅ [AUDIT] CreateSchedule: tenant={tenant_id} schedule={schedule.id} "
            f"candidates={len(plan.candidates)} groups={len(group_ids)}"
        )
        return schedule

    def update_schedule(self, tenant_id: str, schedule_id: str, data: ScheduleUpdate) -> DateSchedule:
        """
        Update schedule fields and reconcile candidates.

        Candidates matching an existing (date, start, end) keep their identity.
        Removing a candidate that already has responses requires
        ``forceDeleteCandidateResponses``; the responses are then deleted too.
        """
        schedule = self.get_schedule(tenant_id, schedule_id)
        now = self.clock.now()

        plan = None
        if data.candidates is not None:
            plan = reconcile_candidates(schedule.candidates, _desired(data.candidates), now)

            if plan.removed:
                if schedule.decided_candidate_id in plan.removed_ids:
                    raise ConflictError("The decided candidate cannot be removed")

                responded = self.repo.get_responded_candidate_ids(
                    self.db, schedule.id, plan.removed_ids
                )
                blocking = find_blocking_candidate(plan.removed, responded)
                if blocking is not None:
                    if not data.forceDeleteCandidateResponses:
                        logger.warning(
                            f"⚠️ Candidate removal blocked for schedule {schedule.id}: "
                            f"candidate {blocking.id} has responses"
                        )
                        raise ConflictError(candidate_removal_message(blocking))
                    logger.info(
                        f"🗑️ Force-removing {len(responded)} answered candidate(s) "
                        f"from schedule {schedule.id}"
                    )

        group_ids = None
        if data.groupIds is not None:
            group_ids = self._validate_group_ids(tenant_id, data.groupIds)

        def _update(db: Session) -> DateSchedule:
            if data.title is not None:
                schedule.title = data.title
            if data.description is not None:
                schedule.description = data.description
            if data.clearDeadline:
                schedule.deadline = None
            elif data.deadline is not None:
                schedule.deadline = data.deadline
            if plan is not None:
                self.repo.apply_candidate_plan(db, schedule, plan)
            if group_ids is not None:
                self.repo.replace_group_assignments(db, schedule, group_ids, now)
            schedule.updated_at = now
            return schedule

        self.tx.with_tx(_update)
        changes = f" added={plan.new_count} removed={len(plan.removed)}" if plan is not None else ""
        logger.info(f"✅ [AUDIT] UpdateSchedule: tenant={tenant_id} schedule={schedule.id}{changes}")
        return schedule

    def close_schedule(self, tenant_id: str, schedule_id: str) -> DateSchedule:
        schedule = self.get_schedule(tenant_id, schedule_id)
        self.tx.with_tx(lambda db: close_schedule(schedule, self.clock.now()))
        logger.info(f"🔒 [AUDIT] CloseSchedule: tenant={tenant_id} schedule={schedule.id}")
        return schedule

    def decide_schedule(self, tenant_id: str, schedule_id: str, candidate_id: str) -> DateSchedule:
        schedule = self.get_schedule(tenant_id, schedule_id)
        candidate_id = parse_id(candidate_id, "candidate_id")
        self.tx.with_tx(lambda db: decide_schedule(schedule, candidate_id, self.clock.now()))
        logger.info(
            f"📌 [AUDIT] DecideSchedule: tenant={tenant_id} schedule={schedule.id} "
            f"candidate={candidate_id}"
        )
        return schedule

    def delete_schedule(self, tenant_id: str, schedule_id: str) -> DateSchedule:
        schedule = self.get_schedule(tenant_id, schedule_id)
        self.tx.with_tx(lambda db: delete_schedule(schedule, self.clock.now()))
        logger.info(f"🗑️ [AUDIT] DeleteSchedule: tenant={tenant_id} schedule={schedule.id}")
        return schedule

    # ------------------------------------------------------------------
    # Public response submission
    # ------------------------------------------------------------------

    def submit_response(
        self, public_token: str, member_id: str, entries: list[ResponseEntry]
    ) -> dict:
        """
        Upsert a member's answers for a schedule reached by public token.

        Entries naming candidates the schedule no longer has are skipped, since
        public clients may hold a stale list. An invalid availability aborts the
        whole batch. Every stored row gets the same server timestamp.
        """
        token = normalize_id(public_token)
        if token is None:
            raise NotFoundError(PUBLIC_NOT_FOUND)
        member_id = normalize_id(member_id)
        if member_id is None:
            raise ValidationError("member is not allowed to respond")

        def _submit(db: Session) -> dict:
            schedule = self.repo.get_schedule_by_token(db, token)
            if not schedule:
                raise NotFoundError(PUBLIC_NOT_FOUND)

            if not self.member_repo.get_member(db, schedule.tenant_id, member_id):
                raise ValidationError("member is not allowed to respond")

            now = self.clock.now()
            ensure_can_respond(schedule, now)

            valid_candidate_ids = {c.id for c in schedule.candidates}
            accepted = []
            for entry in entries:
                candidate_id = normalize_id(entry.candidateId)
                if candidate_id not in valid_candidate_ids:
                    logger.debug(f"Skipping unknown candidate {entry.candidateId[:40]}")
                    continue
                accepted.append((candidate_id, parse_availability(entry.availability), entry.note))

            for candidate_id, availability, note in accepted:
                self.repo.upsert_response(
                    db,
                    tenant_id=schedule.tenant_id,
                    schedule_id=schedule.id,
                    member_id=member_id,
                    candidate_id=candidate_id,
                    availability=availability,
                    note=note or "",
                    responded_at=now,
                )

            logger.info(
                f"📝 [AUDIT] SubmitResponse: schedule={schedule.id} member={member_id} "
                f"stored={len(accepted)} skipped={len(entries) - len(accepted)}"
            )
            return {"scheduleId": schedule.id, "memberId": member_id, "respondedAt": now}

        return self.tx.with_tx(_submit)
