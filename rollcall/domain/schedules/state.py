"""Schedule status state machine.

open -> closed -> decided, with decide also allowed straight from open.
Any non-deleted status may move to deleted, which is terminal.
Functions mutate the given ``DateSchedule`` in place; persistence and
transaction scope belong to the caller.
"""

from datetime import datetime

from ...models import DateSchedule
from ...shared.errors import ConflictError, NotFoundError


STATUS_OPEN = "open"
STATUS_CLOSED = "closed"
STATUS_DECIDED = "decided"
STATUS_DELETED = "deleted"


def is_deleted(schedule: DateSchedule) -> bool:
    return schedule.status == STATUS_DELETED or schedule.deleted_at is not None


def can_respond(schedule: DateSchedule, now: datetime) -> bool:
    """Responses are accepted only while open and not past the deadline (inclusive)"""
    if schedule.status != STATUS_OPEN or is_deleted(schedule):
        return False
    return schedule.deadline is None or now <= schedule.deadline


def ensure_can_respond(schedule: DateSchedule, now: datetime) -> None:
    if schedule.status != STATUS_OPEN or is_deleted(schedule):
        raise ConflictError("Schedule is not accepting responses")
    if schedule.deadline is not None and now > schedule.deadline:
        raise ConflictError("Response deadline has passed")


def close_schedule(schedule: DateSchedule, now: datetime) -> None:
    if is_deleted(schedule):
        raise ConflictError("Schedule is deleted")
    if schedule.status == STATUS_CLOSED:
        raise ConflictError("Schedule is already closed")
    if schedule.status == STATUS_DECIDED:
        raise ConflictError("Schedule is already decided")

    schedule.status = STATUS_CLOSED
    schedule.updated_at = now


def decide_schedule(schedule: DateSchedule, candidate_id: str, now: datetime) -> None:
    """Fix the schedule on one of its candidates. A decision cannot be overwritten."""
    if is_deleted(schedule):
        raise ConflictError("Schedule is deleted")
    if schedule.status == STATUS_DECIDED:
        raise ConflictError("Schedule is already decided")

    if not any(c.id == candidate_id for c in schedule.candidates):
        raise NotFoundError.for_resource("Candidate", candidate_id)

    schedule.status = STATUS_DECIDED
    schedule.decided_candidate_id = candidate_id
    schedule.updated_at = now


def delete_schedule(schedule: DateSchedule, now: datetime) -> None:
    """Soft delete"""
    if is_deleted(schedule):
        raise ConflictError("Schedule is already deleted")

    schedule.status = STATUS_DELETED
    schedule.deleted_at = now
    schedule.updated_at = now
