"""Schedule -> attendance conversion rules.

Pure helpers used by ``AttendanceConversionService``: which candidates are
carried over, how availability maps to an attendance response, and which
members get a row on each target date.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from ...shared.errors import ValidationError
from ..schedules.availability import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_MAYBE,
    AVAILABILITY_UNAVAILABLE,
)

RESPONSE_ATTENDING = "attending"
RESPONSE_ABSENT = "absent"
RESPONSE_UNDECIDED = "undecided"

TARGET_TYPE_EVENT = "event"
COLLECTION_STATUS_OPEN = "open"

AVAILABILITY_TO_RESPONSE = {
    AVAILABILITY_AVAILABLE: RESPONSE_ATTENDING,
    AVAILABILITY_UNAVAILABLE: RESPONSE_ABSENT,
    AVAILABILITY_MAYBE: RESPONSE_UNDECIDED,
}


def map_availability(availability) -> str:
    """Anything unrecognised, including no answer at all, is undecided"""
    return AVAILABILITY_TO_RESPONSE.get(availability, RESPONSE_UNDECIDED)


@dataclass(frozen=True)
class ConvertedResponse:
    member_id: str
    response: str
    note: str
    responded_at: datetime
    answered: bool


def select_candidates(candidates: Sequence, candidate_ids: Iterable[str]) -> list:
    """
    Resolve requested candidate IDs against the schedule.

    Returns the selected candidates in the schedule's display order, each once.

    Raises:
        ValidationError: If nothing is requested or an ID is not on the schedule
    """
    requested = set(candidate_ids)
    if not requested:
        raise ValidationError("at least one candidate_id is required")

    missing = sorted(requested - {c.id for c in candidates})
    if missing:
        raise ValidationError(f"candidate_id not found in schedule: {missing[0]}")

    ordered = sorted(candidates, key=lambda c: c.display_order)
    return [c for c in ordered if c.id in requested]


def index_responses(responses: Iterable) -> dict[str, dict[str, object]]:
    """candidate_id -> member_id -> schedule response"""
    index: dict[str, dict[str, object]] = {}
    for response in responses:
        index.setdefault(response.candidate_id, {})[response.member_id] = response
    return index


def build_target_responses(
    responses_by_member: dict, group_member_ids: Iterable[str], now: datetime
) -> list[ConvertedResponse]:
    """
    Rows for one target date: everyone who answered the candidate plus every
    member of the assigned groups. Answers keep their note and time; members
    without one are undecided as of ``now`` with an empty note.
    """
    rows = []
    for member_id in sorted(responses_by_member):
        answer = responses_by_member[member_id]
        rows.append(
            ConvertedResponse(
                member_id=member_id,
                response=map_availability(answer.availability),
                note=answer.note or "",
                responded_at=answer.responded_at,
                answered=True,
            )
        )

    for member_id in sorted(set(group_member_ids) - set(responses_by_member)):
        rows.append(
            ConvertedResponse(
                member_id=member_id,
                response=RESPONSE_UNDECIDED,
                note="",
                responded_at=now,
                answered=False,
            )
        )
    return rows
