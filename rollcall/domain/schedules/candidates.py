"""Candidate date reconciliation.

Admin edits resend the full desired candidate list without server IDs.
Identity is carried by the natural key (date, start_time, end_time), never
by list position: matching entries keep their ID and creation time, the
rest become new candidates, and existing candidates missing from the list
are reported as removed. Nothing here touches the database.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional, Sequence

from ...models import generate_id
from ...shared.errors import ValidationError
from ...shared.validators import format_date

CandidateKey = tuple[date, Optional[time], Optional[time]]


def _normalize_time(value: Optional[time]) -> Optional[time]:
    if value is None:
        return None
    if value.utcoffset() is not None:
        raise ValidationError("candidate times must not carry a UTC offset")
    return value.replace(microsecond=0, tzinfo=None)


def candidate_key(
    candidate_date: date, start_time: Optional[time], end_time: Optional[time]
) -> CandidateKey:
    return (candidate_date, _normalize_time(start_time), _normalize_time(end_time))


@dataclass(frozen=True)
class DesiredCandidate:
    candidate_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @property
    def key(self) -> CandidateKey:
        return candidate_key(self.candidate_date, self.start_time, self.end_time)


@dataclass(frozen=True)
class PlannedCandidate:
    id: str
    candidate_date: date
    start_time: Optional[time]
    end_time: Optional[time]
    display_order: int
    created_at: datetime
    is_new: bool


@dataclass
class CandidatePlan:
    candidates: list[PlannedCandidate] = field(default_factory=list)
    removed: list = field(default_factory=list)  # existing candidates, in their stored order

    @property
    def removed_ids(self) -> list[str]:
        return [c.id for c in self.removed]

    @property
    def new_count(self) -> int:
        return sum(1 for c in self.candidates if c.is_new)


def reconcile_candidates(
    existing: Iterable,
    desired: Sequence[DesiredCandidate],
    now: datetime,
    id_factory: Callable[[], str] = generate_id,
) -> CandidatePlan:
    """
    Diff the desired candidate list against the stored one.

    Args:
        existing: Stored candidates (anything with id, candidate_date,
            start_time, end_time and created_at)
        desired: Candidates in their new display order
        now: Creation time for new candidates
        id_factory: ID generator for new candidates

    Raises:
        ValidationError: If ``desired`` is empty or repeats a date/time window
    """
    if not desired:
        raise ValidationError("at least one candidate is required")

    existing = list(existing)
    by_key = {candidate_key(c.candidate_date, c.start_time, c.end_time): c for c in existing}

    plan = CandidatePlan()
    seen: set[CandidateKey] = set()
    for order, item in enumerate(desired):
        key = item.key
        if key in seen:
            raise ValidationError(
                f"duplicate candidate: {format_date(item.candidate_date)}"
            )
        seen.add(key)

        match = by_key.get(key)
        plan.candidates.append(
            PlannedCandidate(
                id=match.id if match else id_factory(),
                candidate_date=item.candidate_date,
                start_time=_normalize_time(item.start_time),
                end_time=_normalize_time(item.end_time),
                display_order=order,
                created_at=match.created_at if match else now,
                is_new=match is None,
            )
        )

    plan.removed = [
        c
        for c in existing
        if candidate_key(c.candidate_date, c.start_time, c.end_time) not in seen
    ]
    return plan


def find_blocking_candidate(removed: Iterable, responded_candidate_ids: set[str]):
    """First removed candidate that still has responses, or None"""
    for candidate in removed:
        if candidate.id in responded_candidate_ids:
            return candidate
    return None


def candidate_removal_message(candidate) -> str:
    return (
        f"Candidate date {format_date(candidate.candidate_date)} already has responses. "
        "Resend with forceDeleteCandidateResponses=true to remove it along with its responses."
    )
