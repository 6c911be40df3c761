"""Schedule router - FastAPI endpoints for date coordination"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_id
from ...config import PUBLIC_RESPONSE_RATE_LIMIT, PUBLIC_RESPONSE_RATE_WINDOW
from ...database import get_db
from ...models import DateSchedule, ScheduleCandidate
from ...rate_limiter import create_rate_limiter
from ...shared.clock import Clock, get_clock
from ..attendance.service import AttendanceConversionService
from .schemas import (
    CandidateOut,
    ConvertToAttendanceRequest,
    ConvertToAttendanceResult,
    DecideRequest,
    PublicResponseOut,
    PublicResponsesOut,
    PublicScheduleOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleResponseOut,
    ScheduleResponsesOut,
    ScheduleUpdate,
    SubmitResponseResult,
    SubmitResponsesRequest,
)
from .service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"])

rate_limit_public_schedule = create_rate_limiter(
    limit=PUBLIC_RESPONSE_RATE_LIMIT,
    window_seconds=PUBLIC_RESPONSE_RATE_WINDOW,
    key_prefix="schedule_public",
)


def get_schedule_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db, clock=clock)


def get_conversion_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> AttendanceConversionService:
    """Dependency injection for AttendanceConversionService"""
    return AttendanceConversionService(db, clock=clock)


def _candidate_out(candidate: ScheduleCandidate) -> CandidateOut:
    return CandidateOut(
        candidateId=candidate.id,
        date=candidate.candidate_date,
        startTime=candidate.start_time,
        endTime=candidate.end_time,
        displayOrder=candidate.display_order,
    )


def _schedule_out(schedule: DateSchedule) -> ScheduleOut:
    return ScheduleOut(
        scheduleId=schedule.id,
        tenantId=schedule.tenant_id,
        title=schedule.title,
        description=schedule.description,
        eventId=schedule.event_id,
        publicToken=schedule.public_token,
        status=schedule.status,
        deadline=schedule.deadline,
        decidedCandidateId=schedule.decided_candidate_id,
        candidates=[_candidate_out(c) for c in schedule.candidates],
        groupIds=[a.group_id for a in schedule.group_assignments],
        createdAt=schedule.created_at,
        updatedAt=schedule.updated_at,
        deletedAt=schedule.deleted_at,
    )


# ============================================================================
# PUBLIC ENDPOINTS (token possession is the access control)
# ============================================================================


@router.get("/public/{public_token}", response_model=PublicScheduleOut)
async def get_public_schedule(
    public_token: str,
    _: None = Depends(rate_limit_public_schedule),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Get the schedule behind a public link (response form view)"""
    schedule = service.get_schedule_by_token(public_token)
    return PublicScheduleOut(
        scheduleId=schedule.id,
        title=schedule.title,
        description=schedule.description,
        status=schedule.status,
        deadline=schedule.deadline,
        decidedCandidateId=schedule.decided_candidate_id,
        candidates=[_candidate_out(c) for c in schedule.candidates],
    )


@router.post("/public/{public_token}/responses", response_model=SubmitResponseResult)
async def submit_public_responses(
    public_token: str,
    data: SubmitResponsesRequest,
    _: None = Depends(rate_limit_public_schedule),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Submit or overwrite a member's answers"""
    result = service.submit_response(public_token, data.memberId, data.responses)
    return SubmitResponseResult(**result)


@router.get("/public/{public_token}/responses", response_model=PublicResponsesOut)
async def get_public_responses(
    public_token: str,
    _: None = Depends(rate_limit_public_schedule),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Read-only table of everyone's answers"""
    responses = service.get_public_responses(public_token)
    return PublicResponsesOut(responses=[PublicResponseOut(**r) for r in responses])


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================


@router.get("", response_model=list[ScheduleOut])
async def get_schedules(
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Get all schedules for the current tenant"""
    return [_schedule_out(s) for s in service.get_schedules(tenant_id)]


@router.post("", response_model=ScheduleOut, status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Create a new schedule"""
    return _schedule_out(service.create_schedule(tenant_id, data))


@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(
    schedule_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    return _schedule_out(service.get_schedule(tenant_id, schedule_id))


@router.patch("/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(
    schedule_id: str,
    data: ScheduleUpdate,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Update a schedule; 409 if removing answered candidates without the force flag"""
    return _schedule_out(service.update_schedule(tenant_id, schedule_id, data))


@router.post("/{schedule_id}/close", response_model=ScheduleOut)
async def close_schedule(
    schedule_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    return _schedule_out(service.close_schedule(tenant_id, schedule_id))


@router.post("/{schedule_id}/decide", response_model=ScheduleOut)
async def decide_schedule(
    schedule_id: str,
    data: DecideRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    return _schedule_out(service.decide_schedule(tenant_id, schedule_id, data.candidateId))


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Soft-delete a schedule"""
    schedule = service.delete_schedule(tenant_id, schedule_id)
    return {
        "message": "Schedule deleted",
        "scheduleId": schedule.id,
        "status": schedule.status,
        "deletedAt": schedule.deleted_at,
    }


@router.get("/{schedule_id}/responses", response_model=ScheduleResponsesOut)
async def get_schedule_responses(
    schedule_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: ScheduleService = Depends(get_schedule_service),
):
    responses = service.get_responses(tenant_id, schedule_id)
    return ScheduleResponsesOut(
        scheduleId=schedule_id,
        responses=[
            ScheduleResponseOut(
                responseId=r.id,
                memberId=r.member_id,
                candidateId=r.candidate_id,
                availability=r.availability,
                note=r.note or "",
                respondedAt=r.responded_at,
            )
            for r in responses
        ],
    )


@router.post(
    "/{schedule_id}/convert-to-attendance",
    response_model=ConvertToAttendanceResult,
    status_code=201,
)
async def convert_to_attendance(
    schedule_id: str,
    data: ConvertToAttendanceRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    service: AttendanceConversionService = Depends(get_conversion_service),
):
    """Create an attendance collection from selected candidates"""
    result = service.convert_schedule(tenant_id, schedule_id, data.candidateIds, data.title)
    return ConvertToAttendanceResult(**result)
