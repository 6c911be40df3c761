"""Attendance router - FastAPI endpoints for converted attendance collections"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_tenant_id
from ...database import get_db
from .schemas import AttendanceResponseOut, CollectionOut, CollectionResponsesOut, TargetDateOut
from .service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["Attendance"])


def get_attendance_service(db: Session = Depends(get_db)) -> AttendanceService:
    """Dependency injection for AttendanceService"""
    return AttendanceService(db)


@router.get("/{collection_id}", response_model=CollectionOut)
async def get_collection(
    collection_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    """Get an attendance collection with its target dates"""
    collection = service.get_collection(tenant_id, collection_id)
    return CollectionOut(
        collectionId=collection.id,
        tenantId=collection.tenant_id,
        title=collection.title,
        description=collection.description,
        targetType=collection.target_type,
        targetId=collection.target_id,
        publicToken=collection.public_token,
        status=collection.status,
        deadline=collection.deadline,
        targetDates=[
            TargetDateOut(
                targetDateId=td.id,
                date=td.target_date,
                startTime=td.start_time,
                endTime=td.end_time,
                displayOrder=td.display_order,
            )
            for td in collection.target_dates
        ],
        groupIds=[a.group_id for a in collection.group_assignments],
        createdAt=collection.created_at,
        updatedAt=collection.updated_at,
    )


@router.get("/{collection_id}/responses", response_model=CollectionResponsesOut)
async def get_collection_responses(
    collection_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    service: AttendanceService = Depends(get_attendance_service),
):
    responses = service.get_responses(tenant_id, collection_id)
    return CollectionResponsesOut(
        collectionId=collection_id,
        responses=[
            AttendanceResponseOut(
                responseId=r.id,
                memberId=r.member_id,
                targetDateId=r.target_date_id,
                response=r.response,
                note=r.note or "",
                availableFrom=r.available_from,
                availableTo=r.available_to,
                respondedAt=r.responded_at,
            )
            for r in responses
        ],
    )
