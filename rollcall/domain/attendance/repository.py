"""Attendance repository - Database operations for attendance collections.

Methods flush or execute but never commit; the calling service owns the transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...database import upsert_insert
from ...models import (
    AttendanceCollection,
    AttendanceResponse,
    AttendanceTargetDate,
    CollectionGroupAssignment,
    generate_id,
)


class AttendanceRepository:
    """Repository for attendance collection database operations"""

    @staticmethod
    def get_collection_by_id(
        db: Session, tenant_id: str, collection_id: str
    ) -> Optional[AttendanceCollection]:
        """Get a non-deleted collection within a tenant"""
        return (
            db.query(AttendanceCollection)
            .options(
                selectinload(AttendanceCollection.target_dates),
                selectinload(AttendanceCollection.group_assignments),
            )
            .filter(
                AttendanceCollection.id == collection_id,
                AttendanceCollection.tenant_id == tenant_id,
                AttendanceCollection.deleted_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def add_collection(db: Session, collection: AttendanceCollection) -> AttendanceCollection:
        db.add(collection)
        db.flush()
        return collection

    @staticmethod
    def save_target_dates(
        db: Session, collection: AttendanceCollection, target_dates: list[AttendanceTargetDate]
    ) -> None:
        """Replace all target dates of a collection"""
        collection.target_dates = list(target_dates)
        db.flush()

    @staticmethod
    def save_group_assignments(
        db: Session, collection: AttendanceCollection, group_ids: list[str], now: datetime
    ) -> None:
        """Replace the collection's group assignments"""
        collection.group_assignments = [
            CollectionGroupAssignment(collection_id=collection.id, group_id=group_id, created_at=now)
            for group_id in dict.fromkeys(group_ids)
        ]
        db.flush()

    @staticmethod
    def get_responses(db: Session, collection_id: str) -> list[AttendanceResponse]:
        return (
            db.query(AttendanceResponse)
            .filter(AttendanceResponse.collection_id == collection_id)
            .order_by(AttendanceResponse.target_date_id, AttendanceResponse.member_id)
            .all()
        )

    @staticmethod
    def upsert_response(
        db: Session,
        tenant_id: str,
        collection_id: str,
        member_id: str,
        target_date_id: str,
        response: str,
        note: str,
        responded_at: datetime,
        now: datetime,
        available_from: Optional[str] = None,
        available_to: Optional[str] = None,
    ) -> None:
        """Insert or overwrite the response for (collection, member, target date) in one statement"""
        stmt = upsert_insert(db, AttendanceResponse.__table__).values(
            id=generate_id(),
            tenant_id=tenant_id,
            collection_id=collection_id,
            member_id=member_id,
            target_date_id=target_date_id,
            response=response,
            note=note,
            available_from=available_from,
            available_to=available_to,
            responded_at=responded_at,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["collection_id", "member_id", "target_date_id"],
            set_={
                "response": stmt.excluded.response,
                "note": stmt.excluded.note,
                "available_from": stmt.excluded.available_from,
                "available_to": stmt.excluded.available_to,
                "responded_at": stmt.excluded.responded_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)
