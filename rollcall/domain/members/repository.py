"""Member repository - Database lookups for members and member groups"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Member, MemberGroup, MemberGroupMembership


class MemberGroupRepository:
    """Repository for member and member-group lookups"""

    @staticmethod
    def get_member(db: Session, tenant_id: str, member_id: str) -> Optional[Member]:
        """Get an active member within a tenant"""
        return (
            db.query(Member)
            .filter(
                Member.id == member_id,
                Member.tenant_id == tenant_id,
                Member.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def get_members(db: Session, tenant_id: str) -> list[Member]:
        """Get all members of a tenant"""
        return db.query(Member).filter(Member.tenant_id == tenant_id).all()

    @staticmethod
    def get_groups_by_ids(db: Session, tenant_id: str, group_ids: list[str]) -> list[MemberGroup]:
        """Get the subset of ``group_ids`` that exist in the tenant"""
        if not group_ids:
            return []
        return (
            db.query(MemberGroup)
            .filter(MemberGroup.tenant_id == tenant_id, MemberGroup.id.in_(group_ids))
            .all()
        )

    @staticmethod
    def get_member_ids_by_group_id(db: Session, tenant_id: str, group_id: str) -> list[str]:
        """Get the IDs of active members currently in a group"""
        rows = (
            db.query(MemberGroupMembership.member_id)
            .join(Member, Member.id == MemberGroupMembership.member_id)
            .join(MemberGroup, MemberGroup.id == MemberGroupMembership.group_id)
            .filter(
                MemberGroupMembership.group_id == group_id,
                MemberGroup.tenant_id == tenant_id,
                Member.is_active.is_(True),
            )
            .order_by(MemberGroupMembership.member_id)
            .all()
        )
        return [row.member_id for row in rows]
