"""Tenant context for admin endpoints.

Authentication happens upstream; the gateway forwards the verified
tenant as the ``X-Tenant-ID`` header.
"""

import logging

from fastapi import Header, HTTPException

from .shared.validators import normalize_id

logger = logging.getLogger(__name__)


async def get_current_tenant_id(x_tenant_id: str = Header(None, alias="X-Tenant-ID")) -> str:
    """Resolve the tenant ID for the current admin request"""
    if not x_tenant_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    tenant_id = normalize_id(x_tenant_id)
    if tenant_id is None:
        logger.warning(f"⚠️ Rejected malformed tenant header: {x_tenant_id[:40]}")
        raise HTTPException(status_code=401, detail="Not authenticated")
    return tenant_id
