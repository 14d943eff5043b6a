from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from unirecords.core.database import get_session_local, session_scope
from unirecords.core.logging_config import logger
from unirecords.models.audit_log import AuditAction, AuditLog, AuditResource
from unirecords.utils.pagination import paginate


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, else the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def session_factory_for(request: Request) -> async_sessionmaker:
    """Audit writes use their own session, independent of the handler's"""
    factory = getattr(request.app.state, "audit_session_factory", None)
    return factory or get_session_local()


class AuditService:
    """Writes and queries the append-only audit trail"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[str] = None,
        description: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        entry = AuditLog(
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id else None,
            description=description,
            user_id=user_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(entry)
        await self.db.commit()
        logger.log_audit_event(action.value, resource.value, entry.resource_id, user_id=user_id)
        return entry

    async def list_logs(
        self,
        page: int = 1,
        page_size: int = 50,
        action: Optional[AuditAction] = None,
        resource: Optional[AuditResource] = None,
        resource_id: Optional[str] = None,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict:
        query = select(AuditLog)
        if action:
            query = query.where(AuditLog.action == action)
        if resource:
            query = query.where(AuditLog.resource == resource)
        if resource_id:
            query = query.where(AuditLog.resource_id == resource_id)
        if user_id:
            query = query.where(AuditLog.user_id == user_id)
        if start:
            query = query.where(AuditLog.created_at >= start)
        if end:
            query = query.where(AuditLog.created_at <= end)
        query = query.order_by(desc(AuditLog.created_at))
        return await paginate(self.db, query, page, page_size)


async def record_request_audit(
    request: Request,
    action: AuditAction,
    resource: AuditResource,
    resource_id: Optional[str] = None,
    description: Optional[str] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Best-effort audit write for a request.

    Runs in a fresh session and never raises: a lost audit row is logged
    and the response goes out unchanged.
    """
    if user_id is None:
        user_id = getattr(request.state, "user_id", None)
    try:
        async with session_scope(session_factory_for(request)) as session:
            await AuditService(session).record(
                action=action,
                resource=resource,
                resource_id=resource_id,
                description=description,
                user_id=user_id,
                details=details,
                ip_address=client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
    except Exception as e:
        logger.log_error_with_context(e, context=f"audit {action.value} {resource.value}")
