from fastapi import APIRouter, Depends, Query
from datetime import datetime
from typing import Optional

from unirecords.api.v1.deps import get_audit_service
from unirecords.models.audit_log import AuditAction, AuditResource
from unirecords.modules.auth.dependencies import get_current_admin
from unirecords.schemas.audit import AuditLogResponse
from unirecords.schemas.common import success_response
from unirecords.services.audit_service import AuditService

# Reading the trail is not itself audited
router = APIRouter(
    prefix="/audit",
    tags=["Audit"],
    dependencies=[Depends(get_current_admin)],
)


def _page_response(message: str, page: dict) -> dict:
    items = [AuditLogResponse.model_validate(entry) for entry in page["items"]]
    return success_response(message, data={**page, "items": items}, results=len(items))


@router.get("")
async def list_audit_logs(
    action: Optional[AuditAction] = None,
    resource: Optional[AuditResource] = None,
    user_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    service: AuditService = Depends(get_audit_service),
):
    logs = await service.list_logs(page, page_size, action=action, resource=resource,
                                   user_id=user_id, start=start, end=end)
    return _page_response("Audit logs retrieved successfully", logs)


@router.get("/resource/{resource}")
@router.get("/resource/{resource}/{resource_id}")
async def get_resource_audit_logs(
    resource: AuditResource,
    resource_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    service: AuditService = Depends(get_audit_service),
):
    logs = await service.list_logs(page, page_size, resource=resource, resource_id=resource_id)
    return _page_response("Audit logs retrieved successfully", logs)


@router.get("/user/{user_id}")
async def get_user_audit_logs(
    user_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    service: AuditService = Depends(get_audit_service),
):
    logs = await service.list_logs(page, page_size, user_id=user_id)
    return _page_response("Audit logs retrieved successfully", logs)
