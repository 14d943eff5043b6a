from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import List, Optional

from unirecords.api.v1.deps import get_grievance_service
from unirecords.core.exceptions import AuthorizationError
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.grievance import Grievance, GrievanceCategory, GrievancePriority, GrievanceStatus
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.grievance import (
    GrievanceCreate,
    GrievanceResolution,
    GrievanceStatusUpdate,
    GrievanceUpdate,
)
from unirecords.services.grievance_service import GrievanceService
from unirecords.utils.uploads import GRIEVANCE_ATTACHMENTS

router = APIRouter(
    prefix="/grievances",
    tags=["Grievances"],
    route_class=audited_route(AuditResource.GRIEVANCE),
)

COMMITTEE_ROLES = (UserRole.ADMIN, UserRole.GRIEVANCE_COMMITTEE)
HANDLER_ROLES = (UserRole.ADMIN, UserRole.STAFF, UserRole.GRIEVANCE_COMMITTEE)
grievance_handlers = require_roles(*HANDLER_ROLES)


def _ensure_submitter_or_committee(grievance: Grievance, user: User, action: str) -> None:
    if grievance.submitter_id != user.id and user.role not in COMMITTEE_ROLES:
        raise AuthorizationError(f"Only the submitter or the grievance committee can {action} this grievance")


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_grievance(
    data: GrievanceCreate,
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.submit(data, current_user)
    return success_response("Grievance submitted successfully", data=service.view(grievance, current_user))


@router.get("")
async def list_grievances(
    status: Optional[GrievanceStatus] = None,
    category: Optional[GrievanceCategory] = None,
    priority: Optional[GrievancePriority] = None,
    assigned_to_id: Optional[str] = None,
    current_user: User = Depends(grievance_handlers),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievances = await service.list_grievances(status, category, priority, assigned_to_id)
    return success_response(
        "Grievances retrieved successfully",
        data=[service.view(g, current_user) for g in grievances],
        results=len(grievances),
    )


@router.get("/my")
async def get_my_grievances(
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievances = await service.list_grievances(submitter_id=current_user.id)
    return success_response(
        "Grievances retrieved successfully",
        data=[service.view(g, current_user) for g in grievances],
        results=len(grievances),
    )


@router.get("/assigned")
async def get_assigned_grievances(
    current_user: User = Depends(grievance_handlers),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievances = await service.list_grievances(assigned_to_id=current_user.id)
    return success_response(
        "Assigned grievances retrieved successfully",
        data=[service.view(g, current_user) for g in grievances],
        results=len(grievances),
    )


@router.get("/{id}")
async def get_grievance(
    id: str,
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.get_grievance(id)
    is_party = current_user.id in (grievance.submitter_id, grievance.assigned_to_id)
    if not is_party and current_user.role not in HANDLER_ROLES:
        raise AuthorizationError("You do not have access to this grievance")
    return success_response("Grievance retrieved successfully", data=service.view(grievance, current_user))


@router.post("/{id}/attachments")
async def upload_attachments(
    id: str,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    uploads = await GRIEVANCE_ATTACHMENTS.read(files)
    grievance = await service.get_grievance(id)
    _ensure_submitter_or_committee(grievance, current_user, "add attachments to")
    grievance = await service.upload_attachments(id, uploads)
    return success_response("Attachments uploaded successfully", data=service.view(grievance, current_user))


@router.put("/{id}")
async def update_grievance(
    id: str,
    data: GrievanceUpdate,
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.get_grievance(id)
    _ensure_submitter_or_committee(grievance, current_user, "update")
    grievance = await service.update_grievance(id, data)
    return success_response("Grievance updated successfully", data=service.view(grievance, current_user))


@router.patch("/{id}/status")
async def update_grievance_status(
    id: str,
    data: GrievanceStatusUpdate,
    current_user: User = Depends(grievance_handlers),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.update_status(id, data, current_user)
    return success_response(
        f"Grievance status updated to {grievance.status.value}",
        data=service.view(grievance, current_user),
    )


@router.patch("/{id}/resolution")
async def add_resolution(
    id: str,
    data: GrievanceResolution,
    current_user: User = Depends(grievance_handlers),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.add_resolution(id, data, current_user)
    return success_response("Grievance resolved successfully", data=service.view(grievance, current_user))


@router.delete("/{id}")
async def delete_grievance(
    id: str,
    current_user: User = Depends(get_current_user),
    service: GrievanceService = Depends(get_grievance_service),
):
    grievance = await service.get_grievance(id)
    _ensure_submitter_or_committee(grievance, current_user, "delete")
    await service.delete_grievance(id)
    return success_response("Grievance deleted successfully")
