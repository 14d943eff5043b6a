from fastapi import APIRouter, Depends, File, UploadFile, status
from datetime import date
from typing import List, Optional

from unirecords.api.v1.deps import get_leave_service
from unirecords.core.exceptions import AuthorizationError
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.leave import Leave, LeaveStatus, LeaveType
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.leave import LeaveCreate, LeaveStatusUpdate
from unirecords.services.leave_service import LeaveService
from unirecords.utils.uploads import LEAVE_DOCUMENTS

router = APIRouter(
    prefix="/leaves",
    tags=["Leaves"],
    route_class=audited_route(AuditResource.LEAVE),
)

REVIEWER_ROLES = (UserRole.ADMIN, UserRole.FACULTY)
leave_reviewers = require_roles(*REVIEWER_ROLES)


def _ensure_applicant(leave: Leave, user: User, action: str) -> None:
    if leave.applicant_id != user.id:
        raise AuthorizationError(f"Only the applicant can {action} this leave")


@router.post("", status_code=status.HTTP_201_CREATED)
async def apply_for_leave(
    data: LeaveCreate,
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    leave = await service.apply(data, current_user.id)
    return success_response("Leave application submitted successfully", data=leave)


@router.get("")
async def list_leaves(
    status: Optional[LeaveStatus] = None,
    type: Optional[LeaveType] = None,
    applicant_id: Optional[str] = None,
    approved_by_id: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    _: User = Depends(leave_reviewers),
    service: LeaveService = Depends(get_leave_service),
):
    leaves = await service.list_leaves(status, type, applicant_id, approved_by_id, from_date, to_date)
    return success_response("Leaves retrieved successfully", data=leaves, results=len(leaves))


@router.get("/my")
async def get_my_leaves(
    status: Optional[LeaveStatus] = None,
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    leaves = await service.list_leaves(status=status, applicant_id=current_user.id)
    return success_response("Leaves retrieved successfully", data=leaves, results=len(leaves))


@router.get("/statistics")
async def get_leave_statistics(
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    stats = await service.get_statistics(current_user.id)
    return success_response("Leave statistics retrieved", data=stats)


@router.get("/{id}")
async def get_leave(
    id: str,
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    leave = await service.get_leave(id)
    if current_user.role not in REVIEWER_ROLES:
        _ensure_applicant(leave, current_user, "view")
    return success_response("Leave retrieved successfully", data=service.view(leave))


@router.post("/{id}/documents")
async def upload_leave_documents(
    id: str,
    files: List[UploadFile] = File(...),
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    uploads = await LEAVE_DOCUMENTS.read(files)
    leave = await service.get_leave(id)
    _ensure_applicant(leave, current_user, "add documents to")
    return success_response("Documents uploaded successfully", data=await service.upload_documents(id, uploads))


@router.patch("/{id}/status")
async def update_leave_status(
    id: str,
    data: LeaveStatusUpdate,
    current_user: User = Depends(leave_reviewers),
    service: LeaveService = Depends(get_leave_service),
):
    leave = await service.update_status(id, data, current_user.id)
    return success_response(f"Leave {leave.status.value} successfully", data=leave)


@router.delete("/{id}")
async def cancel_leave(
    id: str,
    current_user: User = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service),
):
    leave = await service.get_leave(id)
    _ensure_applicant(leave, current_user, "cancel")
    return success_response("Leave cancelled successfully", data=await service.cancel(id))
