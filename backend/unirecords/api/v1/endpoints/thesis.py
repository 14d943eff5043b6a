from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import Optional

from unirecords.api.v1.deps import get_thesis_service
from unirecords.core.exceptions import AuthorizationError, ValidationError
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.thesis import Thesis, ThesisStatus
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.thesis import ThesisCreate, ThesisStatusUpdate, ThesisUpdate
from unirecords.services.thesis_service import ThesisService
from unirecords.utils.uploads import THESIS_DOCUMENT

router = APIRouter(
    prefix="/thesis",
    tags=["Thesis"],
    route_class=audited_route(AuditResource.THESIS),
)

authors = require_roles(UserRole.STUDENT, UserRole.FACULTY)


async def _ensure_owner(service: ThesisService, thesis: Thesis, user: User) -> None:
    """Students may only touch their own thesis"""
    if user.role != UserRole.STUDENT:
        return
    student = await service.student_for_user(user.id)
    if thesis.student_id != student.id:
        raise AuthorizationError("You can only access your own thesis")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_thesis(
    data: ThesisCreate,
    current_user: User = Depends(authors),
    service: ThesisService = Depends(get_thesis_service),
):
    if current_user.role == UserRole.STUDENT:
        student_id = (await service.student_for_user(current_user.id)).id
    elif data.student_id:
        student_id = data.student_id
    else:
        raise ValidationError("student_id is required when creating a thesis on a student's behalf", field="student_id")

    thesis = await service.create_thesis(data, student_id)
    return success_response("Thesis created successfully", data=thesis)


@router.get("")
async def list_theses(
    status: Optional[ThesisStatus] = None,
    supervisor_id: Optional[str] = None,
    student_id: Optional[str] = None,
    keyword: Optional[str] = None,
    _: User = Depends(require_roles(UserRole.ADMIN, UserRole.FACULTY)),
    service: ThesisService = Depends(get_thesis_service),
):
    theses = await service.list_theses(status, supervisor_id, student_id, keyword)
    return success_response("Theses retrieved successfully", data=theses, results=len(theses))


@router.get("/my")
async def get_my_theses(
    current_user: User = Depends(require_roles(UserRole.STUDENT)),
    service: ThesisService = Depends(get_thesis_service),
):
    theses = await service.list_for_user(current_user.id)
    return success_response("Theses retrieved successfully", data=theses, results=len(theses))


@router.get("/{id}")
async def get_thesis(
    id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.FACULTY, UserRole.STUDENT)),
    service: ThesisService = Depends(get_thesis_service),
):
    thesis = await service.get_thesis(id)
    await _ensure_owner(service, thesis, current_user)
    return success_response("Thesis retrieved successfully", data=service.view(thesis))


@router.put("/{id}")
async def update_thesis(
    id: str,
    data: ThesisUpdate,
    current_user: User = Depends(authors),
    service: ThesisService = Depends(get_thesis_service),
):
    thesis = await service.get_thesis(id)
    await _ensure_owner(service, thesis, current_user)
    return success_response("Thesis updated successfully", data=await service.update_thesis(id, data))


@router.post("/{id}/upload")
async def upload_thesis_document(
    id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(require_roles(UserRole.STUDENT)),
    service: ThesisService = Depends(get_thesis_service),
):
    uploads = await THESIS_DOCUMENT.read([file])
    thesis = await service.get_thesis(id)
    await _ensure_owner(service, thesis, current_user)
    thesis = await service.upload_document(id, uploads[0])
    return success_response("Thesis document uploaded and submitted", data=thesis)


@router.patch("/{id}/status")
async def update_thesis_status(
    id: str,
    data: ThesisStatusUpdate,
    _: User = Depends(require_roles(UserRole.FACULTY)),
    service: ThesisService = Depends(get_thesis_service),
):
    thesis = await service.update_status(id, data)
    return success_response(f"Thesis status updated to {thesis.status.value}", data=thesis)


@router.delete("/{id}")
async def delete_thesis(
    id: str,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    service: ThesisService = Depends(get_thesis_service),
):
    await service.delete_thesis(id)
    return success_response("Thesis deleted successfully")
