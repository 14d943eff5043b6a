from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from datetime import datetime
from typing import List, Optional

from unirecords.api.v1.deps import get_exam_service
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.exam import ExamStatus, ExamType
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.exam import ExamCreate, ExamStatusUpdate, ExamUpdate
from unirecords.services.exam_service import ExamService
from unirecords.utils.uploads import EXAM_MATERIALS

router = APIRouter(
    prefix="/exams",
    tags=["Exams"],
    route_class=audited_route(AuditResource.EXAM),
)

exam_managers = require_roles(UserRole.FACULTY, UserRole.ADMIN)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_exam(
    data: ExamCreate,
    _: User = Depends(exam_managers),
    service: ExamService = Depends(get_exam_service),
):
    exam = await service.create_exam(data)
    return success_response("Exam created successfully", data=exam)


@router.get("")
async def list_exams(
    course_code: Optional[str] = None,
    semester: Optional[int] = Query(None, ge=1, le=12),
    type: Optional[ExamType] = None,
    status: Optional[ExamStatus] = None,
    faculty_id: Optional[str] = None,
    start_after: Optional[datetime] = None,
    start_before: Optional[datetime] = None,
    _: User = Depends(get_current_user),
    service: ExamService = Depends(get_exam_service),
):
    exams = await service.list_exams(course_code, semester, type, status, faculty_id, start_after, start_before)
    return success_response("Exams retrieved successfully", data=exams, results=len(exams))


@router.get("/{id}")
async def get_exam(
    id: str,
    _: User = Depends(get_current_user),
    service: ExamService = Depends(get_exam_service),
):
    return success_response("Exam retrieved successfully", data=await service.get(id))


@router.put("/{id}")
async def update_exam(
    id: str,
    data: ExamUpdate,
    _: User = Depends(exam_managers),
    service: ExamService = Depends(get_exam_service),
):
    exam = await service.update_exam(id, data)
    return success_response("Exam updated successfully", data=exam)


@router.patch("/{id}/status")
async def update_exam_status(
    id: str,
    data: ExamStatusUpdate,
    _: User = Depends(exam_managers),
    service: ExamService = Depends(get_exam_service),
):
    exam = await service.update_status(id, data)
    return success_response(f"Exam status updated to {exam.status.value}", data=exam)


@router.post("/{id}/materials")
async def upload_exam_materials(
    id: str,
    files: List[UploadFile] = File(...),
    _: User = Depends(exam_managers),
    service: ExamService = Depends(get_exam_service),
):
    uploads = await EXAM_MATERIALS.read(files)
    exam = await service.upload_materials(id, uploads)
    return success_response("Exam materials uploaded successfully", data=exam)


@router.delete("/{id}")
async def delete_exam(
    id: str,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    service: ExamService = Depends(get_exam_service),
):
    await service.delete_exam(id)
    return success_response("Exam deleted successfully")
