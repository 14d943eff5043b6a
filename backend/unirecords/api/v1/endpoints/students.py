from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from unirecords.api.v1.deps import get_student_service
from unirecords.core.exceptions import AuthorizationError
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from unirecords.services.student_service import StudentService

router = APIRouter(
    prefix="/students",
    tags=["Students"],
    route_class=audited_route(AuditResource.STUDENT),
)

STAFF_VIEWERS = (UserRole.ADMIN, UserRole.FACULTY)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    service: StudentService = Depends(get_student_service),
):
    student = await service.create_student(data)
    return success_response("Student created successfully", data=StudentResponse.model_validate(student))


@router.get("")
async def list_students(
    department: Optional[str] = None,
    batch: Optional[str] = None,
    program: Optional[str] = None,
    semester: Optional[int] = Query(None, ge=1, le=12),
    academic_status: Optional[str] = None,
    _: User = Depends(require_roles(*STAFF_VIEWERS)),
    service: StudentService = Depends(get_student_service),
):
    students = await service.list_students(department, batch, program, semester, academic_status)
    return success_response(
        "Students retrieved successfully",
        data=[StudentResponse.model_validate(s) for s in students],
        results=len(students),
    )


@router.get("/profile")
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    student = await service.get_by_user_id(current_user.id)
    return success_response("Student profile retrieved", data=StudentResponse.model_validate(student))


@router.get("/registration/{registration_number}")
async def get_by_registration_number(
    registration_number: str,
    _: User = Depends(require_roles(*STAFF_VIEWERS)),
    service: StudentService = Depends(get_student_service),
):
    student = await service.get_by_registration_number(registration_number)
    return success_response("Student retrieved successfully", data=StudentResponse.model_validate(student))


@router.get("/{id}")
async def get_student(
    id: str,
    current_user: User = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    student = await service.get_student(id)
    if current_user.role not in STAFF_VIEWERS and student.user_id != current_user.id:
        raise AuthorizationError("You can only view your own student record")
    return success_response("Student retrieved successfully", data=StudentResponse.model_validate(student))


@router.put("/{id}")
async def update_student(
    id: str,
    data: StudentUpdate,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    service: StudentService = Depends(get_student_service),
):
    student = await service.update_student(id, data)
    return success_response("Student updated successfully", data=StudentResponse.model_validate(student))


@router.delete("/{id}")
async def delete_student(
    id: str,
    _: User = Depends(require_roles(UserRole.ADMIN)),
    service: StudentService = Depends(get_student_service),
):
    await service.delete_student(id)
    return success_response("Student deleted successfully")
