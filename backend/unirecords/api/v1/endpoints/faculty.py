from fastapi import APIRouter, Depends, status
from typing import Optional

from unirecords.api.v1.deps import get_faculty_service
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.faculty import FacultyCreate, FacultyResponse, FacultyUpdate
from unirecords.services.faculty_service import FacultyService

router = APIRouter(
    prefix="/faculty",
    tags=["Faculty"],
    route_class=audited_route(AuditResource.FACULTY),
)

admin_only = require_roles(UserRole.ADMIN)
staff_viewers = require_roles(UserRole.ADMIN, UserRole.FACULTY)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_faculty(
    data: FacultyCreate,
    _: User = Depends(admin_only),
    service: FacultyService = Depends(get_faculty_service),
):
    faculty = await service.create_faculty(data)
    return success_response("Faculty created successfully", data=FacultyResponse.model_validate(faculty))


@router.get("")
async def list_faculty(
    department: Optional[str] = None,
    designation: Optional[str] = None,
    _: User = Depends(staff_viewers),
    service: FacultyService = Depends(get_faculty_service),
):
    members = await service.list_faculty(department, designation)
    return success_response(
        "Faculty retrieved successfully",
        data=[FacultyResponse.model_validate(f) for f in members],
        results=len(members),
    )


@router.get("/profile")
async def get_my_profile(
    current_user: User = Depends(require_roles(UserRole.FACULTY)),
    service: FacultyService = Depends(get_faculty_service),
):
    faculty = await service.get_by_user_id(current_user.id)
    return success_response("Faculty profile retrieved", data=FacultyResponse.model_validate(faculty))


@router.get("/employee/{employee_id}")
async def get_by_employee_id(
    employee_id: str,
    _: User = Depends(staff_viewers),
    service: FacultyService = Depends(get_faculty_service),
):
    faculty = await service.get_by_employee_id(employee_id)
    return success_response("Faculty retrieved successfully", data=FacultyResponse.model_validate(faculty))


@router.get("/{id}/teaching-load")
async def get_teaching_load(
    id: str,
    _: User = Depends(staff_viewers),
    service: FacultyService = Depends(get_faculty_service),
):
    load = await service.get_teaching_load(id)
    return success_response("Teaching load retrieved", data=load)


@router.get("/{id}")
async def get_faculty(
    id: str,
    _: User = Depends(staff_viewers),
    service: FacultyService = Depends(get_faculty_service),
):
    faculty = await service.get_faculty(id)
    return success_response("Faculty retrieved successfully", data=FacultyResponse.model_validate(faculty))


@router.put("/{id}")
async def update_faculty(
    id: str,
    data: FacultyUpdate,
    _: User = Depends(admin_only),
    service: FacultyService = Depends(get_faculty_service),
):
    faculty = await service.update_faculty(id, data)
    return success_response("Faculty updated successfully", data=FacultyResponse.model_validate(faculty))


@router.delete("/{id}")
async def delete_faculty(
    id: str,
    _: User = Depends(admin_only),
    service: FacultyService = Depends(get_faculty_service),
):
    await service.delete_faculty(id)
    return success_response("Faculty deleted successfully")
