from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import List, Optional

from unirecords.api.v1.deps import get_admission_service
from unirecords.core.exceptions import AuthorizationError
from unirecords.middleware.audit import audited_route
from unirecords.models.admission import AdmissionStatus
from unirecords.models.audit_log import AuditResource
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.admission import (
    AdmissionBulkCreate,
    AdmissionBulkStatusUpdate,
    AdmissionCreate,
    AdmissionStatusUpdate,
    AdmissionUpdate,
    InterviewResult,
    InterviewSchedule,
)
from unirecords.schemas.common import success_response
from unirecords.services.admission_service import AdmissionService
from unirecords.utils.uploads import ADMISSION_DOCUMENTS

router = APIRouter(
    prefix="/admissions",
    tags=["Admissions"],
    route_class=audited_route(AuditResource.ADMISSION),
)

OFFICE_ROLES = (UserRole.ADMIN, UserRole.STAFF)
admin_only = require_roles(UserRole.ADMIN)
admission_office = require_roles(*OFFICE_ROLES)


# ==================== PUBLIC ====================

@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_application(
    data: AdmissionCreate,
    service: AdmissionService = Depends(get_admission_service),
):
    """Submit an admission application (no account needed)"""
    admission = await service.submit_application(data)
    return success_response(
        f"Application submitted successfully. Your application number is {admission.application_number}",
        data=admission,
    )


@router.post("/{id}/documents")
async def upload_documents(
    id: str,
    files: List[UploadFile] = File(...),
    service: AdmissionService = Depends(get_admission_service),
):
    uploads = await ADMISSION_DOCUMENTS.read(files)
    admission = await service.upload_documents(id, uploads)
    return success_response("Documents uploaded successfully", data=admission)


# ==================== BULK ====================

@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_submit(
    data: AdmissionBulkCreate,
    _: User = Depends(admin_only),
    service: AdmissionService = Depends(get_admission_service),
):
    admissions = await service.bulk_submit(data.applications)
    return success_response(
        f"{len(admissions)} application(s) submitted",
        data=admissions,
        results=len(admissions),
    )


@router.patch("/bulk/status")
async def bulk_update_status(
    data: AdmissionBulkStatusUpdate,
    _: User = Depends(admin_only),
    service: AdmissionService = Depends(get_admission_service),
):
    admissions = await service.bulk_update_status(data.admission_ids, data.status, data.remarks)
    return success_response(
        f"{len(admissions)} application(s) updated to {data.status.value}",
        data=admissions,
        results=len(admissions),
    )


# ==================== OFFICE ====================

@router.get("")
async def list_admissions(
    status: Optional[AdmissionStatus] = None,
    program: Optional[str] = None,
    department: Optional[str] = None,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admissions = await service.list_admissions(status, program, department)
    return success_response("Admissions retrieved successfully", data=admissions, results=len(admissions))


@router.get("/{id}")
async def get_admission(
    id: str,
    current_user: User = Depends(get_current_user),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.get_admission(id)
    if current_user.role not in OFFICE_ROLES and admission.applicant_email.lower() != current_user.email.lower():
        raise AuthorizationError("You can only view your own application")
    return success_response("Admission retrieved successfully", data=service.view(admission))


@router.put("/{id}")
async def update_admission(
    id: str,
    data: AdmissionUpdate,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.update_admission(id, data)
    return success_response("Admission updated successfully", data=admission)


@router.patch("/{id}/status")
async def update_admission_status(
    id: str,
    data: AdmissionStatusUpdate,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.update_status(id, data)
    return success_response(f"Admission status updated to {admission.status.value}", data=admission)


@router.patch("/{id}/interview")
async def schedule_interview(
    id: str,
    data: InterviewSchedule,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.schedule_interview(id, data)
    return success_response("Interview scheduled successfully", data=admission)


@router.patch("/{id}/interview-results")
async def record_interview_results(
    id: str,
    data: InterviewResult,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.record_interview_results(id, data)
    return success_response(f"Interview results recorded: {admission.status.value}", data=admission)


@router.post("/{id}/enroll")
async def complete_enrollment(
    id: str,
    _: User = Depends(admin_only),
    service: AdmissionService = Depends(get_admission_service),
):
    enrollment = await service.complete_enrollment(id)
    return success_response(
        f"Enrollment completed. Registration number {enrollment.registration_number}",
        data=enrollment,
    )


@router.delete("/{id}")
async def cancel_admission(
    id: str,
    _: User = Depends(admission_office),
    service: AdmissionService = Depends(get_admission_service),
):
    admission = await service.cancel_admission(id)
    return success_response("Admission cancelled successfully", data=admission)
