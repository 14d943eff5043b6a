from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from datetime import datetime
from typing import Optional

from unirecords.api.v1.deps import get_fee_service
from unirecords.core.exceptions import AuthorizationError
from unirecords.middleware.audit import audited_route
from unirecords.models.audit_log import AuditResource
from unirecords.models.fee import Fee, PaymentStatus
from unirecords.models.user import User, UserRole
from unirecords.modules.auth.dependencies import get_current_user, require_roles
from unirecords.schemas.common import success_response
from unirecords.schemas.fee import FeeBulkCreate, FeeCreate, FeeUpdate, LateFeeCreate, PaymentCreate
from unirecords.services.fee_service import FeeService
from unirecords.utils.uploads import FEE_RECEIPT

router = APIRouter(
    prefix="/fees",
    tags=["Fees"],
    route_class=audited_route(AuditResource.FEE),
)

FINANCE_ROLES = (UserRole.ADMIN, UserRole.STAFF)
admin_only = require_roles(UserRole.ADMIN)
finance_staff = require_roles(*FINANCE_ROLES)


async def _ensure_fee_access(service: FeeService, fee: Fee, user: User) -> None:
    """Finance staff see every fee; students only their own"""
    if user.role in FINANCE_ROLES:
        return
    if await service.owner_user_id(fee) != user.id:
        raise AuthorizationError("You can only access your own fees")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_fee(
    data: FeeCreate,
    _: User = Depends(admin_only),
    service: FeeService = Depends(get_fee_service),
):
    fee = await service.create_fee(data)
    return success_response("Fee created successfully", data=fee)


@router.post("/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_create_fees(
    data: FeeBulkCreate,
    _: User = Depends(admin_only),
    service: FeeService = Depends(get_fee_service),
):
    result = await service.bulk_create(data.fees)
    return success_response(
        f"{len(result['created'])} fee(s) created, {len(result['failed'])} failed",
        data=result,
        results=len(result["created"]),
    )


@router.get("")
async def list_fees(
    student_id: Optional[str] = None,
    status: Optional[PaymentStatus] = None,
    semester: Optional[int] = Query(None, ge=1, le=12),
    fee_type: Optional[str] = None,
    due_before: Optional[datetime] = None,
    due_after: Optional[datetime] = None,
    _: User = Depends(finance_staff),
    service: FeeService = Depends(get_fee_service),
):
    fees = await service.list_fees(student_id, status, semester, fee_type, due_before, due_after)
    return success_response("Fees retrieved successfully", data=fees, results=len(fees))


@router.get("/my")
async def get_my_fees(
    current_user: User = Depends(require_roles(UserRole.STUDENT)),
    service: FeeService = Depends(get_fee_service),
):
    fees = await service.list_for_user(current_user.id)
    return success_response("Fees retrieved successfully", data=fees, results=len(fees))


@router.get("/{id}")
async def get_fee(
    id: str,
    current_user: User = Depends(get_current_user),
    service: FeeService = Depends(get_fee_service),
):
    fee = await service.get_fee(id)
    await _ensure_fee_access(service, fee, current_user)
    return success_response("Fee retrieved successfully", data=service.view(fee))


@router.put("/{id}")
async def update_fee(
    id: str,
    data: FeeUpdate,
    _: User = Depends(admin_only),
    service: FeeService = Depends(get_fee_service),
):
    fee = await service.update_fee(id, data)
    return success_response("Fee updated successfully", data=fee)


@router.post("/{id}/payment")
async def record_payment(
    id: str,
    data: PaymentCreate,
    _: User = Depends(finance_staff),
    service: FeeService = Depends(get_fee_service),
):
    fee = await service.record_payment(id, data)
    return success_response(f"Payment recorded, receipt {fee.receipt_number}", data=fee)


@router.post("/{id}/upload-receipt")
async def upload_receipt(
    id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: FeeService = Depends(get_fee_service),
):
    uploads = await FEE_RECEIPT.read([file])
    fee = await service.get_fee(id)
    await _ensure_fee_access(service, fee, current_user)
    fee = await service.upload_receipt(id, uploads[0])
    return success_response("Receipt uploaded successfully", data=fee)


@router.post("/{id}/late-fee")
async def add_late_fee(
    id: str,
    data: LateFeeCreate,
    _: User = Depends(admin_only),
    service: FeeService = Depends(get_fee_service),
):
    fee = await service.add_late_fee(id, data)
    return success_response("Late fee added successfully", data=fee)


@router.delete("/{id}")
async def delete_fee(
    id: str,
    _: User = Depends(admin_only),
    service: FeeService = Depends(get_fee_service),
):
    await service.delete_fee(id)
    return success_response("Fee deleted successfully")
