from fastapi import APIRouter

from unirecords.api.v1.endpoints import (
    admissions,
    audit,
    auth,
    exams,
    faculty,
    fees,
    grievances,
    leaves,
    students,
    thesis,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(students.router)
api_router.include_router(faculty.router)
api_router.include_router(exams.router)
api_router.include_router(fees.router)
api_router.include_router(admissions.router)
api_router.include_router(grievances.router)
api_router.include_router(leaves.router)
api_router.include_router(thesis.router)
api_router.include_router(audit.router)
