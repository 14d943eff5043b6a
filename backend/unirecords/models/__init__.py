# Re-export all models for convenient imports
from unirecords.models.user import User, UserRole
from unirecords.models.student import Student
from unirecords.models.faculty import Faculty
from unirecords.models.exam import Exam, ExamType, ExamStatus
from unirecords.models.fee import Fee, PaymentStatus, PaymentMethod
from unirecords.models.admission import Admission, AdmissionStatus
from unirecords.models.grievance import Grievance, GrievanceCategory, GrievanceStatus, GrievancePriority
from unirecords.models.leave import Leave, LeaveType, LeaveStatus
from unirecords.models.thesis import Thesis, ThesisStatus
from unirecords.models.audit_log import AuditLog, AuditAction, AuditResource

__all__ = [
    # People
    "User",
    "UserRole",
    "Student",
    "Faculty",
    # Academics
    "Exam",
    "ExamType",
    "ExamStatus",
    "Thesis",
    "ThesisStatus",
    # Finance
    "Fee",
    "PaymentStatus",
    "PaymentMethod",
    # Admissions
    "Admission",
    "AdmissionStatus",
    # Welfare
    "Grievance",
    "GrievanceCategory",
    "GrievanceStatus",
    "GrievancePriority",
    "Leave",
    "LeaveType",
    "LeaveStatus",
    # Audit
    "AuditLog",
    "AuditAction",
    "AuditResource",
]
