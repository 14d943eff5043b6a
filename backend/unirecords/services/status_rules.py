"""Per-entity status-transition tables"""
from unirecords.core.transitions import StatusTransitionTable
from unirecords.models.admission import AdmissionStatus
from unirecords.models.exam import ExamStatus
from unirecords.models.fee import PaymentStatus
from unirecords.models.grievance import GrievanceStatus
from unirecords.models.leave import LeaveStatus
from unirecords.models.thesis import ThesisStatus


ADMISSION_TRANSITIONS = StatusTransitionTable("admission", AdmissionStatus, {
    AdmissionStatus.APPLIED: {AdmissionStatus.DOCUMENT_VERIFICATION, AdmissionStatus.CANCELLED},
    AdmissionStatus.DOCUMENT_VERIFICATION: {AdmissionStatus.INTERVIEW_SCHEDULED, AdmissionStatus.CANCELLED},
    AdmissionStatus.INTERVIEW_SCHEDULED: {AdmissionStatus.INTERVIEW_COMPLETED, AdmissionStatus.CANCELLED},
    AdmissionStatus.INTERVIEW_COMPLETED: {
        AdmissionStatus.APPROVED,
        AdmissionStatus.REJECTED,
        AdmissionStatus.CANCELLED,
    },
    AdmissionStatus.APPROVED: {AdmissionStatus.ENROLLED, AdmissionStatus.CANCELLED},
    AdmissionStatus.REJECTED: {AdmissionStatus.CANCELLED},
    AdmissionStatus.ENROLLED: set(),
    AdmissionStatus.CANCELLED: set(),
})

EXAM_TRANSITIONS = StatusTransitionTable("exam", ExamStatus, {
    ExamStatus.SCHEDULED: {ExamStatus.POSTPONED, ExamStatus.ONGOING, ExamStatus.CANCELLED},
    ExamStatus.POSTPONED: {ExamStatus.SCHEDULED, ExamStatus.ONGOING, ExamStatus.CANCELLED},
    ExamStatus.ONGOING: {ExamStatus.POSTPONED, ExamStatus.COMPLETED, ExamStatus.CANCELLED},
    ExamStatus.COMPLETED: set(),
    ExamStatus.CANCELLED: set(),
})

LEAVE_TRANSITIONS = StatusTransitionTable("leave", LeaveStatus, {
    LeaveStatus.PENDING: {LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED},
    LeaveStatus.APPROVED: set(),
    LeaveStatus.REJECTED: set(),
    LeaveStatus.CANCELLED: set(),
})

GRIEVANCE_TRANSITIONS = StatusTransitionTable("grievance", GrievanceStatus, {
    GrievanceStatus.SUBMITTED: {GrievanceStatus.UNDER_REVIEW},
    GrievanceStatus.UNDER_REVIEW: {GrievanceStatus.IN_PROGRESS},
    GrievanceStatus.IN_PROGRESS: {GrievanceStatus.RESOLVED, GrievanceStatus.REJECTED},
    GrievanceStatus.RESOLVED: {GrievanceStatus.CLOSED},
    GrievanceStatus.REJECTED: {GrievanceStatus.CLOSED},
    GrievanceStatus.CLOSED: set(),
})

THESIS_TRANSITIONS = StatusTransitionTable("thesis", ThesisStatus, {
    ThesisStatus.DRAFT: {ThesisStatus.SUBMITTED},
    ThesisStatus.SUBMITTED: {ThesisStatus.UNDER_REVIEW},
    ThesisStatus.UNDER_REVIEW: {ThesisStatus.REVISION_NEEDED, ThesisStatus.APPROVED, ThesisStatus.REJECTED},
    ThesisStatus.REVISION_NEEDED: {ThesisStatus.SUBMITTED},
    ThesisStatus.APPROVED: {ThesisStatus.PUBLISHED},
    ThesisStatus.REJECTED: set(),
    ThesisStatus.PUBLISHED: set(),
})

FEE_TRANSITIONS = StatusTransitionTable("fee", PaymentStatus, {
    PaymentStatus.PENDING: {
        PaymentStatus.PARTIAL,
        PaymentStatus.PAID,
        PaymentStatus.OVERDUE,
        PaymentStatus.WAIVED,
    },
    PaymentStatus.PARTIAL: {PaymentStatus.PARTIAL, PaymentStatus.PAID},
    PaymentStatus.OVERDUE: {PaymentStatus.PARTIAL, PaymentStatus.PAID, PaymentStatus.WAIVED},
    PaymentStatus.PAID: set(),
    PaymentStatus.WAIVED: set(),
})

# Where a record may still be edited or removed
ADMISSION_EDITABLE = frozenset({AdmissionStatus.APPLIED, AdmissionStatus.DOCUMENT_VERIFICATION})
EXAM_DELETABLE = frozenset({ExamStatus.SCHEDULED, ExamStatus.CANCELLED})
GRIEVANCE_EDITABLE = frozenset({GrievanceStatus.SUBMITTED, GrievanceStatus.UNDER_REVIEW})
GRIEVANCE_DELETABLE = frozenset({GrievanceStatus.SUBMITTED})
THESIS_EDITABLE = frozenset({ThesisStatus.DRAFT, ThesisStatus.REVISION_NEEDED})
THESIS_DELETABLE = frozenset({ThesisStatus.DRAFT})
FEE_DELETABLE = frozenset({PaymentStatus.PENDING})
