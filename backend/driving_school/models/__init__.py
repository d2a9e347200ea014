# Re-export all models for convenient imports
from driving_school.models.admin import Admin
from driving_school.models.candidate import (
    Candidate,
    CandidateStatus,
    LicenseType,
    Phase,
    PhaseStatus,
)
from driving_school.models.instructor import Instructor, InstructorStatus
from driving_school.models.vehicle import Vehicle, VehicleStatus, MaintenanceLog, MaintenanceType
from driving_school.models.session import Session, SessionStatus
from driving_school.models.payment import Payment, PaymentStatus, PaymentMethod, PaymentPlan
from driving_school.models.enrollment import Enrollment, EnrollmentStatus
from driving_school.models.course import Course, CourseType
from driving_school.models.exam import Exam, ExamStatus, ExamResult, ExamResultStatus

__all__ = [
    "Admin",
    # Candidates
    "Candidate",
    "CandidateStatus",
    "LicenseType",
    "Phase",
    "PhaseStatus",
    # Staff & fleet
    "Instructor",
    "InstructorStatus",
    "Vehicle",
    "VehicleStatus",
    "MaintenanceLog",
    "MaintenanceType",
    # Schedule
    "Session",
    "SessionStatus",
    # Billing
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "PaymentPlan",
    "Enrollment",
    "EnrollmentStatus",
    # Courses & exams
    "Course",
    "CourseType",
    "Exam",
    "ExamStatus",
    "ExamResult",
    "ExamResultStatus",
]
