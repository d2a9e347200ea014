from fastapi import APIRouter

from driving_school.api.v1.endpoints import (
    auth,
    candidates,
    courses,
    dashboard,
    enrollments,
    exams,
    instructors,
    payment_plans,
    payments,
    schedule,
    settings,
    vehicles,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(settings.router, prefix="/settings", tags=["Settings"])
api_router.include_router(candidates.router, prefix="/candidates", tags=["Candidates"])
api_router.include_router(instructors.router, prefix="/instructors", tags=["Instructors"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["Vehicles"])
api_router.include_router(schedule.router, prefix="/schedule", tags=["Schedule"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(payment_plans.router, prefix="/payment-plans", tags=["Payment Plans"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(exams.router, prefix="/exams", tags=["Exams"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
