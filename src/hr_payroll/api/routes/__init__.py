"""API routes."""

from hr_payroll.api.routes.directory import router as directory_router
from hr_payroll.api.routes.health import router as health_router
from hr_payroll.api.routes.leave import router as leave_router
from hr_payroll.api.routes.payroll import router as payroll_router
from hr_payroll.api.routes.policy import router as policy_router
from hr_payroll.api.routes.reports import router as reports_router

__all__ = [
    "directory_router",
    "health_router",
    "leave_router",
    "payroll_router",
    "policy_router",
    "reports_router",
]
