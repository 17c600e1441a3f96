"""API routers."""

from medhub.routers.admin import router as admin_router
from medhub.routers.audit import router as audit_router
from medhub.routers.disputes import router as disputes_router
from medhub.routers.equipment import router as equipment_router
from medhub.routers.internal import router as internal_router
from medhub.routers.members import router as members_router
from medhub.routers.payments import router as payments_router
from medhub.routers.providers import router as providers_router
from medhub.routers.service_requests import router as service_requests_router
from medhub.routers.support import router as support_router

__all__ = [
    "admin_router",
    "audit_router",
    "disputes_router",
    "equipment_router",
    "internal_router",
    "members_router",
    "payments_router",
    "providers_router",
    "service_requests_router",
    "support_router",
]
