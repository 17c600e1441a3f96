"""Platform admin router - cross-tenant operations.

Every endpoint requires the platform admin role; row access goes through
the elevated (logged) path in the services.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_db, get_platform_admin
from medhub.core.identity import CallerIdentity
from medhub.db.enums import AutomationRule, ProviderStatus, TicketStatus
from medhub.schemas import (
    AuditLogListResponse,
    AuditLogRead,
    AutomationRuleStatus,
    AutomationRunRead,
    CertificationRead,
    DisputeArbitrate,
    DisputeRead,
    OrgOnboard,
    OrgRead,
    PaymentRead,
    PaymentRefund,
    ProviderRead,
    ProviderReassign,
    ReasonRequest,
    ServiceRequestRead,
    TicketRead,
)
from medhub.services import (
    audit_service,
    automation_service,
    dispute_service,
    org_service,
    payment_service,
    provider_service,
    service_request_service,
    support_service,
)

router = APIRouter(prefix="/admin", tags=["Platform Admin"])


# ============================================================================
# Organizations
# ============================================================================

@router.post("/organizations", response_model=OrgRead, status_code=status.HTTP_201_CREATED)
def onboard_organization(
    data: OrgOnboard,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return org_service.onboard_organization(
        db,
        admin,
        name=data.name,
        slug=data.slug,
        org_type=data.org_type,
        owner_email=data.owner_email,
        owner_name=data.owner_name,
    )


@router.get("/organizations/{org_id}", response_model=OrgRead)
def get_organization(
    org_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return org_service.require_org(db, org_id)


@router.post("/organizations/{org_id}/suspend", response_model=OrgRead)
def suspend_organization(
    org_id: UUID,
    data: ReasonRequest,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return org_service.suspend_organization(db, admin, org_id, data.reason)


@router.post("/organizations/{org_id}/reactivate", response_model=OrgRead)
def reactivate_organization(
    org_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return org_service.reactivate_organization(db, admin, org_id)


# ============================================================================
# Providers
# ============================================================================

@router.get("/providers", response_model=list[ProviderRead])
def list_providers(
    status: ProviderStatus | None = None,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.list_providers(db, status=status)


@router.post("/providers/{provider_id}/approve", response_model=ProviderRead)
def approve_provider(
    provider_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.approve_provider(db, admin, provider_id)


@router.post("/providers/{provider_id}/reject", response_model=ProviderRead)
def reject_provider(
    provider_id: UUID,
    data: ReasonRequest,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.reject_provider(db, admin, provider_id, data.reason)


@router.post("/providers/{provider_id}/suspend", response_model=ProviderRead)
def suspend_provider(
    provider_id: UUID,
    data: ReasonRequest,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.suspend_provider(db, admin, provider_id, data.reason)


@router.post("/providers/{provider_id}/reactivate", response_model=ProviderRead)
def reactivate_provider(
    provider_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.reactivate_provider(db, admin, provider_id)


@router.post("/certifications/{certification_id}/verify", response_model=CertificationRead)
def verify_certification(
    certification_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return provider_service.verify_certification(db, admin, certification_id)


# ============================================================================
# Support and payments overrides
# ============================================================================

@router.get("/support-tickets", response_model=list[TicketRead])
def list_all_tickets(
    status: TicketStatus | None = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return support_service.list_all_tickets(db, status=status, limit=limit)


@router.post("/support-tickets/{ticket_id}/close", response_model=TicketRead)
def admin_close_ticket(
    ticket_id: UUID,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return support_service.admin_close_ticket(db, admin, ticket_id)


@router.post("/payments/{payment_id}/refund", response_model=PaymentRead)
def refund_payment(
    payment_id: UUID,
    data: PaymentRefund,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return payment_service.refund_payment(db, admin, payment_id, data.reason)


# ============================================================================
# Dispute arbitration
# ============================================================================

@router.get("/disputes/escalated", response_model=list[DisputeRead])
def list_escalated_disputes(
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return dispute_service.list_escalated_disputes(db)


@router.post("/disputes/{dispute_id}/resolve", response_model=DisputeRead)
def admin_resolve_dispute(
    dispute_id: UUID,
    data: DisputeArbitrate,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return dispute_service.admin_resolve_dispute(
        db,
        admin,
        dispute_id,
        resolution=data.resolution,
        reason=data.reason,
        refund_amount=data.refund_amount,
    )


@router.post("/service-requests/{request_id}/reassign", response_model=ServiceRequestRead)
def reassign_provider(
    request_id: UUID,
    data: ProviderReassign,
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    return service_request_service.reassign_provider(
        db, admin, request_id, data.provider_id, data.reason
    )


# ============================================================================
# Audit and automation
# ============================================================================

@router.get("/audit", response_model=AuditLogListResponse)
def list_audit_logs(
    organization_id: UUID | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
) -> AuditLogListResponse:
    entries, total = audit_service.list_entries(
        db,
        organization_id=organization_id,
        action=action,
        resource_type=resource_type,
        limit=limit,
        offset=offset,
    )
    return AuditLogListResponse(
        items=[AuditLogRead.model_validate(entry) for entry in entries],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/automation/runs", response_model=list[AutomationRunRead])
def list_automation_runs(
    rule_name: AutomationRule | None = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    runs = automation_service.list_runs(db, rule_name=rule_name, limit=limit)
    return [AutomationRunRead.model_validate(run) for run in runs]


@router.get("/automation/status", response_model=list[AutomationRuleStatus])
def automation_status(
    db: Session = Depends(get_db),
    admin: CallerIdentity = Depends(get_platform_admin),
):
    """Last run of every rule, for the automation dashboard."""
    return [
        AutomationRuleStatus(
            rule_name=rule_name,
            last_run=AutomationRunRead.model_validate(run) if run else None,
        )
        for rule_name, run in automation_service.rule_status(db).items()
    ]
