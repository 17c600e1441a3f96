"""Provider router - a provider organization's own account and certifications."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.errors import NotFoundError
from medhub.core.identity import CallerIdentity
from medhub.schemas import CertificationCreate, CertificationRead, ProviderRead
from medhub.services import provider_service
from medhub.services.service_request_service import get_provider_for_org

router = APIRouter(prefix="/provider", tags=["Provider"])


@router.get("/me", response_model=ProviderRead)
def get_my_provider(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    provider = get_provider_for_org(db, caller.organization_id)
    if not provider:
        raise NotFoundError("provider")
    return provider


@router.post(
    "/certifications",
    response_model=CertificationRead,
    status_code=status.HTTP_201_CREATED,
)
def add_certification(
    data: CertificationCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return provider_service.add_certification(
        db,
        caller,
        name=data.name,
        issuing_body=data.issuing_body,
        issued_at=data.issued_at,
        expires_at=data.expires_at,
    )
