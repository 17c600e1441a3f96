"""Members router - organization membership management."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from medhub.core.deps import get_caller, get_db
from medhub.core.identity import CallerIdentity
from medhub.schemas import MemberAdd, MemberRead, MemberRoleChange
from medhub.services import membership_service

router = APIRouter(prefix="/members", tags=["Members"])


@router.get("", response_model=list[MemberRead])
def list_members(
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return membership_service.list_members(db, caller)


@router.post("", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def add_member(
    data: MemberAdd,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    """Add a user by email (owners add anyone, admins add members only)."""
    return membership_service.add_member(
        db, caller, email=data.email, role=data.role, display_name=data.display_name
    )


@router.patch("/{membership_id}", response_model=MemberRead)
def change_member_role(
    membership_id: UUID,
    data: MemberRoleChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    return membership_service.change_member_role(db, caller, membership_id, data.role)


@router.delete("/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    membership_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(get_caller),
):
    membership_service.remove_member(db, caller, membership_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
