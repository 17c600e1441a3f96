"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database per test (tables created from the ORM metadata)
- Hospital / provider organizations with users in every role
- Caller identities and JWT tokens for authenticated tests
- HTTPX AsyncClient wired to the test session
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Generator

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["INTERNAL_SECRET"] = "test-internal-secret"
os.environ["JWT_SECRET"] = "test-jwt-secret"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from medhub.core.deps import get_db
from medhub.core.identity import CallerIdentity
from medhub.core.security import create_session_token
from medhub.db.base import Base
from medhub.db.enums import (
    OrganizationStatus,
    OrganizationType,
    PlatformRole,
    ProviderStatus,
    Role,
    VerificationStatus,
)
from medhub.db.models import Membership, Organization, Provider, User
from medhub.main import app


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh in-memory database for each test.

    StaticPool keeps a single connection so every session (including the one
    the API uses through the get_db override) sees the same tables.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def _make_org(db: Session, org_type: OrganizationType, name: str) -> Organization:
    org = Organization(
        id=uuid.uuid4(),
        name=name,
        slug=f"{org_type.value}-{uuid.uuid4().hex[:8]}",
        org_type=org_type.value,
        status=OrganizationStatus.ACTIVE.value,
    )
    db.add(org)
    db.flush()
    return org


@pytest.fixture(scope="function")
def hospital_org(db: Session) -> Organization:
    org = _make_org(db, OrganizationType.HOSPITAL, "Bệnh viện Test")
    db.commit()
    return org


@pytest.fixture(scope="function")
def other_hospital_org(db: Session) -> Organization:
    org = _make_org(db, OrganizationType.HOSPITAL, "Bệnh viện Khác")
    db.commit()
    return org


@pytest.fixture(scope="function")
def provider_org(db: Session) -> Organization:
    """Provider organization with an active, verified provider account."""
    org = _make_org(db, OrganizationType.PROVIDER, "Công ty Kỹ thuật Test")
    db.add(
        Provider(
            organization_id=org.id,
            company_name=org.name,
            status=ProviderStatus.ACTIVE.value,
            verification_status=VerificationStatus.VERIFIED.value,
        )
    )
    db.commit()
    return org


@pytest.fixture(scope="function")
def provider(db: Session, provider_org: Organization) -> Provider:
    return db.query(Provider).filter(Provider.organization_id == provider_org.id).one()


# =============================================================================
# User / Caller Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., User]:
    """Factory: create a user, optionally with a membership."""

    def _make(
        org: Organization | None = None,
        role: Role = Role.MEMBER,
        platform_role: PlatformRole | None = None,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=f"user-{uuid.uuid4().hex[:8]}@test.vn",
            display_name="Test User",
            platform_role=platform_role.value if platform_role else None,
        )
        db.add(user)
        db.flush()
        if org is not None:
            db.add(Membership(organization_id=org.id, user_id=user.id, role=role.value))
        db.commit()
        return user

    return _make


def _caller_for(user: User, org: Organization | None = None) -> CallerIdentity:
    return CallerIdentity(
        user_id=user.id,
        organization_id=org.id if org else None,
        platform_role=user.platform_role,
    )


@pytest.fixture(scope="function")
def hospital_owner(make_user, hospital_org) -> CallerIdentity:
    return _caller_for(make_user(hospital_org, Role.OWNER), hospital_org)


@pytest.fixture(scope="function")
def hospital_admin(make_user, hospital_org) -> CallerIdentity:
    return _caller_for(make_user(hospital_org, Role.ADMIN), hospital_org)


@pytest.fixture(scope="function")
def hospital_member(make_user, hospital_org) -> CallerIdentity:
    return _caller_for(make_user(hospital_org, Role.MEMBER), hospital_org)


@pytest.fixture(scope="function")
def other_hospital_owner(make_user, other_hospital_org) -> CallerIdentity:
    return _caller_for(make_user(other_hospital_org, Role.OWNER), other_hospital_org)


@pytest.fixture(scope="function")
def provider_owner(make_user, provider_org) -> CallerIdentity:
    return _caller_for(make_user(provider_org, Role.OWNER), provider_org)


@pytest.fixture(scope="function")
def platform_admin(make_user) -> CallerIdentity:
    return _caller_for(make_user(platform_role=PlatformRole.PLATFORM_ADMIN))


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user_id: uuid.UUID
    org_id: uuid.UUID | None
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _auth_for(caller: CallerIdentity) -> TestAuth:
    token = create_session_token(
        user_id=caller.user_id,
        org_id=caller.organization_id,
        platform_role=caller.platform_role,
    )
    return TestAuth(user_id=caller.user_id, org_id=caller.organization_id, token=token)


@pytest.fixture(scope="function")
def caller_for() -> Callable[..., CallerIdentity]:
    """Build a CallerIdentity for a user (and optionally an organization)."""
    return _caller_for


@pytest.fixture(scope="function")
def auth_for() -> Callable[[CallerIdentity], TestAuth]:
    """Mint a bearer token carrying a caller's claims."""
    return _auth_for


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to the test session; pass auth headers per request."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
