"""Shared fixtures: in-memory database, user factory and API client."""
from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_DIR", "")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from bizfund.core.security import AuthenticatedUser, get_security_provider  # noqa: E402
from bizfund.db.session import get_db_session  # noqa: E402
from bizfund.main import create_app  # noqa: E402
from bizfund.models import Base, User, UserRole, Wallet  # noqa: E402

# Hashing is slow by design, so fixtures share one precomputed hash.
PASSWORD = "secret123"
PASSWORD_HASH = get_security_provider().hash_password(PASSWORD)

KYC_PROFILE = {
    "first_name": "Ada",
    "last_name": "Obi",
    "phone": "+2348012345678",
    "address": "12 Marina Road, Lagos",
    "id_number": "A1234567",
    "id_document": "https://files.example.com/id/a1234567.pdf",
}
BUSINESS_PROFILE = {
    "business_name": "Obi Foods Ltd",
    "cac_number": "RC123456",
    "tax_id": "TIN-0099",
    "business_address": "4 Broad Street, Lagos",
}


@pytest.fixture()
def session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def session(session_factory: sessionmaker) -> Iterator[Session]:
    """Provide an in-memory database session for each test."""

    with session_factory() as session:
        yield session


@pytest.fixture()
def make_user(session: Session) -> Callable[..., User]:
    """Create a user with a wallet. Profile attributes pass through as keywords."""

    counter = iter(range(1, 10_000))

    def _make(
        role: UserRole = UserRole.INVESTOR,
        *,
        email: str | None = None,
        balance: str | int = 0,
        **attributes: object,
    ) -> User:
        user = User(
            email=email or f"user{next(counter)}@example.com",
            password_hash=PASSWORD_HASH,
            role=role,
            **attributes,
        )
        session.add(user)
        session.flush()
        session.add(Wallet(user_id=user.id, balance=Decimal(str(balance))))
        session.commit()
        return user

    return _make


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a function building a bearer header for a user."""

    def _headers(user: User) -> dict[str, str]:
        principal = AuthenticatedUser(user_id=user.id, email=user.email, role=user.role)
        token = get_security_provider().create_access_token(principal)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    app = create_app()

    def _override_session() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _override_session
    with TestClient(app) as test_client:
        yield test_client
