"""In-memory application wiring shared by the API tests."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from greasedesk.core.database import Base, build_engine, get_db
from greasedesk.core.errors import register_exception_handlers
from greasedesk.deps import get_email_service
from greasedesk.email.mock_provider import MockEmailProvider
from greasedesk.email.service import EmailService
from greasedesk.middleware.observability import ObservabilityMiddleware
import greasedesk.models  # noqa: F401
from greasedesk.models.verification_token import VerificationToken
from greasedesk.routers.auth import router as auth_router
from greasedesk.routers.bookings import router as bookings_router
from greasedesk.routers.internal_metrics import router as internal_metrics_router
from greasedesk.routers.onboarding import router as onboarding_router
from greasedesk.routers.settings import router as settings_router
from greasedesk.services.session_auth import create_session_token


@dataclass
class Harness:
    client: TestClient
    session_factory: sessionmaker
    email_provider: MockEmailProvider
    email_service: EmailService

    @contextmanager
    def session(self) -> Iterator[Session]:
        # Close before the next client call: every session shares one connection.
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()


def build_session_factory() -> sessionmaker:
    engine = build_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def build_harness(*, failing_emails: set[str] | None = None) -> Harness:
    session_factory = build_session_factory()
    provider = MockEmailProvider(fail_for=failing_emails)
    email_service = EmailService(provider)

    app = FastAPI()
    app.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(app)
    for router in (auth_router, onboarding_router, settings_router, bookings_router, internal_metrics_router):
        app.include_router(router)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    client = TestClient(app, raise_server_exceptions=False)
    return Harness(client=client, session_factory=session_factory, email_provider=provider, email_service=email_service)


def auth_headers(user_id: str, email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user_id=user_id, email=email)}"}


def latest_token_for(harness: Harness, email: str) -> str:
    with harness.session() as db:
        row = db.query(VerificationToken).filter(VerificationToken.identifier == email).one()
        return row.token


def register_verified_owner(harness: Harness, payload: dict) -> dict[str, str]:
    """Register and verify through the API; returns auth headers for the new owner."""
    response = harness.client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    user = response.json()["user"]
    token = latest_token_for(harness, user["email"])
    verified = harness.client.get("/api/auth/verify", params={"token": token}, follow_redirects=False)
    assert verified.status_code == 302, verified.text
    return auth_headers(user["id"], user["email"])


def onboard_owner(harness: Harness, register_payload: dict, setup_payload: dict) -> dict[str, str]:
    headers = register_verified_owner(harness, register_payload)
    assert harness.client.post("/api/onboarding/start-trial", headers=headers).status_code == 201
    setup = harness.client.post("/api/onboarding/setup", json=setup_payload, headers=headers)
    assert setup.status_code == 201, setup.text
    return headers
