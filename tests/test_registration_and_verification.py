from datetime import timedelta
from urllib.parse import parse_qs, urlsplit

import pytest

from greasedesk.core.config import BASE_URL
from greasedesk.core.database import utcnow
from greasedesk.models.group import Group
from greasedesk.models.user import ROLE_OWNER, User
from greasedesk.models.verification_token import VerificationToken
from greasedesk.services.email_address import is_valid_email
from tests.app_harness import build_harness, latest_token_for
from tests.fixtures_data import LEWIS_EMAIL, LEWIS_REGISTRATION


def test_register_creates_group_owner_and_token():
    harness = build_harness()

    response = harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == LEWIS_EMAIL
    assert body["user"]["name"] == "Lewis"
    assert body["emailSent"] is True

    with harness.session() as db:
        user = db.query(User).filter(User.email == LEWIS_EMAIL).one()
        group = db.query(Group).filter(Group.id == user.group_id).one()
        token = db.query(VerificationToken).filter(VerificationToken.identifier == LEWIS_EMAIL).one()
        assert user.role == ROLE_OWNER
        assert user.is_active is True
        assert user.email_verified_at is None
        assert user.password_hash != LEWIS_REGISTRATION["password"]
        assert group.group_name == "Lewis's Garage"
        assert group.billing_email == LEWIS_EMAIL
        assert len(token.token) == 64
        assert token.expires > utcnow() + timedelta(hours=23)

    sent = harness.email_provider.messages_to(LEWIS_EMAIL)
    assert len(sent) == 1
    assert f"{BASE_URL}/api/auth/verify?token=" in sent[0].html


def test_register_rejects_duplicate_email_case_insensitively():
    harness = build_harness()
    assert harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION).status_code == 201

    response = harness.client.post(
        "/api/auth/register",
        json={**LEWIS_REGISTRATION, "email": "LEWIS@example.COM"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "EmailAlreadyExists"
    with harness.session() as db:
        assert db.query(Group).count() == 1


def test_register_validates_before_writing():
    harness = build_harness()

    short = harness.client.post("/api/auth/register", json={**LEWIS_REGISTRATION, "password": "short"})
    bad_email = harness.client.post("/api/auth/register", json={**LEWIS_REGISTRATION, "email": "not-an-email"})
    no_name = harness.client.post("/api/auth/register", json={**LEWIS_REGISTRATION, "name": "   "})

    for response in (short, bad_email, no_name):
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
    with harness.session() as db:
        assert db.query(User).count() == 0
        assert db.query(Group).count() == 0


def test_register_keeps_account_when_email_fails():
    harness = build_harness(failing_emails={LEWIS_EMAIL})

    response = harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)

    assert response.status_code == 201
    assert response.json()["emailSent"] is False
    with harness.session() as db:
        assert db.query(User).filter(User.email == LEWIS_EMAIL).count() == 1


def test_verify_sets_timestamp_deletes_token_and_redirects():
    harness = build_harness()
    harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)
    token = latest_token_for(harness, LEWIS_EMAIL)

    response = harness.client.get("/api/auth/verify", params={"token": token}, follow_redirects=False)

    assert response.status_code == 302
    location = urlsplit(response.headers["location"])
    assert location.path == "/admin/login"
    query = parse_qs(location.query)
    assert query["email"] == [LEWIS_EMAIL]
    assert query["status"] == ["verified"]
    assert query["callbackUrl"] == [f"{BASE_URL}/onboarding/billing"]

    with harness.session() as db:
        user = db.query(User).filter(User.email == LEWIS_EMAIL).one()
        assert user.email_verified_at is not None
        assert db.query(VerificationToken).count() == 0


def test_verify_twice_reports_not_found():
    harness = build_harness()
    harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)
    token = latest_token_for(harness, LEWIS_EMAIL)
    harness.client.get("/api/auth/verify", params={"token": token}, follow_redirects=False)

    again = harness.client.get("/api/auth/verify", params={"token": token}, follow_redirects=False)

    assert again.status_code == 302
    assert again.headers["location"] == f"{BASE_URL}/onboarding/verify-status?status=not_found"


def test_expired_token_is_reported_and_kept():
    harness = build_harness()
    harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)
    token = latest_token_for(harness, LEWIS_EMAIL)
    with harness.session() as db:
        row = db.query(VerificationToken).filter(VerificationToken.token == token).one()
        row.expires = utcnow() - timedelta(minutes=1)
        db.commit()

    response = harness.client.get("/api/auth/verify", params={"token": token}, follow_redirects=False)

    assert response.headers["location"] == f"{BASE_URL}/onboarding/verify-status?status=expired"
    with harness.session() as db:
        assert db.query(VerificationToken).filter(VerificationToken.token == token).count() == 1
        assert db.query(User).filter(User.email == LEWIS_EMAIL).one().email_verified_at is None


def test_missing_token_redirects_as_invalid():
    harness = build_harness()

    response = harness.client.get("/api/auth/verify", follow_redirects=False)

    assert response.headers["location"] == f"{BASE_URL}/onboarding/verify-status?status=invalid"


def test_resend_replaces_token_and_sends_again():
    harness = build_harness()
    harness.client.post("/api/auth/register", json=LEWIS_REGISTRATION)
    first = latest_token_for(harness, LEWIS_EMAIL)

    response = harness.client.post("/api/auth/resend-verification", json={"email": "lewis@EXAMPLE.com"})

    assert response.status_code == 200
    assert response.json()["emailSent"] is True
    second = latest_token_for(harness, LEWIS_EMAIL)
    assert second != first
    assert len(harness.email_provider.messages_to(LEWIS_EMAIL)) == 2


def test_resend_for_unknown_email_is_generic():
    harness = build_harness()

    response = harness.client.post("/api/auth/resend-verification", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json()["emailSent"] is True
    assert harness.email_provider.outbox == []


@pytest.mark.parametrize("address", ["lewis@example.com", "first.last+garage@example.co.uk"])
def test_well_formed_addresses_are_valid(address):
    assert is_valid_email(address)


@pytest.mark.parametrize("address", ["", None, "not-an-email", "lewis@", "lewis@@example.com", "lewis @example.com"])
def test_malformed_addresses_are_rejected(address):
    assert not is_valid_email(address)
