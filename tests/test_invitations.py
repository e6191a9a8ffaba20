import pytest
from sqlalchemy.exc import IntegrityError

from greasedesk.core.errors import Forbidden, ValidationError
from greasedesk.models.invite import Invite
from greasedesk.models.user import INVITE_PENDING_HASH, ROLE_MECHANIC, ROLE_STAFF, User
from greasedesk.services import invitations
from greasedesk.services.invitations import InviteRequest, invite_team, normalize_invites
from greasedesk.services.tenant_context import TenantContext
from greasedesk.services.upserts import upsert
from tests.app_harness import auth_headers, build_harness, onboard_owner
from tests.fixtures_data import AUTOFIX_SETUP, LEWIS_EMAIL, LEWIS_REGISTRATION, MECHANIC_INVITE


def test_normalize_collapses_duplicates_last_wins():
    batch = normalize_invites(
        [
            InviteRequest(email="Tech@Example.com", role="staff"),
            InviteRequest(email="other@example.com", role="ADMIN"),
            InviteRequest(email=" tech@example.com ", role="MECHANIC"),
        ]
    )

    assert [(item.email, item.role) for item in batch] == [
        ("other@example.com", "ADMIN"),
        ("tech@example.com", "MECHANIC"),
    ]


@pytest.mark.parametrize(
    "invites",
    [
        [],
        None,
        [InviteRequest(email="not-an-email", role="STAFF")],
        [InviteRequest(email="tech@example.com", role="OWNER")],
        [InviteRequest(email="tech@example.com", role="")],
    ],
)
def test_normalize_rejects_bad_batches(invites):
    with pytest.raises(ValidationError):
        normalize_invites(invites)


def test_staff_cannot_invite():
    context = TenantContext(user_id="u", group_id="g", site_id="s", role=ROLE_STAFF, email="staff@example.com")

    with pytest.raises(Forbidden):
        invite_team(None, context, [InviteRequest(email="x@example.com", role="STAFF")], email_service=None)


def test_invite_creates_pending_user_and_invite_row():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)

    response = harness.client.post("/api/onboarding/invite-team", json=MECHANIC_INVITE, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert "warnings" not in body
    with harness.session() as db:
        owner = db.query(User).filter(User.email == LEWIS_EMAIL).one()
        tech = db.query(User).filter(User.email == "tech@example.com").one()
        invite = db.query(Invite).one()
        assert tech.is_active is False
        assert tech.password_hash == INVITE_PENDING_HASH
        assert tech.email_verified_at is None
        assert tech.role == ROLE_MECHANIC
        assert tech.group_id == owner.group_id
        assert tech.site_id == owner.site_id
        assert invite.group_id == owner.group_id
        assert invite.status == "pending"
        assert "tech%40example.com" in invite.invite_link

    sent = harness.email_provider.messages_to("tech@example.com")
    assert len(sent) == 1
    assert "AutoFix" in sent[0].subject


def test_reinvite_updates_role_without_duplicates():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)
    harness.client.post("/api/onboarding/invite-team", json=MECHANIC_INVITE, headers=headers)

    response = harness.client.post(
        "/api/onboarding/invite-team",
        json={"invites": [{"email": "TECH@example.com", "role": "STAFF"}]},
        headers=headers,
    )

    assert response.status_code == 200
    with harness.session() as db:
        assert db.query(User).filter(User.email == "tech@example.com").one().role == ROLE_STAFF
        assert db.query(Invite).count() == 1


def test_failed_invitation_email_is_reported_as_warning():
    harness = build_harness(failing_emails={"tech@example.com"})
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)

    response = harness.client.post(
        "/api/onboarding/invite-team",
        json={
            "invites": [
                {"email": "tech@example.com", "role": "MECHANIC"},
                {"email": "desk@example.com", "role": "STAFF"},
            ]
        },
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert len(body["warnings"]) == 1
    assert "tech@example.com" in body["warnings"][0]
    with harness.session() as db:
        assert db.query(User).filter(User.email.in_(["tech@example.com", "desk@example.com"])).count() == 2


def test_invalid_entry_rejects_whole_batch():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)

    response = harness.client.post(
        "/api/onboarding/invite-team",
        json={
            "invites": [
                {"email": "tech@example.com", "role": "MECHANIC"},
                {"email": "desk@example.com", "role": "OWNER"},
            ]
        },
        headers=headers,
    )

    assert response.status_code == 400
    with harness.session() as db:
        assert db.query(User).count() == 1
        assert db.query(Invite).count() == 0


def test_empty_invite_list_is_validation_error():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)

    response = harness.client.post("/api/onboarding/invite-team", json={"invites": []}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_invited_staff_cannot_invite_over_http():
    harness = build_harness()
    owner_headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)
    harness.client.post(
        "/api/onboarding/invite-team",
        json={"invites": [{"email": "desk@example.com", "role": "STAFF"}]},
        headers=owner_headers,
    )
    with harness.session() as db:
        staff_id = db.query(User.id).filter(User.email == "desk@example.com").scalar()

    response = harness.client.post(
        "/api/onboarding/invite-team",
        json=MECHANIC_INVITE,
        headers=auth_headers(staff_id, "desk@example.com"),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


def test_store_conflict_mid_batch_rolls_back_every_invite(monkeypatch):
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)
    calls = []

    def conflicting_upsert(db, model, **kwargs):
        calls.append(model)
        if model is User and calls.count(User) == 2:
            raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.email"))
        return upsert(db, model, **kwargs)

    monkeypatch.setattr(invitations, "upsert", conflicting_upsert)

    response = harness.client.post(
        "/api/onboarding/invite-team",
        json={
            "invites": [
                {"email": "tech@example.com", "role": "MECHANIC"},
                {"email": "desk@example.com", "role": "STAFF"},
            ]
        },
        headers=headers,
    )

    assert response.status_code == 409
    assert response.json()["error"] == "Conflict"
    with harness.session() as db:
        assert db.query(User).count() == 1
        assert db.query(User).one().email == LEWIS_EMAIL
        assert db.query(Invite).count() == 0
    assert harness.email_provider.messages_to("tech@example.com") == []
