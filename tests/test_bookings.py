from datetime import date, datetime
from zoneinfo import ZoneInfo

from greasedesk.models.booking import Booking
from greasedesk.models.job_card import JobCard
from greasedesk.models.user import User
from greasedesk.services.bookings import local_day_window
from tests.app_harness import build_harness, onboard_owner, register_verified_owner
from tests.fixtures_data import AUTOFIX_SETUP, FULL_SETUP, LEWIS_EMAIL, LEWIS_REGISTRATION, OTHER_REGISTRATION


def _owner_site(harness, email):
    with harness.session() as db:
        user = db.query(User).filter(User.email == email).one()
        return user.group_id, user.site_id


def test_local_day_window_follows_daylight_saving():
    start, end = local_day_window(date(2025, 7, 1), ZoneInfo("Europe/London"))

    assert start == datetime(2025, 6, 30, 23, 0)
    assert end == datetime(2025, 7, 1, 23, 0)


def test_bookings_are_scoped_to_site_and_local_day():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)
    onboard_owner(harness, OTHER_REGISTRATION, FULL_SETUP)
    group_id, site_id = _owner_site(harness, LEWIS_EMAIL)
    other_group, other_site = _owner_site(harness, "priya@example.org")

    with harness.session() as db:
        db.add_all(
            [
                Booking(group_id=group_id, site_id=site_id, starts_at=datetime(2025, 7, 1, 9, 0),
                        reg="MF70 ABC", vehicle="MINI F56 Cooper S", service="Timing chain", status="in_progress"),
                Booking(group_id=group_id, site_id=site_id, starts_at=datetime(2025, 6, 30, 23, 30),
                        reg="BJ16 XYZ", vehicle="BMW 520d", service="Oil Service", status="booked"),
                Booking(group_id=group_id, site_id=site_id, starts_at=datetime(2025, 7, 1, 23, 30),
                        reg="YK22 TMS", vehicle="BMW X5 M50d", service="Brake fluid flush"),
                Booking(group_id=other_group, site_id=other_site, starts_at=datetime(2025, 7, 1, 10, 0),
                        reg="OT11 HER", vehicle="Ford Focus", service="MOT"),
            ]
        )
        db.commit()

    response = harness.client.get("/api/bookings", params={"date": "2025-07-01"}, headers=headers)

    assert response.status_code == 200
    rows = response.json()
    assert [row["reg"] for row in rows] == ["BJ16 XYZ", "MF70 ABC"]
    assert rows[0]["time"] == "00:30"
    assert rows[1]["time"] == "10:00"


def test_bookings_reject_malformed_date():
    harness = build_harness()
    headers = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)

    response = harness.client.get("/api/bookings", params={"date": "01/07/2025"}, headers=headers)

    assert response.status_code == 400


def test_bookings_require_site_context():
    harness = build_harness()
    headers = register_verified_owner(harness, LEWIS_REGISTRATION)

    response = harness.client.get("/api/bookings", headers=headers)

    assert response.status_code == 409
    assert response.json()["error"] == "TenantContextMissing"


def test_job_card_is_only_visible_to_its_site():
    harness = build_harness()
    lewis = onboard_owner(harness, LEWIS_REGISTRATION, AUTOFIX_SETUP)
    priya = onboard_owner(harness, OTHER_REGISTRATION, FULL_SETUP)
    group_id, site_id = _owner_site(harness, LEWIS_EMAIL)

    with harness.session() as db:
        card = JobCard(
            group_id=group_id,
            site_id=site_id,
            reg="BJ16 XYZ",
            vehicle="BMW 520d",
            technician="Lewis",
            tasks=[{"id": "t1", "title": "Oil service", "notes": "", "done": False}],
        )
        db.add(card)
        db.commit()
        card_id = card.id

    own = harness.client.get("/api/jobcard", params={"id": card_id}, headers=lewis)
    foreign = harness.client.get("/api/jobcard", params={"id": card_id}, headers=priya)
    missing = harness.client.get("/api/jobcard", headers=lewis)

    assert own.status_code == 200
    assert own.json()["reg"] == "BJ16 XYZ"
    assert own.json()["intakeSlots"][0] == "front"
    assert foreign.status_code == 404
    assert missing.status_code == 400
