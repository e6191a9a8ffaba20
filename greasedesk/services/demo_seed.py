from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from greasedesk.core.config import (
    DEFAULT_COUNTRY,
    DEFAULT_CURRENCY,
    DEFAULT_LOCALE,
    DEFAULT_TIMEZONE,
    TRIAL_INCLUDED_SITES,
    TRIAL_PLAN_NAME,
    TRIAL_RETENTION_MONTHS,
    TRIAL_STATUS,
)
from greasedesk.core.database import utcnow
from greasedesk.models.booking import Booking
from greasedesk.models.group import Group
from greasedesk.models.group_billing import GroupBilling
from greasedesk.models.job_card import DEFAULT_INTAKE_SLOTS, JobCard
from greasedesk.models.site import Site
from greasedesk.models.user import ROLE_OWNER, User
from greasedesk.services.bookings import local_day_window
from greasedesk.services.email_address import normalize_email
from greasedesk.services.passwords import hash_password
from greasedesk.services.rates import RatesInput, apply_rates
from greasedesk.services.tenant_context import TenantContext
from greasedesk.services.upserts import upsert

logger = logging.getLogger(__name__)

DEMO_VAT_RATE = "20.00"
DEMO_LABOUR_RATE = "75.00"

DEMO_BOOKINGS = (
    ("08:30", "BJ16 XYZ", "BMW 520d", "Oil Service + Health Check", "booked"),
    ("10:00", "MF70 ABC", "MINI F56 Cooper S", "Timing chain noise investigation", "in_progress"),
    ("13:30", "YK22 TMS", "BMW X5 M50d", "Brake fluid flush", "completed"),
)

DEMO_TASKS = [
    {
        "id": "t1",
        "title": "Oil service - BMW 520d",
        "notes": "Drain oil, replace filter, refill LL-04, reset service computer.",
        "done": False,
    },
    {
        "id": "t2",
        "title": "Brake fluid flush",
        "notes": "Pressure bleed all four corners, torque check calipers.",
        "done": False,
    },
]


@dataclass
class SeedSummary:
    group_id: str
    site_id: str
    user_id: str
    bookings_created: int


def _seed_bookings(db: Session, *, group_id: str, site: Site, day: date, technician: str) -> int:
    zone = ZoneInfo(site.timezone or DEFAULT_TIMEZONE)
    start, end = local_day_window(day, zone)
    existing = (
        db.query(Booking.id)
        .filter(Booking.site_id == site.id, Booking.starts_at >= start, Booking.starts_at < end)
        .first()
    )
    if existing is not None:
        return 0

    created = 0
    for slot, reg, vehicle, service, status in DEMO_BOOKINGS:
        local_start = datetime.combine(day, time.fromisoformat(slot), tzinfo=zone)
        booking = Booking(
            group_id=group_id,
            site_id=site.id,
            starts_at=local_start.astimezone(ZoneInfo("UTC")).replace(tzinfo=None),
            reg=reg,
            vehicle=vehicle,
            service=service,
            status=status,
        )
        db.add(booking)
        db.flush()
        if created == 0:
            db.add(
                JobCard(
                    group_id=group_id,
                    site_id=site.id,
                    booking_id=booking.id,
                    reg=reg,
                    vehicle=vehicle,
                    technician=technician,
                    tasks=list(DEMO_TASKS),
                    intake_slots=list(DEFAULT_INTAKE_SLOTS),
                )
            )
        created += 1
    return created


def seed_demo(
    db: Session,
    *,
    email: str,
    name: str,
    password: str,
    garage_name: str,
    site_name: str,
    day: date | None = None,
) -> SeedSummary:
    """Create or refresh a fully onboarded demo garage. Safe to run repeatedly."""
    normalized = normalize_email(email)

    try:
        group, _ = upsert(
            db,
            Group,
            keys={"billing_email": normalized},
            values={"group_name": garage_name},
        )
        upsert(
            db,
            GroupBilling,
            keys={"group_id": group.id},
            values={},
            create_values={
                "plan_name": TRIAL_PLAN_NAME,
                "status": TRIAL_STATUS,
                "retention_months": TRIAL_RETENTION_MONTHS,
                "included_sites": TRIAL_INCLUDED_SITES,
                "active_sites_cnt": 1,
            },
        )

        site = (
            db.query(Site)
            .filter(Site.group_id == group.id)
            .order_by(Site.created_at.asc(), Site.id.asc())
            .first()
        )
        if site is None:
            site = Site(
                group_id=group.id,
                site_name=site_name,
                timezone=DEFAULT_TIMEZONE,
                currency_code=DEFAULT_CURRENCY,
                locale=DEFAULT_LOCALE,
                pricing_display_mode="ex_vat",
                supported_countries=[DEFAULT_COUNTRY],
                supported_currencies=[DEFAULT_CURRENCY],
            )
            db.add(site)
            db.flush()

        user, _ = upsert(
            db,
            User,
            keys={"email": normalized},
            values={
                "name": name,
                "password_hash": hash_password(password),
                "role": ROLE_OWNER,
                "group_id": group.id,
                "site_id": site.id,
                "is_active": True,
            },
            create_values={"email_verified_at": utcnow()},
        )
        if user.email_verified_at is None:
            user.email_verified_at = utcnow()

        bookings_created = _seed_bookings(
            db,
            group_id=group.id,
            site=site,
            day=day or datetime.now(ZoneInfo(site.timezone or DEFAULT_TIMEZONE)).date(),
            technician=name,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    context = TenantContext(
        user_id=user.id,
        group_id=group.id,
        site_id=site.id,
        role=ROLE_OWNER,
        email=normalized,
    )
    apply_rates(
        db,
        context,
        RatesInput(
            default_vat_rate=DEMO_VAT_RATE,
            default_labour_rate=DEMO_LABOUR_RATE,
            timezone=site.timezone,
            currency_code=site.currency_code,
        ),
    )

    summary = SeedSummary(
        group_id=group.id,
        site_id=site.id,
        user_id=user.id,
        bookings_created=bookings_created,
    )
    logger.info(
        "demo garage seeded group_id=%s site_id=%s bookings_created=%s",
        summary.group_id,
        summary.site_id,
        summary.bookings_created,
    )
    return summary
