from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from greasedesk.core.config import DEFAULT_TIMEZONE
from greasedesk.core.errors import NotFound, ValidationError
from greasedesk.models.booking import Booking
from greasedesk.models.job_card import JobCard
from greasedesk.models.site import Site
from greasedesk.services.tenant_context import TenantContext

logger = logging.getLogger(__name__)


def _site_zone(site: Site | None) -> ZoneInfo:
    name = (site.timezone if site is not None else None) or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("unknown site timezone=%s, using %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError("date must be in YYYY-MM-DD format.")


def local_day_window(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Naive UTC bounds ``[start, end)`` of ``day`` in ``zone``."""
    start_local = datetime.combine(day, time.min, tzinfo=zone)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def serialize_booking(booking: Booking, zone: ZoneInfo) -> dict[str, Any]:
    local_start = booking.starts_at.replace(tzinfo=timezone.utc).astimezone(zone)
    return {
        "id": booking.id,
        "time": local_start.strftime("%H:%M"),
        "startsAt": local_start.isoformat(),
        "reg": booking.reg,
        "vehicle": booking.vehicle,
        "service": booking.service,
        "status": booking.status,
    }


def list_today_bookings(db: Session, context: TenantContext, day: date | None = None) -> list[dict[str, Any]]:
    site_id = context.require_site()
    site = db.query(Site).filter(Site.id == site_id, Site.group_id == context.group_id).first()
    zone = _site_zone(site)

    if day is None:
        day = datetime.now(zone).date()
    start, end = local_day_window(day, zone)

    rows = (
        db.query(Booking)
        .filter(
            Booking.group_id == context.group_id,
            Booking.site_id == site_id,
            Booking.starts_at >= start,
            Booking.starts_at < end,
        )
        .order_by(Booking.starts_at.asc())
        .all()
    )
    return [serialize_booking(row, zone) for row in rows]


def get_job_card(db: Session, context: TenantContext, job_card_id: str | None) -> dict[str, Any]:
    if not job_card_id or not job_card_id.strip():
        raise ValidationError("Missing job card id.")
    site_id = context.require_site()

    card = (
        db.query(JobCard)
        .filter(
            JobCard.id == job_card_id.strip(),
            JobCard.group_id == context.group_id,
            JobCard.site_id == site_id,
        )
        .first()
    )
    if card is None:
        raise NotFound("Job card not found.")

    return {
        "id": card.id,
        "bookingId": card.booking_id,
        "reg": card.reg,
        "vehicle": card.vehicle,
        "technician": card.technician,
        "tasks": list(card.tasks or []),
        "intakeSlots": list(card.intake_slots or []),
    }
