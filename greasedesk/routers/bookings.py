from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from greasedesk.core.database import get_db
from greasedesk.deps import require_site_context
from greasedesk.services.bookings import get_job_card, list_today_bookings, parse_day
from greasedesk.services.tenant_context import TenantContext

router = APIRouter(prefix="/api", tags=["bookings"])


@router.get("/bookings")
def bookings(
    date: str | None = Query(default=None),
    context: TenantContext = Depends(require_site_context),
    db: Session = Depends(get_db),
):
    return list_today_bookings(db, context, parse_day(date))


@router.get("/jobcard")
def jobcard(
    id: str | None = Query(default=None),
    context: TenantContext = Depends(require_site_context),
    db: Session = Depends(get_db),
):
    return get_job_card(db, context, id)
