from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from greasedesk.core.database import get_db
from greasedesk.deps import get_tenant_context
from greasedesk.routers.onboarding import RatesPayload
from greasedesk.services.rates import apply_rates, get_settings
from greasedesk.services.tenant_context import TenantContext

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsUpdatePayload(RatesPayload):
    site_id: str | None = Field(default=None, alias="siteId", max_length=64)


@router.get("")
def read_settings(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    return get_settings(db, context)


@router.post("/update")
def update_settings(
    payload: SettingsUpdatePayload,
    request: Request,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    apply_rates(
        db,
        context,
        payload.to_input(),
        target_site_id=payload.site_id,
        endpoint=f"{request.method} {request.url.path}",
    )
    return {"message": "Settings saved successfully!"}
