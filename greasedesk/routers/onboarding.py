from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from greasedesk.core.database import get_db
from greasedesk.deps import get_email_service, get_tenant_context, require_admin_role
from greasedesk.email.service import EmailService
from greasedesk.services.invitations import InviteRequest, invite_team
from greasedesk.services.onboarding import TRIAL_STARTED, SetupInput, setup_group_and_site, start_trial
from greasedesk.services.rates import RatesInput, apply_rates
from greasedesk.services.tenant_context import TenantContext

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


class SetupPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_name: str = Field(..., alias="groupName", max_length=200)
    site_name: str = Field(..., alias="siteName", max_length=200)
    address_line1: str | None = Field(default=None, alias="addressLine1", max_length=300)
    city: str | None = Field(default=None, max_length=120)
    postcode: str | None = Field(default=None, max_length=20)
    company_number: str | None = Field(default=None, alias="companyNumber", max_length=50)
    vat_number: str | None = Field(default=None, alias="vatNumber", max_length=50)
    trading_name: str | None = Field(default=None, alias="tradingName", max_length=200)


class RatesPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    default_vat_rate: Any = Field(..., alias="defaultVatRate")
    default_labour_rate: Any = Field(..., alias="defaultLabourRate")
    timezone: Any = None
    currency_code: Any = Field(default=None, alias="currencyCode")
    pricing_display_mode: Any = Field(default=None, alias="pricingDisplayMode")
    supported_countries: Any = Field(default=None, alias="supportedCountries")
    supported_currencies: Any = Field(default=None, alias="supportedCurrencies")

    def to_input(self) -> RatesInput:
        return RatesInput(
            default_vat_rate=self.default_vat_rate,
            default_labour_rate=self.default_labour_rate,
            timezone=self.timezone,
            currency_code=self.currency_code,
            pricing_display_mode=self.pricing_display_mode,
            supported_countries=self.supported_countries,
            supported_currencies=self.supported_currencies,
        )


class InviteItem(BaseModel):
    email: EmailStr
    role: str


class InvitePayload(BaseModel):
    invites: list[InviteItem] = Field(default_factory=list)


@router.post("/start-trial")
def start_trial_endpoint(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    outcome = start_trial(db, context)
    if outcome == TRIAL_STARTED:
        return JSONResponse(status_code=201, content={"message": "Trial started successfully.", "status": outcome})
    return JSONResponse(status_code=200, content={"message": "Billing record already exists.", "status": outcome})


@router.post("/setup", status_code=201)
def setup(
    payload: SetupPayload,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    result = setup_group_and_site(
        db,
        context,
        SetupInput(
            group_name=payload.group_name,
            site_name=payload.site_name,
            address_line1=payload.address_line1,
            city=payload.city,
            postcode=payload.postcode,
            company_number=payload.company_number,
            vat_number=payload.vat_number,
            trading_name=payload.trading_name,
        ),
    )
    return {
        "message": "Group and site saved.",
        "groupId": result.group_id,
        "siteId": result.site_id,
        "redirectUrl": result.redirect_url,
    }


@router.post("/update-rates")
def update_rates(
    payload: RatesPayload,
    request: Request,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    apply_rates(db, context, payload.to_input(), endpoint=f"{request.method} {request.url.path}")
    return {"message": "Rates and settings saved."}


@router.post("/invite-team")
def invite_team_endpoint(
    payload: InvitePayload,
    request: Request,
    context: TenantContext = Depends(require_admin_role),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    result = invite_team(
        db,
        context,
        [InviteRequest(email=item.email, role=item.role) for item in payload.invites],
        email_service,
        endpoint=f"{request.method} {request.url.path}",
    )
    body: dict[str, Any] = {
        "message": f"{result.count} team member(s) invited.",
        "count": result.count,
    }
    if result.failed_emails:
        body["warnings"] = [
            f"Invitation email could not be sent to {email}." for email in result.failed_emails
        ]
    return body
