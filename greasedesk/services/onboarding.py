from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
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
from greasedesk.core.errors import TenantContextMissing, ValidationError
from greasedesk.models.group import Group
from greasedesk.models.group_billing import GroupBilling
from greasedesk.models.site import Site
from greasedesk.models.tax_rate import UK_VAT_NAME, TaxRate
from greasedesk.models.user import User
from greasedesk.services.tenant_context import TenantContext

logger = logging.getLogger(__name__)

TRIAL_STARTED = "trial_started"
TRIAL_ALREADY_ACTIVE = "already_active"
RATES_SETTINGS_PATH = "/onboarding/rates-settings"


@dataclass
class SetupInput:
    group_name: str
    site_name: str
    address_line1: str | None = None
    city: str | None = None
    postcode: str | None = None
    company_number: str | None = None
    vat_number: str | None = None
    trading_name: str | None = None

    def validated(self) -> "SetupInput":
        required = {
            "groupName": self.group_name,
            "siteName": self.site_name,
        }
        missing = [field for field, value in required.items() if not (value or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}.")
        return SetupInput(
            group_name=self.group_name.strip(),
            site_name=self.site_name.strip(),
            address_line1=_optional(self.address_line1),
            city=_optional(self.city),
            postcode=_optional((self.postcode or "").upper()),
            company_number=_optional(self.company_number),
            vat_number=_optional(self.vat_number),
            trading_name=_optional(self.trading_name),
        )

    @property
    def address(self) -> str | None:
        parts = [part for part in (self.address_line1, self.city, self.postcode) if part]
        return ", ".join(parts) or None


@dataclass
class SetupResult:
    group_id: str
    site_id: str
    created_site: bool
    redirect_url: str = RATES_SETTINGS_PATH


def _optional(value: str | None) -> str | None:
    cleaned = (value or "").strip()
    return cleaned or None


def start_trial(db: Session, context: TenantContext) -> str:
    """Create the trial billing row once per group.

    Returns ``trial_started`` when the row was created and ``already_active``
    when the group already had one, including when a concurrent request won.
    """
    if db.get(GroupBilling, context.group_id) is not None:
        return TRIAL_ALREADY_ACTIVE

    billing = GroupBilling(
        group_id=context.group_id,
        plan_name=TRIAL_PLAN_NAME,
        status=TRIAL_STATUS,
        retention_months=TRIAL_RETENTION_MONTHS,
        included_sites=TRIAL_INCLUDED_SITES,
        active_sites_cnt=1,
    )
    try:
        db.add(billing)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("trial start raced group_id=%s", context.group_id)
        return TRIAL_ALREADY_ACTIVE
    except Exception:
        db.rollback()
        raise

    logger.info("trial started group_id=%s plan=%s", context.group_id, TRIAL_PLAN_NAME)
    return TRIAL_STARTED


def _resolve_site(db: Session, *, group_id: str, user: User) -> Site | None:
    if user.site_id:
        current = db.query(Site).filter(Site.id == user.site_id, Site.group_id == group_id).first()
        if current is not None:
            return current
    return (
        db.query(Site)
        .filter(Site.group_id == group_id)
        .order_by(Site.created_at.asc(), Site.id.asc())
        .first()
    )


def setup_group_and_site(db: Session, context: TenantContext, data: SetupInput) -> SetupResult:
    data = data.validated()

    try:
        # Concurrent setups for the same group queue up on this lock.
        group = db.query(Group).filter(Group.id == context.group_id).with_for_update().first()
        if group is None:
            raise TenantContextMissing()

        user = db.query(User).filter(User.id == context.user_id).first()
        if user is None or user.group_id != group.id:
            raise TenantContextMissing()

        group.group_name = data.group_name
        if data.address is not None:
            group.address = data.address
        if data.trading_name is not None:
            group.trading_name = data.trading_name
        if data.company_number is not None:
            group.company_number = data.company_number
        if data.vat_number is not None:
            group.vat_number = data.vat_number

        site = _resolve_site(db, group_id=group.id, user=user)
        created_site = site is None
        if site is None:
            site = Site(
                group_id=group.id,
                site_name=data.site_name,
                address=data.address,
                timezone=DEFAULT_TIMEZONE,
                currency_code=DEFAULT_CURRENCY,
                locale=DEFAULT_LOCALE,
                pricing_display_mode="ex_vat",
                supported_countries=[DEFAULT_COUNTRY],
                supported_currencies=[DEFAULT_CURRENCY],
            )
            db.add(site)
            db.flush()
        else:
            site.site_name = data.site_name
            if data.address is not None:
                site.address = data.address

        user.site_id = site.id
        db.commit()
    except Exception:
        db.rollback()
        raise

    result = SetupResult(group_id=group.id, site_id=site.id, created_site=created_site)
    logger.info(
        "group and site configured group_id=%s site_id=%s created_site=%s",
        result.group_id,
        result.site_id,
        created_site,
    )
    return result


def next_onboarding_path(db: Session, user: User) -> str:
    """Where a signed-in user should land, given how far onboarding got."""
    if not user.group_id:
        return "/onboarding/setup"
    if db.get(GroupBilling, user.group_id) is None:
        return "/onboarding/billing"
    if not user.site_id:
        return "/onboarding/setup"
    has_rates = (
        db.query(TaxRate.id)
        .filter(TaxRate.group_id == user.group_id, TaxRate.name == UK_VAT_NAME)
        .first()
    )
    if has_rates is None:
        return RATES_SETTINGS_PATH
    return "/dashboard"
