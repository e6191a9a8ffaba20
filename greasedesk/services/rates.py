from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from greasedesk.core.database import utcnow
from greasedesk.core.errors import ValidationError
from greasedesk.models.service_catalogue import LABOUR_SERVICE_CODE, ServiceCatalogue
from greasedesk.models.site import PRICING_DISPLAY_MODES, Site
from greasedesk.models.tax_rate import UK_VAT_NAME, TaxRate
from greasedesk.services.authorization_service import AuthorizationService
from greasedesk.services.tenant_context import TenantContext
from greasedesk.services.upserts import upsert

logger = logging.getLogger(__name__)

LABOUR_SERVICE_NAME = "Labour (per hour)"
LABOUR_SERVICE_MINUTES = 60
TWO_PLACES = Decimal("0.01")
MAX_LABOUR_RATE = Decimal("99999999.99")


def _to_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number.")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number.")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number.")
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number.")
    return number


def _currency_code(value: Any, field: str) -> str:
    code = str(value or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(f"{field} must be a 3-letter ISO currency code.")
    return code


def _string_list(value: Any, field: str) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field} must be a list.")
    items = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(f"{field} entries must be non-empty strings.")
        items.append(item.strip())
    return items


@dataclass
class RatesInput:
    default_vat_rate: Any
    default_labour_rate: Any
    timezone: Any = None
    currency_code: Any = None
    pricing_display_mode: Any = None
    supported_countries: Any = None
    supported_currencies: Any = None


@dataclass(frozen=True)
class ValidatedRates:
    vat_rate: Decimal
    labour_rate: Decimal
    timezone: str | None
    currency_code: str | None
    pricing_display_mode: str | None
    supported_countries: list[str] | None
    supported_currencies: list[str] | None


def validate_rates(data: RatesInput) -> ValidatedRates:
    vat = _to_decimal(data.default_vat_rate, "defaultVatRate")
    if vat < 0 or vat > 100:
        raise ValidationError("defaultVatRate must be between 0 and 100.")

    labour = _to_decimal(data.default_labour_rate, "defaultLabourRate")
    if labour < 0:
        raise ValidationError("defaultLabourRate must be zero or greater.")
    if labour > MAX_LABOUR_RATE:
        raise ValidationError(f"defaultLabourRate must not exceed {MAX_LABOUR_RATE}.")

    # Omitted regional fields leave the site unchanged.
    timezone = None
    if data.timezone is not None:
        timezone = str(data.timezone).strip()
        if not timezone:
            raise ValidationError("timezone must not be empty.")
        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {timezone}.")

    currency = None
    if data.currency_code is not None:
        currency = _currency_code(data.currency_code, "currencyCode")

    mode = None
    if data.pricing_display_mode is not None:
        mode = str(data.pricing_display_mode).strip().lower()
        if mode not in PRICING_DISPLAY_MODES:
            raise ValidationError("pricingDisplayMode must be 'ex_vat' or 'inc_vat'.")

    countries = None
    if data.supported_countries is not None:
        countries = _string_list(data.supported_countries, "supportedCountries")

    currencies = None
    if data.supported_currencies is not None:
        currencies = [
            _currency_code(item, "supportedCurrencies")
            for item in _string_list(data.supported_currencies, "supportedCurrencies")
        ]

    return ValidatedRates(
        vat_rate=vat.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        labour_rate=labour.quantize(TWO_PLACES, rounding=ROUND_HALF_UP),
        timezone=timezone,
        currency_code=currency,
        pricing_display_mode=mode,
        supported_countries=countries,
        supported_currencies=currencies,
    )


def apply_rates(
    db: Session,
    context: TenantContext,
    data: RatesInput,
    *,
    target_site_id: str | None = None,
    endpoint: str | None = None,
) -> Site:
    rates = validate_rates(data)
    own_site_id = context.require_site()
    site_id = (target_site_id or "").strip() or own_site_id

    try:
        site = AuthorizationService.ensure_site_ownership(
            db,
            context=context,
            site_id=site_id,
            lock=True,
            endpoint=endpoint,
        )

        if rates.timezone is not None:
            site.timezone = rates.timezone
        if rates.currency_code is not None:
            site.currency_code = rates.currency_code
        if rates.pricing_display_mode is not None:
            site.pricing_display_mode = rates.pricing_display_mode
        if rates.supported_countries is not None:
            site.supported_countries = rates.supported_countries
        if rates.supported_currencies is not None:
            site.supported_currencies = rates.supported_currencies
        db.flush()

        upsert(
            db,
            TaxRate,
            keys={"group_id": context.group_id, "name": UK_VAT_NAME},
            values={"percentage": rates.vat_rate},
            create_values={"valid_from": utcnow()},
        )
        upsert(
            db,
            ServiceCatalogue,
            keys={
                "group_id": context.group_id,
                "site_id": site.id,
                "service_code": LABOUR_SERVICE_CODE,
            },
            values={
                "name": LABOUR_SERVICE_NAME,
                "default_duration_minutes": LABOUR_SERVICE_MINUTES,
                "default_labour_rate": rates.labour_rate,
                "default_price": rates.labour_rate,
                "vat_rate": rates.vat_rate,
                "is_active": True,
            },
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "rates updated group_id=%s site_id=%s vat=%s labour=%s",
        context.group_id,
        site_id,
        rates.vat_rate,
        rates.labour_rate,
    )
    return site


def get_settings(db: Session, context: TenantContext) -> dict[str, Any]:
    site_id = context.require_site()
    site = AuthorizationService.ensure_site_ownership(db, context=context, site_id=site_id)

    tax_rate = (
        db.query(TaxRate)
        .filter(TaxRate.group_id == context.group_id, TaxRate.name == UK_VAT_NAME)
        .first()
    )
    labour = (
        db.query(ServiceCatalogue)
        .filter(
            ServiceCatalogue.group_id == context.group_id,
            ServiceCatalogue.site_id == site.id,
            ServiceCatalogue.service_code == LABOUR_SERVICE_CODE,
        )
        .first()
    )

    return {
        "siteId": site.id,
        "siteName": site.site_name,
        "timezone": site.timezone,
        "currencyCode": site.currency_code,
        "locale": site.locale,
        "pricingDisplayMode": site.pricing_display_mode,
        "supportedCountries": list(site.supported_countries or []),
        "supportedCurrencies": list(site.supported_currencies or []),
        "defaultVatRate": float(tax_rate.percentage) if tax_rate is not None else None,
        "defaultLabourRate": float(labour.default_labour_rate) if labour is not None else None,
    }
