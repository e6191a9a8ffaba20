from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text

from greasedesk.core.config import DEFAULT_COUNTRY, DEFAULT_CURRENCY, DEFAULT_LOCALE, DEFAULT_TIMEZONE
from greasedesk.core.database import Base, new_id, utcnow

PRICING_DISPLAY_MODES = ("ex_vat", "inc_vat")


class Site(Base):
    __tablename__ = "sites"

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)

    site_name = Column(String(200), nullable=False)
    timezone = Column(String(64), nullable=False, default=DEFAULT_TIMEZONE)
    currency_code = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    locale = Column(String(16), nullable=False, default=DEFAULT_LOCALE)
    pricing_display_mode = Column(String(16), nullable=False, default="ex_vat")
    supported_countries = Column(JSON, nullable=False, default=lambda: [DEFAULT_COUNTRY])
    supported_currencies = Column(JSON, nullable=False, default=lambda: [DEFAULT_CURRENCY])
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
