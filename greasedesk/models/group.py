from sqlalchemy import Boolean, Column, DateTime, String, Text

from greasedesk.core.database import Base, new_id, utcnow


class Group(Base):
    """Tenant: the billing and ownership boundary for a garage business."""

    __tablename__ = "groups"

    id = Column(String(32), primary_key=True, default=new_id)
    group_name = Column(String(200), nullable=False)
    billing_email = Column(String(320), unique=True, index=True, nullable=False)
    trading_name = Column(String(200), nullable=True)
    vat_number = Column(String(50), nullable=True)
    company_number = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    is_franchise_grp = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
