from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from greasedesk.core.database import Base, utcnow

BILLING_STATUSES = ("grace", "ok", "past_due", "cancelled")


class GroupBilling(Base):
    __tablename__ = "group_billing"

    # 1:1 with the group; the primary key doubles as the idempotency key.
    group_id = Column(String(32), ForeignKey("groups.id"), primary_key=True)
    plan_name = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="grace")
    retention_months = Column(Integer, nullable=False)
    included_sites = Column(Integer, nullable=False, default=1)
    active_sites_cnt = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow)
