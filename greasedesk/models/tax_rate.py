from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint

from greasedesk.core.database import Base, new_id, utcnow

UK_VAT_NAME = "UK VAT"


class TaxRate(Base):
    __tablename__ = "tax_rates"
    __table_args__ = (UniqueConstraint("group_id", "name", name="uq_tax_rates_group_name"),)

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)
    valid_from = Column(DateTime, nullable=False, default=utcnow)
