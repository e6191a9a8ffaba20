from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint

from greasedesk.core.database import Base, new_id

LABOUR_SERVICE_CODE = "LABOUR_HR"


class ServiceCatalogue(Base):
    __tablename__ = "service_catalogue"
    __table_args__ = (
        UniqueConstraint("group_id", "site_id", "service_code", name="uq_service_catalogue_group_site_code"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=False, index=True)

    service_code = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    default_duration_minutes = Column(Integer, nullable=False, default=60)
    default_labour_rate = Column(Numeric(10, 2), nullable=False)
    default_price = Column(Numeric(10, 2), nullable=False)
    vat_rate = Column(Numeric(5, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
