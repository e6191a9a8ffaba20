from sqlalchemy import JSON, Column, DateTime, ForeignKey, String

from greasedesk.core.database import Base, new_id, utcnow

DEFAULT_INTAKE_SLOTS = ["front", "left", "rear", "right", "engine_bay", "vin", "mileage"]


class JobCard(Base):
    __tablename__ = "job_cards"

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=False, index=True)
    booking_id = Column(String(32), ForeignKey("bookings.id"), nullable=True)

    reg = Column(String(20), nullable=False)
    vehicle = Column(String(200), nullable=True)
    technician = Column(String(200), nullable=True)
    tasks = Column(JSON, nullable=False, default=list)
    intake_slots = Column(JSON, nullable=False, default=lambda: list(DEFAULT_INTAKE_SLOTS))
    created_at = Column(DateTime, nullable=False, default=utcnow)
