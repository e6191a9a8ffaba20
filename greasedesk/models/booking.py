from sqlalchemy import Column, DateTime, ForeignKey, String

from greasedesk.core.database import Base, new_id, utcnow

BOOKING_STATUSES = ("booked", "in_progress", "completed", "cancelled")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=False, index=True)

    # UTC, naive
    starts_at = Column(DateTime, nullable=False, index=True)
    reg = Column(String(20), nullable=False)
    vehicle = Column(String(200), nullable=True)
    service = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default="booked")
    created_at = Column(DateTime, nullable=False, default=utcnow)
