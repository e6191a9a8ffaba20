from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from greasedesk.core.database import Base, new_id, utcnow


class Invite(Base):
    """Record of an outstanding invitation. The users row decides access."""

    __tablename__ = "invites"
    __table_args__ = (UniqueConstraint("group_id", "email", name="uq_invites_group_email"),)

    id = Column(String(32), primary_key=True, default=new_id)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    email = Column(String(320), nullable=False)
    invite_link = Column(String(1024), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False, default=utcnow)
