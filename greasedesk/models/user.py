from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from greasedesk.core.database import Base, new_id, utcnow

ROLE_OWNER = "OWNER"
ROLE_ADMIN = "ADMIN"
ROLE_STAFF = "STAFF"
ROLE_MECHANIC = "MECHANIC"
USER_ROLES = (ROLE_OWNER, ROLE_ADMIN, ROLE_STAFF, ROLE_MECHANIC)
ADMIN_ROLES = frozenset({ROLE_OWNER, ROLE_ADMIN})

# Stored in password_hash for invited users who have not set a password yet.
INVITE_PENDING_HASH = "INVITE_PENDING"


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=True)
    password_hash = Column(String(255), nullable=True)

    role = Column(String(20), nullable=False, default=ROLE_STAFF)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=True, index=True)
    site_id = Column(String(32), ForeignKey("sites.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    email_verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    @property
    def is_invite_pending(self) -> bool:
        return self.password_hash in (None, INVITE_PENDING_HASH)
