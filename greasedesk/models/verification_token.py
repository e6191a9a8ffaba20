from sqlalchemy import Column, DateTime, String

from greasedesk.core.database import Base


class VerificationToken(Base):
    __tablename__ = "verification_tokens"

    token = Column(String(128), primary_key=True)
    identifier = Column(String(320), nullable=False, index=True)
    expires = Column(DateTime, nullable=False)
