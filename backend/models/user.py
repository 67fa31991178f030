import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from database import Base


class User(Base):
    """Local identity accounts, only used when AUTH_BACKEND=local."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
