from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)  # same id as the auth user
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1000), nullable=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
