import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Date, DateTime, UniqueConstraint
from database import Base


class Goal(Base):
    """Monthly spending target for a category."""
    __tablename__ = "goals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    category_id = Column(String(36), nullable=False)
    amount = Column(Float, nullable=False)
    month = Column(Date, nullable=False)  # first day of the month
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "month", name="uq_goal_user_category_month"),
    )


class PersonalGoal(Base):
    """Savings target, independent of category and month."""
    __tablename__ = "personal_goals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))
