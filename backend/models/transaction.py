import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Date, DateTime, CheckConstraint
from database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # income/expense
    amount = Column(Float, nullable=False)
    category_id = Column(String(36), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )


class ScheduledTransaction(Base):
    __tablename__ = "scheduled_transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    category_id = Column(String(36), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled/completed/cancelled
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_scheduled_transactions_amount_positive"),
    )
