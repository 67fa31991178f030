import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, CheckConstraint
from database import Base


def pair_key_for(user_a: str, user_b: str) -> str:
    """Direction-independent key for a pair of users."""
    return ":".join(sorted([str(user_a), str(user_b)]))


def _default_pair_key(context):
    params = context.get_current_parameters()
    return pair_key_for(params["user1_id"], params["user2_id"])


class CoupleRelationship(Base):
    __tablename__ = "couple_relationships"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user1_id = Column(String(36), nullable=False, index=True)  # requester
    user2_id = Column(String(36), nullable=False, index=True)  # recipient
    status = Column(String(20), nullable=False, default="pending")  # pending/accepted/rejected
    # One row per unordered pair, whichever side asked first
    pair_key = Column(String(73), nullable=False, unique=True, default=_default_pair_key)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("user1_id <> user2_id", name="ck_couple_not_self"),
    )
