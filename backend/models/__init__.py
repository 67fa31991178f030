# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.profile import Profile
from models.category import Category
from models.transaction import Transaction, ScheduledTransaction
from models.goal import Goal, PersonalGoal
from models.budget import Budget
from models.couple_relationship import CoupleRelationship

__all__ = [
    "User",
    "Profile",
    "Category",
    "Transaction",
    "ScheduledTransaction",
    "Goal",
    "PersonalGoal",
    "Budget",
    "CoupleRelationship",
]
