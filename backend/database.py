import os
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(url: str = DATABASE_URL):
    """Build an engine with the pool settings appropriate for the URL."""
    engine_args = {}
    if url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url == "sqlite://":
            # A single shared connection, otherwise every session sees an empty database
            engine_args["poolclass"] = StaticPool
    else:
        # Production settings for PostgreSQL
        engine_args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
        })
    return create_engine(url, **engine_args, echo=False)


try:
    engine = make_engine(DATABASE_URL)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create engine: {e}")
    raise e


def import_models():
    """Import all models so they register with Base.metadata."""
    from models.user import User
    from models.profile import Profile
    from models.category import Category
    from models.transaction import Transaction, ScheduledTransaction
    from models.goal import Goal, PersonalGoal
    from models.budget import Budget
    from models.couple_relationship import CoupleRelationship

    return [User, Profile, Category, Transaction, ScheduledTransaction,
            Goal, PersonalGoal, Budget, CoupleRelationship]


def init_db(bind=None):
    """Create the data/ directory if it doesn't exist, then create all tables."""
    bind = bind or engine
    if str(bind.url).startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    import_models()
    Base.metadata.create_all(bind=bind)
    logger.info("Database initialized successfully.")
