import datetime
import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from goalsync.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime.datetime:
    # Naive UTC, matching what SQLite hands back for DateTime columns
    return datetime.datetime.utcnow()


def init_db():
    # Importing the models registers every table on Base.metadata
    import goalsync.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
