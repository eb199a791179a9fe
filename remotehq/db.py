from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings


def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, future=True, connect_args=connect_args)


engine = make_engine(settings.DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def init_db(bind=None):
    """Create tables on ``bind`` (the default engine when omitted).

    Schema migrations are out of scope; ``create_all`` only adds missing tables.
    """
    from . import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind or engine)
