from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from taskboard.app.config import get_settings

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    # SQLite requires check_same_thread=False for usage across threads
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    from taskboard.app import models  # noqa: F401  registers tables on Base

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

