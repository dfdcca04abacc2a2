"""Generate database session"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessduel.core.config import get_settings
from chessduel.db.schema import Base


@lru_cache
def get_engine(database_url: str | None = None) -> Engine:
    engine = create_engine(database_url or get_settings().database_url)
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


@contextmanager
def get_db(database_url: str | None = None) -> Iterator[Session]:
    db = sessionmaker(bind=get_engine(database_url))()
    try:
        yield db
    finally:
        db.close()
