"""Generate database session"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import get_database_url, get_sql_echo
from src.db.schema import Base


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine built on first use, from the environment (so importing this module never touches a database)."""
    engine = create_engine(get_database_url(), echo=get_sql_echo())
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
