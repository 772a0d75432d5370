# carwash/db.py

import logging

from sqlmodel import SQLModel, create_engine, Session, select

from carwash.config import settings

logger = logging.getLogger(__name__)

# Engine = connection to the database
engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args={"check_same_thread": False} if settings.is_sqlite else {},  # required for SQLite + FastAPI
)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session


def init_db(bind=None):
    """Create tables and seed the catalogue, opening hours and admin account when empty."""
    from carwash import models  # noqa: F401  registers the tables
    from carwash.data import seed_defaults

    bind = bind or engine
    SQLModel.metadata.create_all(bind)

    if not settings.seed_catalogue:
        return

    with Session(bind) as session:
        if session.exec(select(models.Service)).first() is None:
            seed_defaults(session)
            logger.info("Seeded default services, business hours and admin account")
