# barbershop/db.py

import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session, select

from barbershop.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}  # required for SQLite + FastAPI
    # in-memory databases live on a single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,          # set to True to see SQL
    **_engine_kwargs(settings.DATABASE_URL),
)


def init_db():
    # table classes register themselves on import
    from barbershop import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready")


def seed_specialties(session: Session) -> int:
    from barbershop.data import DEFAULT_SPECIALTIES
    from barbershop.models import Specialty

    if session.exec(select(Specialty)).first() is not None:
        return 0

    for item in DEFAULT_SPECIALTIES:
        session.add(Specialty(**item))
    session.commit()
    logger.info("Seeded %d default specialties", len(DEFAULT_SPECIALTIES))
    return len(DEFAULT_SPECIALTIES)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
