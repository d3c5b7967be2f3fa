import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session, select

from .settings import settings

logger = logging.getLogger(__name__)


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # a single shared connection keeps in-memory databases alive across sessions
        return create_engine(url, echo=settings.DB_ECHO,
                             connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, echo=settings.DB_ECHO, pool_size=settings.DB_POOL_SIZE, pool_pre_ping=True)


engine = _make_engine(settings.database_url)


def init_db():
    # models must be imported so their tables are registered on the metadata
    from practice_tracker import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    seed_default_admin()


def seed_default_admin():
    if not (settings.DEFAULT_ADMIN_USERNAME and settings.DEFAULT_ADMIN_PASSWORD):
        return
    from practice_tracker.auth.auth_handler import get_password_hash
    from practice_tracker.models import User, UserRole

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.username == settings.DEFAULT_ADMIN_USERNAME)).first()
        if existing:
            return
        session.add(User(username=settings.DEFAULT_ADMIN_USERNAME,
                         password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                         role=UserRole.admin, full_name="Admin User"))
        session.commit()
        logger.info("Seeded default admin user %s", settings.DEFAULT_ADMIN_USERNAME)


def close_db():
    engine.dispose()
    logger.info("Database connection pool closed")


def get_db():
    with Session(engine) as session:
        yield session
