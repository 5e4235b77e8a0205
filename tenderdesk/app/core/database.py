"""Database configuration and session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings


def _connect_args(url: str) -> dict:
    # FastAPI runs sync endpoints in a threadpool; SQLite connections must be shareable.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    connect_args=_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, class_=Session)
Base = declarative_base()


def import_models() -> None:
    """Import every model module so their tables register on ``Base.metadata``."""

    from tenderdesk.app.auth import models as auth_models  # noqa: F401
    from tenderdesk.app.modules.activity import models as activity_models  # noqa: F401
    from tenderdesk.app.modules.clients import models as client_models  # noqa: F401
    from tenderdesk.app.modules.dashboard import models as dashboard_models  # noqa: F401
    from tenderdesk.app.modules.documents import models as document_models  # noqa: F401
    from tenderdesk.app.modules.milestones import models as milestone_models  # noqa: F401
    from tenderdesk.app.modules.templates import models as template_models  # noqa: F401
    from tenderdesk.app.modules.tenders import models as tender_models  # noqa: F401


def init_db() -> None:
    """Create database tables."""

    import_models()
    Base.metadata.create_all(bind=engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Context manager yielding a transactional SQLAlchemy session."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # ON DELETE CASCADE / SET NULL are only honoured by SQLite with this pragma.
    if settings.database_url.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
