from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from translatable_model.app.core.config import settings

if TYPE_CHECKING:
    from translatable_model.app.services.translations_repository import (
        ModelTranslationsRepository,
    )

engine = create_engine(settings.DATABASE_URL, echo=False)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

translations_engine: Engine | None = (
    create_engine(settings.TRANSLATIONS_DATABASE_URL, echo=False)
    if settings.TRANSLATIONS_DATABASE_URL
    else None
)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_translations_repository(
    session: Session | None = None,
) -> ModelTranslationsRepository:
    """Return a repository bound to the configured translations store.

    A dedicated translations engine always wins.  Otherwise the given session
    is used so translation writes join the caller's transaction, and the
    default engine is the last resort for detached records.
    """
    from translatable_model.app.services.translations_repository import (
        ModelTranslationsRepository,
    )

    if translations_engine is not None:
        return ModelTranslationsRepository(translations_engine)
    if session is not None:
        return ModelTranslationsRepository(session)
    return ModelTranslationsRepository(engine)
