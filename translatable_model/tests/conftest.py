"""Shared test fixtures.

Every test gets its own in-memory SQLite database with the schema created
from the models, so tests never pollute each other.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import translatable_model.tests.models  # noqa: F401  (registers test tables)
from translatable_model.app.core.database import Base, get_db
from translatable_model.app.core.i18n import LocaleContext
from translatable_model.app.main import app
from translatable_model.app.services.lifecycle import register_translation_hooks
from translatable_model.app.services.translations_repository import (
    ModelTranslationsRepository,
)


# ─── Database ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine: Engine) -> Generator[Session, None, None]:
    """Session with the translation lifecycle hooks registered."""
    session = Session(bind=engine, autoflush=False)
    register_translation_hooks(session)
    yield session
    session.close()


@pytest.fixture()
def repository(db: Session) -> ModelTranslationsRepository:
    return ModelTranslationsRepository(db)


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Locale contexts ──────────────────────────────────────────────────────────


@pytest.fixture()
def en() -> LocaleContext:
    return LocaleContext(locale="en", fallback_locale="en")


@pytest.fixture()
def ar() -> LocaleContext:
    return LocaleContext(locale="ar", fallback_locale="en")


# ─── In-memory gateway ────────────────────────────────────────────────────────


class InMemoryGateway:
    """Translations of a single record kept in a dict; records every call."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, str]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.fail_on: set[str] = set()

    def seed(self, locale: str, translations: Mapping[str, str]) -> None:
        self.rows.setdefault(locale, {}).update(translations)

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    @property
    def writes(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] in ("upsert_many", "delete_by_keys", "delete_all")]

    def fetch_for_locale(self, locale: str) -> dict[str, str]:
        self._record("fetch_for_locale", locale)
        return dict(self.rows.get(locale, {}))

    def fetch_all(self) -> dict[str, dict[str, str]]:
        self._record("fetch_all")
        return {locale: dict(t) for locale, t in self.rows.items() if t}

    def upsert_many(self, translations: Mapping[str, str | None], locale: str) -> int:
        self._record("upsert_many", locale)
        stored = self.rows.setdefault(locale, {})
        for key, value in translations.items():
            if value is None:
                stored.pop(key, None)
            else:
                stored[key] = value
        return len(translations)

    def delete_by_keys(self, keys: Iterable[str], locale: str) -> int:
        self._record("delete_by_keys", locale)
        stored = self.rows.get(locale, {})
        return sum(1 for key in list(keys) if stored.pop(key, None) is not None)

    def delete_all(self) -> int:
        self._record("delete_all")
        affected = sum(len(t) for t in self.rows.values())
        self.rows = {}
        return affected

    def _record(self, operation: str, *args: str) -> None:
        if operation in self.fail_on:
            raise OperationalError(operation, {}, Exception("translations store unavailable"))
        self.calls.append((operation, *args))


@pytest.fixture()
def gateway() -> InMemoryGateway:
    return InMemoryGateway()
