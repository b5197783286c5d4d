"""Storage access for model translations.

``ModelTranslationsRepository`` talks to the ``model_translations`` table for
any record; ``RecordTranslationsGateway`` narrows it to a single record and is
what the overlay cache depends on (through the ``TranslationsGateway``
protocol).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import Table, delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from translatable_model.app.models.translation import ModelTranslation

logger = logging.getLogger(__name__)

_CONFLICT_COLUMNS = ["translatable_type", "translatable_id", "locale", "key"]


@dataclass(frozen=True)
class RecordIdentity:
    """Type tag and primary key of a record owning translations.

    ``entity_id`` is ``None`` while the record has no primary key yet.
    """

    entity_type: str
    entity_id: str | None

    @classmethod
    def of(cls, entity_type: str, entity_id: object) -> RecordIdentity:
        return cls(entity_type, None if entity_id is None else str(entity_id))

    @property
    def is_persisted(self) -> bool:
        return self.entity_id is not None


class ModelTranslationsRepository:
    """Reads and writes translation rows keyed by record, locale and key.

    ``bind`` may be a ``Session`` (statements join its transaction and run on
    its connection, without triggering autoflush), an ``Engine`` (each call
    runs in its own transaction) or an open ``Connection``.
    """

    def __init__(self, bind: Session | Engine | Connection) -> None:
        self._bind = bind

    @property
    def table(self) -> Table:
        return ModelTranslation.__table__  # type: ignore[return-value]

    # ─── Reads ───────────────────────────────────────────────────────────────

    def get_model_translations_for_locale(
        self, translatable_type: str, translatable_id: object, locale: str
    ) -> dict[str, str]:
        """Return ``{key: value}`` for one locale of a record."""
        stmt = select(self.table.c.key, self.table.c.value).where(
            *self._record_clauses(translatable_type, translatable_id),
            self.table.c.locale == locale,
        )
        with self._connection() as conn:
            rows = conn.execute(stmt).all()
        return {key: value for key, value in rows}

    def get_model_translations(
        self, translatable_type: str, translatable_id: object
    ) -> dict[str, dict[str, str]]:
        """Return ``{locale: {key: value}}`` for every locale of a record."""
        stmt = select(
            self.table.c.locale, self.table.c.key, self.table.c.value
        ).where(*self._record_clauses(translatable_type, translatable_id))
        with self._connection() as conn:
            rows = conn.execute(stmt).all()

        translations: dict[str, dict[str, str]] = {}
        for locale, key, value in rows:
            translations.setdefault(locale, {})[key] = value
        return translations

    # ─── Writes ──────────────────────────────────────────────────────────────

    def upsert_model_translations(
        self,
        translations: Mapping[str, str | None],
        translatable_type: str,
        translatable_id: object,
        locale: str,
    ) -> int:
        """Insert or overwrite translations of one locale.

        ``None`` values remove the corresponding rows instead, so the table
        never holds a null value.  Both statements run on one connection.
        """
        records = [
            {
                "translatable_type": translatable_type,
                "translatable_id": str(translatable_id),
                "locale": locale,
                "key": key,
                "value": value,
            }
            for key, value in translations.items()
            if value is not None
        ]
        to_remove = [key for key, value in translations.items() if value is None]

        affected = 0
        with self._connection() as conn:
            if records:
                affected += self._upsert(conn, records)
            if to_remove:
                affected += conn.execute(
                    self._delete_keys_stmt(to_remove, translatable_type, translatable_id, locale)
                ).rowcount
        return affected

    def remove_model_translations(
        self,
        keys: Iterable[str],
        translatable_type: str,
        translatable_id: object,
        locale: str,
    ) -> int:
        keys = list(keys)
        if not keys:
            return 0
        with self._connection() as conn:
            return conn.execute(
                self._delete_keys_stmt(keys, translatable_type, translatable_id, locale)
            ).rowcount

    def flush_model_translations(
        self, translatable_type: str, translatable_id: object
    ) -> int:
        """Remove every translation of a record across all locales."""
        stmt = delete(self.table).where(
            *self._record_clauses(translatable_type, translatable_id)
        )
        with self._connection() as conn:
            return conn.execute(stmt).rowcount

    # ─── Internals ───────────────────────────────────────────────────────────

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if isinstance(self._bind, Session):
            yield self._bind.connection()
        elif isinstance(self._bind, Engine):
            with self._bind.begin() as conn:
                yield conn
        else:
            yield self._bind

    def _record_clauses(self, translatable_type: str, translatable_id: object) -> list[Any]:
        return [
            self.table.c.translatable_type == translatable_type,
            self.table.c.translatable_id == str(translatable_id),
        ]

    def _delete_keys_stmt(
        self,
        keys: list[str],
        translatable_type: str,
        translatable_id: object,
        locale: str,
    ) -> Any:
        return delete(self.table).where(
            *self._record_clauses(translatable_type, translatable_id),
            self.table.c.locale == locale,
            self.table.c.key.in_(keys),
        )

    def _upsert(self, conn: Connection, records: list[dict[str, Any]]) -> int:
        dialect = conn.dialect.name
        if dialect in ("postgresql", "sqlite"):
            factory = pg_insert if dialect == "postgresql" else sqlite_insert
            stmt = factory(self.table).values(records)
            stmt = stmt.on_conflict_do_update(
                index_elements=_CONFLICT_COLUMNS,
                set_={"value": stmt.excluded.value, "updated_at": func.now()},
            )
            return conn.execute(stmt).rowcount

        # No portable upsert: replace the rows within the same transaction
        first = records[0]
        conn.execute(
            self._delete_keys_stmt(
                [r["key"] for r in records],
                first["translatable_type"],
                first["translatable_id"],
                first["locale"],
            )
        )
        return conn.execute(insert(self.table), records).rowcount


class TranslationsGateway(Protocol):
    """Translation storage scoped to a single record."""

    def fetch_for_locale(self, locale: str) -> dict[str, str]: ...

    def fetch_all(self) -> dict[str, dict[str, str]]: ...

    def upsert_many(self, translations: Mapping[str, str | None], locale: str) -> int: ...

    def delete_by_keys(self, keys: Iterable[str], locale: str) -> int: ...

    def delete_all(self) -> int: ...


class RecordTranslationsGateway:
    """Adapts ``ModelTranslationsRepository`` to one record.

    Both the repository and the identity are looked up on every call: a
    record gets its primary key on first flush and may move between
    sessions.  Reads for a record without a primary key return nothing
    without querying; writes for it are rejected.
    """

    def __init__(
        self,
        repository: Callable[[], ModelTranslationsRepository],
        identity: Callable[[], RecordIdentity],
    ) -> None:
        self._repository = repository
        self._identity = identity

    def fetch_for_locale(self, locale: str) -> dict[str, str]:
        identity = self._identity()
        if not identity.is_persisted:
            return {}
        return self._repository().get_model_translations_for_locale(
            identity.entity_type, identity.entity_id, locale
        )

    def fetch_all(self) -> dict[str, dict[str, str]]:
        identity = self._identity()
        if not identity.is_persisted:
            return {}
        return self._repository().get_model_translations(
            identity.entity_type, identity.entity_id
        )

    def upsert_many(self, translations: Mapping[str, str | None], locale: str) -> int:
        identity = self._persisted_identity()
        return self._repository().upsert_model_translations(
            translations, identity.entity_type, identity.entity_id, locale
        )

    def delete_by_keys(self, keys: Iterable[str], locale: str) -> int:
        identity = self._persisted_identity()
        return self._repository().remove_model_translations(
            keys, identity.entity_type, identity.entity_id, locale
        )

    def delete_all(self) -> int:
        identity = self._persisted_identity()
        affected = self._repository().flush_model_translations(
            identity.entity_type, identity.entity_id
        )
        logger.info(
            "Purged %d translation(s) of %s:%s",
            affected,
            identity.entity_type,
            identity.entity_id,
        )
        return affected

    def _persisted_identity(self) -> RecordIdentity:
        identity = self._identity()
        if not identity.is_persisted:
            raise ValueError(
                f"Cannot write translations of an unsaved {identity.entity_type} record"
            )
        return identity
