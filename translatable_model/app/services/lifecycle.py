"""Session events that persist staged translations with their records."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.unitofwork import UOWTransaction

from translatable_model.app.models.mixins import SoftDeleteMixin
from translatable_model.app.models.translatable import HasTranslations

logger = logging.getLogger(__name__)


def register_translation_hooks(target: Any) -> None:
    """Attach the translation hooks to a ``Session``, ``sessionmaker`` or session class.

    * after a flush, saved records commit their staged translations, hard
      deleted ones purge theirs and soft deleted ones purge theirs if
      configured to;
    * before a commit, records whose only change is a staged translation
      (nothing for the flush to write) commit it as well;
    * after a rollback, every record drops its translation cache, as the
      writes it already sent were rolled back with the transaction.
    """
    if not event.contains(target, "after_flush", _after_flush):
        event.listen(target, "after_flush", _after_flush)
    if not event.contains(target, "before_commit", _before_commit):
        event.listen(target, "before_commit", _before_commit)
    if not event.contains(target, "after_rollback", _after_rollback):
        event.listen(target, "after_rollback", _after_rollback)


def _after_flush(session: Session, flush_context: UOWTransaction) -> None:
    # new / dirty / deleted still describe the flush that just ran
    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, HasTranslations):
            continue
        if isinstance(obj, SoftDeleteMixin) and _was_soft_deleted(obj):
            obj.on_deleted(force=False)
        obj.on_saved()

    for obj in list(session.deleted):
        if isinstance(obj, HasTranslations):
            obj.on_deleted(force=True)


def _before_commit(session: Session) -> None:
    pending = [
        obj
        for obj in list(session.identity_map.values())
        if isinstance(obj, HasTranslations) and obj.has_pending_translations
    ]
    if pending:
        logger.debug("Committing staged translations of %d record(s)", len(pending))
    for obj in pending:
        obj.on_saved()


def _after_rollback(session: Session) -> None:
    # Runs before the session expunges its new objects, so all are still reachable
    records = {
        id(obj): obj
        for obj in [*session.identity_map.values(), *session.new, *session.deleted]
        if isinstance(obj, HasTranslations)
    }
    for obj in records.values():
        obj.on_rolled_back()


def _was_soft_deleted(obj: SoftDeleteMixin) -> bool:
    history = inspect(obj).attrs.deleted_at.history
    return any(v is not None for v in history.added) and not any(
        v is not None for v in history.deleted
    )
