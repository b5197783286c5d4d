from __future__ import annotations

import copy
import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Any, ClassVar

from sqlalchemy import inspect
from sqlalchemy.orm import object_session

from translatable_model.app.core.config import settings
from translatable_model.app.core.database import get_translations_repository
from translatable_model.app.core.i18n import LocaleContext
from translatable_model.app.services.fallback import Fallback
from translatable_model.app.services.translation_cache import TranslationOverlayCache
from translatable_model.app.services.translation_keys import (
    KeyKind,
    classify_key,
    data_get,
    data_set,
    nested_keys,
    normalize_key,
)
from translatable_model.app.services.translations_repository import (
    ModelTranslationsRepository,
    RecordIdentity,
    RecordTranslationsGateway,
)

logger = logging.getLogger(__name__)

_UNSET = object()

TranslationValue = str | Mapping[str, str | None] | None


class HasTranslations:
    """Mixin giving a mapped model per-locale attribute values.

    Translations live in ``model_translations`` and are read and written
    through an overlay cache owned by the instance.  Writes are staged and
    only reach storage when ``on_saved`` runs (see
    ``register_translation_hooks``).

    Class options:

    ``__translatables__``
        Dotted keys that are translatable, e.g. ``["title", "details.name"]``.
        ``None`` infers them from the instance's staged and stored keys.
    ``__translatable_type__``
        Tag stored in ``translatable_type``; defaults to ``__tablename__``.
    ``__translation_fallback__``
        Overrides ``settings.TRANSLATION_FALLBACK`` for this model.
    ``__hidden__``
        Attribute names left out of ``to_dict``.
    """

    __translatables__: ClassVar[Sequence[str] | None] = None
    __translatable_type__: ClassVar[str | None] = None
    __hidden__: ClassVar[Collection[str]] = ()

    # ─── Identity & storage ──────────────────────────────────────────────────

    def translation_identity(self) -> RecordIdentity:
        mapper = inspect(type(self))
        # Prefer the identity key: attributes of a deleted record cannot be refreshed
        values = inspect(self).identity or [
            getattr(self, mapper.get_property_by_column(column).key)
            for column in mapper.primary_key
        ]
        entity_id = None if any(v is None for v in values) else ",".join(str(v) for v in values)
        entity_type = type(self).__translatable_type__ or type(self).__tablename__  # type: ignore[attr-defined]
        return RecordIdentity.of(entity_type, entity_id)

    def translations_repository(self) -> ModelTranslationsRepository:
        return get_translations_repository(object_session(self))

    @property
    def translation_cache(self) -> TranslationOverlayCache:
        # Mapped instances loaded from the database skip __init__
        cache = getattr(self, "_translation_cache", None)
        if cache is None:
            cache = TranslationOverlayCache(
                RecordTranslationsGateway(self.translations_repository, self.translation_identity)
            )
            self._translation_cache = cache
        return cache

    @property
    def has_pending_translations(self) -> bool:
        cache = getattr(self, "_translation_cache", None)
        return cache is not None and cache.has_pending_changes

    def default_fallback(self) -> Fallback:
        behavior = getattr(type(self), "__translation_fallback__", _UNSET)
        if behavior is _UNSET:
            behavior = settings.TRANSLATION_FALLBACK
        return Fallback.parse(behavior)

    # ─── Attribute access ────────────────────────────────────────────────────

    def get_attribute(self, key: str, context: LocaleContext | None = None) -> Any:
        """Read an attribute, translated when it is (or contains) a translatable key."""
        context = context or LocaleContext.default()
        key = normalize_key(key)

        if key not in self._primary_key_attributes():
            kind = classify_key(key, self.translatables())
            if kind is KeyKind.TRANSLATABLE:
                return self.translation_cache.resolve(
                    key, context.locale, self.default_fallback(), context
                )
            if kind is KeyKind.NESTING:
                return self._get_nesting_attribute_value(
                    key, context.locale, self.default_fallback(), context
                )

        return self._get_plain_attribute(key)

    def set_attribute(
        self, key: str, value: Any, context: LocaleContext | None = None
    ) -> HasTranslations:
        """Write an attribute, staging translations for translatable keys."""
        context = context or LocaleContext.default()
        key = normalize_key(key)

        kind = classify_key(key, self.translatables())
        if kind is KeyKind.TRANSLATABLE:
            return self._set_translatable_attribute_value(key, value, context.locale)
        if kind is KeyKind.NESTING:
            return self._set_nesting_attribute_value(key, value, context.locale)

        self._set_plain_attribute(key, value)
        return self

    def to_dict(self, context: LocaleContext | None = None) -> dict[str, Any]:
        """Column values with every translatable key replaced by its translation."""
        context = context or LocaleContext.default()
        hidden = set(type(self).__hidden__)
        fallback = self.default_fallback()

        attributes: dict[str, Any] = {
            attr.key: copy.deepcopy(getattr(self, attr.key))
            for attr in inspect(type(self)).column_attrs
            if attr.key not in hidden
        }
        for key in self.translatables():
            if key.partition(".")[0] in hidden:
                continue
            translation = self.translation_cache.resolve(key, context.locale, fallback, context)
            if translation is None and data_get(attributes, key, _UNSET) is _UNSET:
                continue
            attributes = data_set(attributes, key, translation)
        return attributes

    # ─── Translations API ────────────────────────────────────────────────────

    def get_translation(
        self,
        key: str,
        locale: str | None = None,
        fallback: Fallback | str | bool | None = None,
        context: LocaleContext | None = None,
    ) -> str | None:
        """Return the translation of ``key``.

        ``fallback``: a locale to fall back to, ``True``/``None`` for the
        context's fallback locale, ``False`` for none.
        """
        context = context or LocaleContext.default()
        return self.translation_cache.resolve(
            key, locale or context.locale, Fallback.parse(fallback), context
        )

    def set_translation(
        self,
        key: str,
        value: TranslationValue,
        locale: str | None = None,
        context: LocaleContext | None = None,
    ) -> HasTranslations:
        """Stage a translation, or ``{locale: value}`` for several locales at once."""
        context = context or LocaleContext.default()
        return self._set_translatable_attribute_value(key, value, locale or context.locale)

    def remove_translation(
        self, key: str, locale: str | None = None, context: LocaleContext | None = None
    ) -> HasTranslations:
        context = context or LocaleContext.default()
        self.translation_cache.stage_delete(key, locale or context.locale)
        return self

    def flush_translations(self, locale: str | None = None) -> HasTranslations:
        """Stage removal of all translations of ``locale``, or of every locale."""
        self.translation_cache.remove_all(locale)
        return self

    def has_translation(
        self, key: str, locale: str | None = None, context: LocaleContext | None = None
    ) -> bool:
        context = context or LocaleContext.default()
        return self.translation_cache.has_translation(key, locale or context.locale, context)

    def is_translatable_attribute(self, key: str) -> bool:
        return classify_key(key, self.translatables()) is KeyKind.TRANSLATABLE

    def is_attribute_nesting_translatable_attribute(self, key: str) -> bool:
        return classify_key(key, self.translatables()) is KeyKind.NESTING

    def translatables(self) -> list[str]:
        return self.translation_cache.translatables(type(self).__translatables__)

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def on_saved(self) -> None:
        """Write staged translations; called after the record is flushed."""
        if self.has_pending_translations:
            self.translation_cache.commit()

    def on_deleted(self, force: bool = True) -> int:
        """Purge all stored translations of the record.

        A soft delete (``force=False``) only purges when
        ``FLUSH_TRANSLATIONS_ON_SOFT_DELETE`` is enabled.
        """
        if not force and not settings.FLUSH_TRANSLATIONS_ON_SOFT_DELETE:
            return 0
        affected = self.translation_cache.gateway.delete_all()
        self.discard_translation_cache()
        return affected

    def on_rolled_back(self) -> None:
        """Forget cached and staged translations once the session rolled back.

        Writes already sent on the rolled back connection are undone by the
        database, so the next read loads the store again.
        """
        if self.has_pending_translations:
            logger.debug("Discarding staged translations of %r after rollback", self)
        self.discard_translation_cache()

    def discard_translation_cache(self) -> None:
        self._translation_cache = None

    # ─── Internals ───────────────────────────────────────────────────────────

    def _primary_key_attributes(self) -> set[str]:
        mapper = inspect(type(self))
        return {mapper.get_property_by_column(column).key for column in mapper.primary_key}

    def _get_plain_attribute(self, key: str) -> Any:
        attribute, _, path = key.partition(".")
        value = getattr(self, attribute, None)
        return data_get(value, path) if path else value

    def _set_plain_attribute(self, key: str, value: Any) -> None:
        attribute, _, path = key.partition(".")
        if path:
            # Reassign a copy so change tracking sees structured values change
            value = data_set(copy.deepcopy(getattr(self, attribute, None)), path, value)
        setattr(self, attribute, value)

    def _get_nesting_attribute_value(
        self, key: str, locale: str, fallback: Fallback, context: LocaleContext
    ) -> Any:
        attribute = copy.deepcopy(self._get_plain_attribute(key))
        for translatable_key, path in nested_keys(key, self.translatables()):
            translation = self.translation_cache.resolve(translatable_key, locale, fallback, context)
            # Missing paths stay missing unless there is something to put there
            if translation is None and data_get(attribute, path, _UNSET) is _UNSET:
                continue
            attribute = data_set(attribute, path, translation)
        return attribute

    def _set_translatable_attribute_value(
        self, key: str, value: TranslationValue, locale: str
    ) -> HasTranslations:
        self.translation_cache.stage_update(key, value, locale)

        # The column keeps NULL; the translation is the only source of truth
        if "." not in key and key in inspect(type(self)).attrs:
            setattr(self, key, None)
        return self

    def _set_nesting_attribute_value(self, key: str, value: Any, locale: str) -> HasTranslations:
        value = copy.deepcopy(value)
        for translatable_key, path in nested_keys(key, self.translatables()):
            self._set_translatable_attribute_value(translatable_key, data_get(value, path), locale)
            # Only existing slots are cleared; scalars and missing paths are kept as given
            if data_get(value, path, _UNSET) is not _UNSET:
                value = data_set(value, path, None)

        self._set_plain_attribute(key, value)
        return self
