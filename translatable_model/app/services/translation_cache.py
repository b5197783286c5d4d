"""Per-record, per-locale, write-deferred translation cache.

Three layers are kept per locale:

* the snapshot, loaded lazily from storage the first time a locale is read;
* pending updates staged since the last commit;
* pending deletions staged since the last commit.

Reads consult pending deletions first, then pending updates, then the
snapshot.  For a given locale and key at most one of the two pending layers
holds the key.  ``commit`` writes the pending layers through the gateway and
folds them into the snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from translatable_model.app.core.i18n import LocaleContext
from translatable_model.app.services.fallback import Fallback, next_fallback_locale
from translatable_model.app.services.translations_repository import TranslationsGateway

logger = logging.getLogger(__name__)


class TranslationOverlayCache:
    def __init__(self, gateway: TranslationsGateway) -> None:
        self._gateway = gateway
        self._snapshot: dict[str, dict[str, str]] = {}
        self._pending_updates: dict[str, dict[str, str]] = {}
        self._pending_deletes: dict[str, set[str]] = {}
        self._translatables: list[str] | None = None

    @property
    def gateway(self) -> TranslationsGateway:
        return self._gateway

    @property
    def has_pending_changes(self) -> bool:
        return any(self._pending_updates.values()) or any(self._pending_deletes.values())

    def is_loaded(self, locale: str) -> bool:
        return locale in self._snapshot

    # ─── Reads ───────────────────────────────────────────────────────────────

    def resolve(
        self,
        key: str,
        locale: str,
        fallback: Fallback,
        context: LocaleContext,
    ) -> str | None:
        """Return the translation of ``key`` in ``locale``.

        When the locale has none, a single fallback hop is tried; the
        fallback locale itself never falls back further.
        """
        if key in self._pending_deletes.get(locale, ()):
            value = None
        elif key in self._pending_updates.get(locale, {}):
            value = self._pending_updates[locale][key]
        else:
            value = self._load(locale).get(key)

        if value is None:
            target = next_fallback_locale(locale, fallback, context)
            if target is not None:
                value = self.resolve(key, target, Fallback.disabled(), context)
        return value

    def has_translation(self, key: str, locale: str, context: LocaleContext) -> bool:
        return self.resolve(key, locale, Fallback.disabled(), context) is not None

    def translatables(self, declared: Sequence[str] | None = None) -> list[str]:
        """Return the translatable keys of the record.

        Computed once: ``declared`` when given, otherwise every key currently
        staged or stored in any locale.  Keys staged later are appended, but
        keys written to storage by someone else are not picked up.
        """
        if self._translatables is None:
            if declared is not None:
                self._translatables = list(declared)
            else:
                keys: dict[str, None] = {}
                for translations in self._pending_updates.values():
                    keys.update(dict.fromkeys(translations))
                for translations in self._gateway.fetch_all().values():
                    keys.update(dict.fromkeys(translations))
                self._translatables = list(keys)
        return list(self._translatables)

    # ─── Staging ─────────────────────────────────────────────────────────────

    def stage_update(
        self,
        key: str,
        value: str | Mapping[str, str | None] | None,
        locale: str,
    ) -> None:
        """Stage ``value`` for ``key`` in ``locale``.

        ``value`` may also map locales to values, in which case ``locale`` is
        ignored.  ``None`` values stage a deletion.
        """
        translations = value if isinstance(value, Mapping) else {locale: value}

        for translation_locale, translation in translations.items():
            if translation is None:
                self.stage_delete(key, translation_locale)
                continue

            self._pending_updates.setdefault(translation_locale, {})[key] = translation
            self._pending_deletes.get(translation_locale, set()).discard(key)

            if self._translatables is not None and key not in self._translatables:
                self._translatables.append(key)

    def stage_delete(self, key: str, locale: str) -> None:
        self._pending_deletes.setdefault(locale, set()).add(key)
        self._pending_updates.get(locale, {}).pop(key, None)

    def remove_all(self, locale: str | None = None) -> None:
        """Stage deletion of every known translation of one or all locales.

        Keys stored but never loaded into this cache are included by reading
        storage once; nothing is deleted until the next commit.
        """
        if locale is None:
            stored = self._gateway.fetch_all()
            locales = {*self._snapshot, *self._pending_updates, *stored}
        else:
            stored = {locale: self._gateway.fetch_for_locale(locale)}
            locales = {locale}

        staged = 0
        for target in locales:
            keys = {
                *self._snapshot.get(target, {}),
                *self._pending_updates.get(target, {}),
                *stored.get(target, {}),
            }
            for key in keys:
                self.stage_delete(key, target)
            staged += len(keys)

        logger.debug("Staged removal of %d translation(s) in %d locale(s)", staged, len(locales))

    # ─── Commit ──────────────────────────────────────────────────────────────

    def commit(self) -> int:
        """Write pending updates and deletions, then fold them into the snapshot.

        Pending layers are only cleared once every write succeeded, so a
        failed commit can be retried as is.
        """
        if not self.has_pending_changes:
            return 0

        affected = 0
        for locale, translations in self._pending_updates.items():
            if translations:
                affected += self._gateway.upsert_many(dict(translations), locale)
        for locale, keys in self._pending_deletes.items():
            if keys:
                affected += self._gateway.delete_by_keys(sorted(keys), locale)

        logger.debug(
            "Committed translations: %d locale(s) updated, %d locale(s) with deletions",
            sum(1 for t in self._pending_updates.values() if t),
            sum(1 for k in self._pending_deletes.values() if k),
        )

        # Locales never loaded stay unloaded; the next read fetches them whole.
        for locale, translations in self._pending_updates.items():
            if locale in self._snapshot:
                self._snapshot[locale].update(translations)
        for locale, keys in self._pending_deletes.items():
            if locale in self._snapshot:
                for key in keys:
                    self._snapshot[locale].pop(key, None)

        self._pending_updates = {}
        self._pending_deletes = {}
        return affected

    # ─── Internals ───────────────────────────────────────────────────────────

    def _load(self, locale: str) -> dict[str, str]:
        if locale not in self._snapshot:
            translations = self._gateway.fetch_for_locale(locale)
            logger.debug("Loaded %d translation(s) for locale %s", len(translations), locale)
            self._snapshot[locale] = translations
        return self._snapshot[locale]
