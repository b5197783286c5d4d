"""Locale context threaded through translation reads and writes."""

from __future__ import annotations

from dataclasses import dataclass, replace

from translatable_model.app.core.config import settings


@dataclass(frozen=True)
class LocaleContext:
    """The caller's current locale and the default fallback locale.

    Passed explicitly to every translation call instead of being read from
    process-global state, so two requests in different languages never see
    each other's locale.
    """

    locale: str
    fallback_locale: str

    def __post_init__(self) -> None:
        if not self.locale:
            raise ValueError("Locale must not be empty")
        if not self.fallback_locale:
            raise ValueError("Fallback locale must not be empty")

    @classmethod
    def default(cls) -> LocaleContext:
        """Build a context from the settings as they are right now."""
        return cls(locale=settings.DEFAULT_LOCALE, fallback_locale=settings.FALLBACK_LOCALE)

    def with_locale(self, locale: str) -> LocaleContext:
        return replace(self, locale=locale)
