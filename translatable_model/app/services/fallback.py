"""Missing translation fallback behaviour."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from translatable_model.app.core.i18n import LocaleContext


class FallbackMode(str, enum.Enum):
    DISABLED = "DISABLED"
    LOCALE = "LOCALE"
    DEFAULT = "DEFAULT"


@dataclass(frozen=True)
class Fallback:
    """Where to look when a locale has no translation for a key.

    ``DEFAULT`` means the context's fallback locale, read when the fallback
    is resolved rather than when the directive is built.
    """

    mode: FallbackMode
    locale: str | None = None

    def __post_init__(self) -> None:
        if self.mode is FallbackMode.LOCALE and not self.locale:
            raise ValueError("Fallback locale must not be empty")

    @classmethod
    def disabled(cls) -> Fallback:
        return cls(FallbackMode.DISABLED)

    @classmethod
    def default(cls) -> Fallback:
        return cls(FallbackMode.DEFAULT)

    @classmethod
    def to(cls, locale: str) -> Fallback:
        return cls(FallbackMode.LOCALE, locale)

    @classmethod
    def parse(cls, value: Fallback | str | bool | None) -> Fallback:
        """Accept the configuration form of a fallback.

        A locale string falls back to that locale, ``True``/``None`` to the
        default fallback locale and ``False`` disables fallback.
        """
        if isinstance(value, Fallback):
            return value
        if value is False:
            return cls.disabled()
        if value is None or value is True:
            return cls.default()
        return cls.to(value)


def next_fallback_locale(
    locale: str, fallback: Fallback, context: LocaleContext
) -> str | None:
    """Return the locale to probe after ``locale``, or ``None`` to stop.

    A target equal to ``locale`` itself is treated as no fallback.
    """
    if fallback.mode is FallbackMode.DISABLED:
        return None
    target = fallback.locale if fallback.mode is FallbackMode.LOCALE else context.fallback_locale
    if target == locale:
        return None
    return target
