from __future__ import annotations

from fastapi import Request

from translatable_model.app.core.i18n import LocaleContext


def get_locale_context(request: Request) -> LocaleContext:
    """Locale negotiated by ``LanguageMiddleware``, or the configured default."""
    context = getattr(request.state, "locale_context", None)
    return context if context is not None else LocaleContext.default()
