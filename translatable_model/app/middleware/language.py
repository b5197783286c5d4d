"""Accept-Language detection middleware."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from translatable_model.app.core.config import settings
from translatable_model.app.core.i18n import LocaleContext


class LanguageMiddleware(BaseHTTPMiddleware):
    """Parse ``Accept-Language`` and expose the caller's locale.

    Sets ``request.state.language`` and ``request.state.locale_context``;
    only ``settings.SUPPORTED_LOCALES`` are accepted.  The resolved language
    is echoed back via the ``Content-Language`` response header.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        accept = request.headers.get("Accept-Language", "")
        language = _parse_preferred(accept)
        request.state.language = language
        request.state.locale_context = LocaleContext(
            locale=language, fallback_locale=settings.FALLBACK_LOCALE
        )

        response = await call_next(request)
        response.headers["Content-Language"] = language
        return response


def _parse_preferred(header: str) -> str:
    """Return the best supported language from an Accept-Language header."""
    supported = set(settings.SUPPORTED_LOCALES)
    for part in header.split(","):
        tag = part.split(";")[0].strip().lower()
        # Match full tag or primary subtag (e.g. "ar-SA" → "ar")
        if tag in supported:
            return tag
        primary = tag.split("-")[0]
        if primary in supported:
            return primary
    return settings.DEFAULT_LOCALE
