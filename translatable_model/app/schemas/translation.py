from __future__ import annotations

from pydantic import BaseModel, field_validator


class TranslationsUpsert(BaseModel):
    locale: str | None = None
    translations: dict[str, str | None]

    @field_validator("locale")
    @classmethod
    def locale_not_empty(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Locale must not be empty")
        return v

    @field_validator("translations")
    @classmethod
    def keys_not_empty(cls, v: dict[str, str | None]) -> dict[str, str | None]:
        if not v:
            raise ValueError("At least one translation is required")
        if any(not key.strip() for key in v):
            raise ValueError("Translation keys must not be empty")
        return v


class AffectedOut(BaseModel):
    affected: int
