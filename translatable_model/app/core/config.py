from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./translatable_model.db"

    # Dedicated store for model translations; None shares the record's session
    TRANSLATIONS_DATABASE_URL: str | None = None

    # Locales
    DEFAULT_LOCALE: str = "en"
    FALLBACK_LOCALE: str = "en"
    SUPPORTED_LOCALES: list[str] = ["en", "ar"]

    # Missing translation fallback:
    #   "<locale>"   -> fallback to that locale
    #   True | None  -> fallback to FALLBACK_LOCALE
    #   False        -> no fallback
    TRANSLATION_FALLBACK: str | bool | None = None

    # Soft deletes keep translations unless this is enabled
    FLUSH_TRANSLATIONS_ON_SOFT_DELETE: bool = False

    @field_validator("DEFAULT_LOCALE", "FALLBACK_LOCALE")
    @classmethod
    def locale_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Locale must not be empty")
        return v

    @field_validator("TRANSLATION_FALLBACK", mode="before")
    @classmethod
    def parse_fallback(cls, v: object) -> object:
        # Environment values arrive as strings; only true/false mean booleans
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("Fallback locale must not be empty")
            if v.lower() in ("true", "false"):
                return v.lower() == "true"
        return v


settings = Settings()
