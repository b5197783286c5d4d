from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from translatable_model.app.api.deps import get_locale_context
from translatable_model.app.core.database import get_db, get_translations_repository
from translatable_model.app.core.i18n import LocaleContext
from translatable_model.app.schemas.translation import AffectedOut, TranslationsUpsert

router = APIRouter()


@router.get("/{translatable_type}/{translatable_id}")
def get_translations(
    translatable_type: str,
    translatable_id: str,
    locale: str | None = Query(default=None, min_length=1),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    repository = get_translations_repository(db)
    if locale is not None:
        return repository.get_model_translations_for_locale(
            translatable_type, translatable_id, locale
        )
    return repository.get_model_translations(translatable_type, translatable_id)


@router.put("/{translatable_type}/{translatable_id}", response_model=AffectedOut)
def put_translations(
    translatable_type: str,
    translatable_id: str,
    payload: TranslationsUpsert,
    db: Session = Depends(get_db),
    context: LocaleContext = Depends(get_locale_context),
) -> AffectedOut:
    affected = get_translations_repository(db).upsert_model_translations(
        payload.translations,
        translatable_type,
        translatable_id,
        payload.locale or context.locale,
    )
    db.commit()
    return AffectedOut(affected=affected)


@router.delete("/{translatable_type}/{translatable_id}", response_model=AffectedOut)
def delete_translations(
    translatable_type: str,
    translatable_id: str,
    locale: str | None = Query(default=None, min_length=1),
    keys: list[str] | None = Query(default=None),
    db: Session = Depends(get_db),
) -> AffectedOut:
    repository = get_translations_repository(db)

    if keys and locale is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A locale is required when deleting specific keys",
        )

    if locale is None:
        affected = repository.flush_model_translations(translatable_type, translatable_id)
    elif keys:
        affected = repository.remove_model_translations(
            keys, translatable_type, translatable_id, locale
        )
    else:
        stored = repository.get_model_translations_for_locale(
            translatable_type, translatable_id, locale
        )
        affected = repository.remove_model_translations(
            stored, translatable_type, translatable_id, locale
        )

    db.commit()
    return AffectedOut(affected=affected)
