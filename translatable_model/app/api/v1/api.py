from fastapi import APIRouter

from translatable_model.app.api.v1.endpoints import translations

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(translations.router, prefix="/translations", tags=["translations"])
