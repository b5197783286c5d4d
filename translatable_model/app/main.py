from fastapi import FastAPI

from translatable_model.app.api.v1.api import api_router
from translatable_model.app.core.database import SessionLocal
from translatable_model.app.middleware.language import LanguageMiddleware
from translatable_model.app.services.lifecycle import register_translation_hooks

app = FastAPI(title="Translatable Model")

# Staged translations are written when records are flushed / committed
register_translation_hooks(SessionLocal)

app.add_middleware(LanguageMiddleware)

app.include_router(api_router)
