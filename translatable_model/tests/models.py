"""Mapped models used by the test suite only."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from translatable_model.app.core.database import Base
from translatable_model.app.models.mixins import SoftDeleteMixin, TimestampMixin
from translatable_model.app.models.translatable import HasTranslations


class Post(HasTranslations, TimestampMixin, Base):
    __tablename__ = "posts"
    __translatable_type__ = "Post"
    __translatables__ = ["title", "body"]

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)


class Product(HasTranslations, Base):
    __tablename__ = "products"
    __translatables__ = ["name", "details.name", "details.specs.material"]
    __translation_fallback__ = False
    __hidden__ = ("internal_code",)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    internal_code: Mapped[str | None] = mapped_column(String(50), nullable=True)


class Article(HasTranslations, SoftDeleteMixin, Base):
    """No declared translatables: inferred from staged and stored keys."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    headline: Mapped[str | None] = mapped_column(String(255), nullable=True)
