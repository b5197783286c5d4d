from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from translatable_model.app.core.database import Base


class ModelTranslation(Base):
    """One translated value of one attribute of one record in one locale.

    ``translatable_type`` is the application's tag for the owning record type
    and ``translatable_id`` its primary key rendered as a string, so numeric
    and string keys share the table.  There is no foreign key: a row may
    outlive its record until the record's translations are purged.
    """

    __tablename__ = "model_translations"

    translatable_type: Mapped[str] = mapped_column(String(255), primary_key=True)
    translatable_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    locale: Mapped[str] = mapped_column(String(35), primary_key=True)
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
