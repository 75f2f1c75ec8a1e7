"""SQLAlchemy models for stored document trees."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from oxytree.db import Base


class DocumentMeta(Base):
    """One stored tree payload per document and builder meta key."""

    __tablename__ = "document_meta"
    __table_args__ = (UniqueConstraint("document_id", "meta_key", name="uq_document_meta_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(Integer, index=True)
    meta_key: Mapped[str] = mapped_column(String(64))
    meta_value: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
