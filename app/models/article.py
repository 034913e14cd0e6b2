from __future__ import annotations

import datetime as dt

from sqlalchemy import String, Integer, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from app.core.db import Base, utcnow

class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_link", "link"),
        Index("ix_articles_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Natural key: a re-scraped link updates the existing row
    link: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    source: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=utcnow(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=utcnow(), nullable=False)

    def to_dict(self, *fields: str) -> dict:
        data = {}
        for name in fields or ("title", "summary", "link", "source", "created_at"):
            value = getattr(self, name)
            data[name] = value.isoformat() if isinstance(value, dt.datetime) else value
        return data
