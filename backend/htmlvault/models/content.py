"""
HTMLVault Backend — Content SQLAlchemy Model
==============================================

What:  ORM mapping of the `html_content` table.
Who:   ContentService builds its INSERT/SELECT/UPDATE/DELETE statements from
       these columns; startup table creation and Alembic read the metadata.

Table Design:
    - SERIAL integer primary key; ids are never reused
    - title: VARCHAR(255), trimmed and non-empty
    - html_content: TEXT, trimmed and non-empty, may be several megabytes
    - created_at: set once by the server default
    - updated_at: server default on insert, set to CURRENT_TIMESTAMP by every update

    Index on created_at DESC serves the list endpoint (newest first).
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from htmlvault.database import Base


class Content(Base):
    """
    A named HTML document.

    Lifecycle:
        1. Inserted by ContentService.create
        2. title, html_content and updated_at replaced by ContentService.update
        3. Removed permanently by ContentService.delete
    """

    __tablename__ = "html_content"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    html_content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(),
        nullable=False,
        server_default=func.now(),
    )

    # AUTOINCREMENT keeps SQLite from reusing the id of a deleted last row;
    # PostgreSQL sequences never reuse ids anyway.
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self) -> str:
        return f"<Content(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"


Index("idx_html_content_created_at", Content.created_at.desc())
