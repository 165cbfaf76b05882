"""
HTMLVault Backend — Content Service
=====================================

What:  Create/list/get/update/delete over the `html_content` table.
How:   Each operation validates its input, issues exactly one parameterized
       SQL statement (INSERT/UPDATE/DELETE use RETURNING so no follow-up
       SELECT is needed), commits writes, and returns a response model.
Who:   Called by the route handlers in routes/content.py.

Error translation:
    Invalid id or body fields   → ValidationError (nothing reaches the database)
    Statement returned no row   → NotFoundError
    Any SQLAlchemyError         → StorageError, with the driver message as details

ContentService is stateless: the session is passed into every call, and the
session comes from the `Database` handle owned by the application.
"""

import logging
import math
import re
from typing import Any, List, Optional, Tuple

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from htmlvault.exceptions import NotFoundError, StorageError, ValidationError
from htmlvault.models.content import Content
from htmlvault.schemas.content import (
    ContentDetail,
    ContentSummary,
    DeletedContent,
    UpdatedContent,
    UploadedContent,
)

logger = logging.getLogger(__name__)

# Upper bound of a PostgreSQL SERIAL column
MAX_CONTENT_ID = 2_147_483_647

MISSING_FIELDS_MESSAGE = "Both title and html fields are required"
EMPTY_FIELDS_MESSAGE = "Title and HTML content cannot be empty"
INVALID_ID_MESSAGE = "Valid ID parameter is required"
NOT_FOUND_MESSAGE = "Content not found"

# ASCII decimal literal; float() alone would also take "1_0" and Arabic-Indic digits
_NUMERIC_ID = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def parse_content_id(raw: Any) -> int:
    """
    Converts a path id into a row id.

    Anything that reads as a finite number is accepted, surrounding
    whitespace included ("7", " 7 ", "7.0", "1e1"). Other input raises
    ValidationError. A numeric value that no SERIAL row can carry (fractional,
    below 1, above MAX_CONTENT_ID) raises NotFoundError directly.
    """
    if raw is None or isinstance(raw, bool):
        raise ValidationError(INVALID_ID_MESSAGE, field="id")

    text = str(raw).strip()
    if not _NUMERIC_ID.fullmatch(text):
        raise ValidationError(INVALID_ID_MESSAGE, field="id", context={"raw_id": str(raw)})

    value = float(text)
    if not math.isfinite(value):
        raise ValidationError(INVALID_ID_MESSAGE, field="id", context={"raw_id": str(raw)})

    if not value.is_integer() or not 1 <= value <= MAX_CONTENT_ID:
        raise NotFoundError(NOT_FOUND_MESSAGE, resource_id=str(raw))

    return int(value)


def clean_fields(title: Optional[str], html: Optional[str]) -> Tuple[str, str]:
    """
    Checks presence, then emptiness after trimming; returns the trimmed pair.
    """
    if not title or not html:
        raise ValidationError(
            MISSING_FIELDS_MESSAGE,
            context={"title_present": bool(title), "html_present": bool(html)},
        )

    title, html = title.strip(), html.strip()
    if not title or not html:
        raise ValidationError(EMPTY_FIELDS_MESSAGE)

    return title, html


class ContentService:
    """
    One method per API operation; each runs a single statement.
    """

    async def create_content(
        self,
        db: AsyncSession,
        title: Optional[str],
        html: Optional[str],
    ) -> UploadedContent:
        """
        Insert a new document.

        Query:
            INSERT INTO html_content (title, html_content, updated_at)
            VALUES (:title, :html, CURRENT_TIMESTAMP)
            RETURNING id, title, created_at

        Raises:
            ValidationError: title or html missing, or blank after trimming
            StorageError:    the insert or its commit failed
        """
        title, html = clean_fields(title, html)

        stmt = (
            insert(Content)
            .values(title=title, html_content=html, updated_at=func.now())
            .returning(Content.id, Content.title, Content.created_at)
        )
        try:
            result = await db.execute(stmt)
            row = result.mappings().one()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating content: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to save data to database",
                details=str(e),
                context={"error_type": type(e).__name__},
            )

        logger.info("Content %s created (%d chars of HTML)", row["id"], len(html))
        return UploadedContent.model_validate(dict(row))

    async def list_content(self, db: AsyncSession) -> List[ContentSummary]:
        """
        All documents, newest first, without their HTML.

        Query:
            SELECT id, title, created_at, updated_at,
                   LENGTH(html_content) AS content_length
            FROM html_content
            ORDER BY created_at DESC, id DESC
        """
        stmt = select(
            Content.id,
            Content.title,
            Content.created_at,
            Content.updated_at,
            func.length(Content.html_content).label("content_length"),
        ).order_by(Content.created_at.desc(), Content.id.desc())

        try:
            result = await db.execute(stmt)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing content: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to retrieve data from database",
                details=str(e),
                context={"error_type": type(e).__name__},
            )

        return [ContentSummary.model_validate(dict(row)) for row in rows]

    async def get_content(self, db: AsyncSession, raw_id: Any) -> ContentDetail:
        """
        One document including its HTML.

        Raises:
            ValidationError: id is not numeric
            NotFoundError:   no row has this id
            StorageError:    the query failed
        """
        content_id = parse_content_id(raw_id)

        stmt = select(
            Content.id,
            Content.title,
            Content.html_content,
            Content.created_at,
            Content.updated_at,
        ).where(Content.id == content_id)

        try:
            result = await db.execute(stmt)
            row = result.mappings().one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching content %d: %s", content_id, str(e))
            raise StorageError(
                message="Failed to retrieve data from database",
                details=str(e),
                context={"content_id": content_id},
            )

        if row is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, resource_id=content_id)

        return ContentDetail.model_validate(dict(row))

    async def update_content(
        self,
        db: AsyncSession,
        raw_id: Any,
        title: Optional[str],
        html: Optional[str],
    ) -> UpdatedContent:
        """
        Replace title and HTML, refresh updated_at. created_at is untouched.

        Query:
            UPDATE html_content
            SET title = :title, html_content = :html, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            RETURNING id, title, updated_at
        """
        content_id = parse_content_id(raw_id)
        title, html = clean_fields(title, html)

        stmt = (
            update(Content)
            .where(Content.id == content_id)
            .values(title=title, html_content=html, updated_at=func.now())
            .returning(Content.id, Content.title, Content.updated_at)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            row = result.mappings().one_or_none()
            if row is not None:
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating content %d: %s", content_id, str(e))
            raise StorageError(
                message="Failed to update data in database",
                details=str(e),
                context={"content_id": content_id},
            )

        if row is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, resource_id=content_id)

        logger.info("Content %d updated", content_id)
        return UpdatedContent.model_validate(dict(row))

    async def delete_content(self, db: AsyncSession, raw_id: Any) -> DeletedContent:
        """
        Remove a document permanently.

        Query:
            DELETE FROM html_content WHERE id = :id RETURNING id, title
        """
        content_id = parse_content_id(raw_id)

        stmt = (
            delete(Content)
            .where(Content.id == content_id)
            .returning(Content.id, Content.title)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            row = result.mappings().one_or_none()
            if row is not None:
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting content %d: %s", content_id, str(e))
            raise StorageError(
                message="Failed to delete data from database",
                details=str(e),
                context={"content_id": content_id},
            )

        if row is None:
            raise NotFoundError(NOT_FOUND_MESSAGE, resource_id=content_id)

        logger.info("Content %d deleted", content_id)
        return DeletedContent.model_validate(dict(row))


content_service = ContentService()
