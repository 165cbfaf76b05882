"""
HTMLVault Backend — Content Service Unit Tests
================================================

What:  Tests for ContentService validation, statement results and error translation.
How:   Uses a mock DB session (no real database).

What we test:
    ✅ Id parsing: numeric forms accepted, garbage rejected, impossible ids not found
    ✅ Presence and emptiness checks with trimming
    ✅ Validation failures never touch the session
    ✅ Missing rows raise NotFoundError and skip the commit
    ✅ SQLAlchemy errors become StorageError with the driver message
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from htmlvault.exceptions import NotFoundError, StorageError, ValidationError
from htmlvault.services.content_service import (
    MAX_CONTENT_ID,
    ContentService,
    clean_fields,
    parse_content_id,
)


def _returning(mock_db_session, row):
    """Make the next execute() return `row` from mappings().one()/one_or_none()."""
    result = MagicMock()
    result.mappings.return_value.one.return_value = row
    result.mappings.return_value.one_or_none.return_value = row
    mock_db_session.execute.return_value = result
    return result


class TestParseContentId:

    @pytest.mark.parametrize("raw, expected", [
        ("1", 1),
        ("42", 42),
        (" 7 ", 7),
        ("7.0", 7),
        ("1e1", 10),
        (str(MAX_CONTENT_ID), MAX_CONTENT_ID),
    ])
    def test_numeric_ids_accepted(self, raw, expected):
        assert parse_content_id(raw) == expected

    @pytest.mark.parametrize("raw", [
        "abc", "", "   ", "1a", "NaN", "Infinity", "-inf", None,
        "1_0", "\u0661\u0660", "\uff11",
    ])
    def test_non_numeric_ids_rejected(self, raw):
        with pytest.raises(ValidationError, match="Valid ID parameter is required"):
            parse_content_id(raw)

    @pytest.mark.parametrize("raw", ["0", "-3", "1.5", str(MAX_CONTENT_ID + 1), "1e12"])
    def test_numbers_no_row_can_have_are_not_found(self, raw):
        with pytest.raises(NotFoundError, match="Content not found"):
            parse_content_id(raw)


class TestCleanFields:

    def test_trims_both_fields(self):
        assert clean_fields("  Doc \n", "\t<p>hi</p>  ") == ("Doc", "<p>hi</p>")

    @pytest.mark.parametrize("title, html", [
        (None, "<p>x</p>"),
        ("Doc", None),
        ("", "<p>x</p>"),
        ("Doc", ""),
        (None, None),
    ])
    def test_missing_fields(self, title, html):
        with pytest.raises(ValidationError, match="Both title and html fields are required"):
            clean_fields(title, html)

    @pytest.mark.parametrize("title, html", [
        ("   ", "<p>x</p>"),
        ("Doc", "\n\t "),
    ])
    def test_whitespace_only_fields(self, title, html):
        with pytest.raises(ValidationError, match="Title and HTML content cannot be empty"):
            clean_fields(title, html)


class TestCreateContent:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_create_returns_summary_and_commits(self, mock_db_session):
        created_at = datetime.now(timezone.utc)
        _returning(mock_db_session, {"id": 1, "title": "Doc", "created_at": created_at})

        result = await self.service.create_content(mock_db_session, " Doc ", " <p>hi</p> ")

        assert result.id == 1
        assert result.title == "Doc"
        assert result.created_at == created_at
        mock_db_session.execute.assert_awaited_once()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_binds_trimmed_values(self, mock_db_session):
        _returning(
            mock_db_session,
            {"id": 3, "title": "Doc", "created_at": datetime.now(timezone.utc)},
        )

        await self.service.create_content(mock_db_session, "  Doc  ", "  <p>hi</p>\n")

        stmt = mock_db_session.execute.await_args.args[0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert params["title"] == "Doc"
        assert params["html_content"] == "<p>hi</p>"

    @pytest.mark.asyncio
    async def test_create_validation_never_executes(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.create_content(mock_db_session, "   ", "<p>x</p>")

        mock_db_session.execute.assert_not_awaited()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_database_failure_raises_storage_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "INSERT", {}, Exception("connection refused")
        )

        with pytest.raises(StorageError) as exc_info:
            await self.service.create_content(mock_db_session, "Doc", "<p>hi</p>")

        assert exc_info.value.message == "Failed to save data to database"
        assert "connection refused" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_commit_failure_raises_storage_error(self, mock_db_session):
        _returning(
            mock_db_session,
            {"id": 1, "title": "Doc", "created_at": datetime.now(timezone.utc)},
        )
        mock_db_session.commit.side_effect = SQLAlchemyError("commit failed")

        with pytest.raises(StorageError, match="Failed to save data to database"):
            await self.service.create_content(mock_db_session, "Doc", "<p>hi</p>")


class TestListContent:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_list_empty(self, mock_db_session):
        result = MagicMock()
        result.mappings.return_value.all.return_value = []
        mock_db_session.execute.return_value = result

        assert await self.service.list_content(mock_db_session) == []

    @pytest.mark.asyncio
    async def test_list_maps_rows_in_query_order(self, mock_db_session):
        now = datetime.now(timezone.utc)
        rows = [
            {"id": 2, "title": "B", "created_at": now, "updated_at": now, "content_length": 12},
            {"id": 1, "title": "A", "created_at": now, "updated_at": now, "content_length": 9},
        ]
        result = MagicMock()
        result.mappings.return_value.all.return_value = rows
        mock_db_session.execute.return_value = result

        items = await self.service.list_content(mock_db_session)

        assert [item.id for item in items] == [2, 1]
        assert items[0].content_length == 12
        assert not hasattr(items[0], "html_content")

    @pytest.mark.asyncio
    async def test_list_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("no such table")

        with pytest.raises(StorageError, match="Failed to retrieve data from database"):
            await self.service.list_content(mock_db_session)


class TestGetContent:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session, sample_row):
        _returning(mock_db_session, sample_row)

        result = await self.service.get_content(mock_db_session, "1")

        assert result.id == 1
        assert result.html_content == "<p>hi</p>"

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        _returning(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.get_content(mock_db_session, "99")

    @pytest.mark.asyncio
    async def test_get_invalid_id_never_executes(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.get_content(mock_db_session, "abc")

        mock_db_session.execute.assert_not_awaited()


class TestUpdateContent:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_update_success(self, mock_db_session):
        updated_at = datetime.now(timezone.utc)
        _returning(mock_db_session, {"id": 1, "title": "Doc2", "updated_at": updated_at})

        result = await self.service.update_content(mock_db_session, "1", "Doc2", "<p>bye</p>")

        assert result.id == 1
        assert result.title == "Doc2"
        assert result.updated_at == updated_at
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_not_found_skips_commit(self, mock_db_session):
        _returning(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.update_content(mock_db_session, "5", "Doc", "<p>x</p>")

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_checks_id_before_fields(self, mock_db_session):
        with pytest.raises(ValidationError, match="Valid ID parameter is required"):
            await self.service.update_content(mock_db_session, "abc", None, None)

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_blank_fields_rejected(self, mock_db_session):
        with pytest.raises(ValidationError, match="cannot be empty"):
            await self.service.update_content(mock_db_session, "1", "  ", "<p>x</p>")

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("deadlock detected")

        with pytest.raises(StorageError, match="Failed to update data in database"):
            await self.service.update_content(mock_db_session, "1", "Doc", "<p>x</p>")


class TestDeleteContent:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db_session):
        _returning(mock_db_session, {"id": 4, "title": "Gone"})

        result = await self.service.delete_content(mock_db_session, "4")

        assert result.id == 4
        assert result.title == "Gone"
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session):
        _returning(mock_db_session, None)

        with pytest.raises(NotFoundError):
            await self.service.delete_content(mock_db_session, "4")

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_invalid_id(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.delete_content(mock_db_session, "one")

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection reset")

        with pytest.raises(StorageError, match="Failed to delete data from database"):
            await self.service.delete_content(mock_db_session, "4")
