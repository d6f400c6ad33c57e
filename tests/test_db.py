"""Tests for the database layer."""
from unittest.mock import AsyncMock, patch

import pytest

from pokerbot.db.connection import Database
from pokerbot.db.models import SCHEMA, init_db


class TestDatabase:
    """Test the connection pool wrapper without a server."""

    def test_singleton(self):
        assert Database() is Database()

    def test_pool_requires_connect(self):
        database = Database()
        with patch.object(Database, "_pool", None):
            assert not database.is_connected
            with pytest.raises(RuntimeError, match="not connected"):
                database.pool

    @pytest.mark.asyncio
    async def test_queries_fail_when_disconnected(self):
        with patch.object(Database, "_pool", None):
            with pytest.raises(RuntimeError):
                await Database().executemany("SELECT 1", [()])


class TestInitDb:

    @pytest.mark.asyncio
    async def test_creates_players_table(self):
        with patch("pokerbot.db.models.db") as mock_db:
            mock_db.execute = AsyncMock()
            await init_db()

        mock_db.execute.assert_awaited_once_with(SCHEMA)
        assert "CREATE TABLE IF NOT EXISTS players" in SCHEMA
