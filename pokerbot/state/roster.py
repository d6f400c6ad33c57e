"""Player roster: lifetime games and winnings, persisted to PostgreSQL."""
import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

import asyncpg

from pokerbot.db.connection import db
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)


class RosterError(Exception):
    """The roster could not be read or saved."""
    pass


@dataclass
class Stats:
    """Lifetime stats of one player."""
    identifier: str
    games: int
    money: int

    @classmethod
    def from_record(cls, record) -> "Stats":
        """Create from database record."""
        return cls(
            identifier=record["username"],
            games=record["games"],
            money=record["money"],
        )


class Roster(Protocol):
    """Persistence port handed to every table."""

    async def modify_money(self, identifier: str, delta: int) -> None: ...

    async def track_game(self, identifier: str) -> None: ...

    async def save_roster(self) -> None: ...

    async def get_stats(self, identifier: str) -> Optional[Stats]: ...


class PostgresRoster:
    """Roster backed by the ``players`` table.

    Changes are buffered in memory and written in one transaction by
    ``save_roster()``. A failed save keeps the buffer so the next save
    retries it. One instance is shared by every table, so the buffer is
    guarded by a lock.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._money: dict[str, int] = {}
        self._games: dict[str, int] = {}

    async def modify_money(self, identifier: str, delta: int) -> None:
        async with self._lock:
            self._money[identifier] = self._money.get(identifier, 0) + delta
        logger.debug(f"Roster: {identifier} money {delta:+d}")

    async def track_game(self, identifier: str) -> None:
        async with self._lock:
            self._games[identifier] = self._games.get(identifier, 0) + 1

    async def save_roster(self) -> None:
        """Flush buffered changes to the database.

        Raises:
            RosterError: If the database write failed.
        """
        async with self._lock:
            identifiers = set(self._money) | set(self._games)
            if not identifiers:
                return
            rows = [
                (name, self._games.get(name, 0), self._money.get(name, 0))
                for name in sorted(identifiers)
            ]
            try:
                await db.executemany(
                    """
                    INSERT INTO players (username, games, money)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (username) DO UPDATE SET
                        games = players.games + EXCLUDED.games,
                        money = players.money + EXCLUDED.money,
                        updated_at = NOW()
                    """,
                    rows,
                )
            except (asyncpg.PostgresError, OSError, RuntimeError) as e:
                raise RosterError(f"Could not save roster: {e}") from e
            self._money.clear()
            self._games.clear()
        logger.info(f"Saved roster for {len(rows)} players")

    async def get_stats(self, identifier: str) -> Optional[Stats]:
        """Stored stats merged with changes not saved yet.

        Raises:
            RosterError: If the database read failed.
        """
        try:
            record = await db.fetchrow(
                "SELECT username, games, money FROM players WHERE username = $1",
                identifier,
            )
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            raise RosterError(f"Could not load stats for {identifier}: {e}") from e

        async with self._lock:
            pending_games = self._games.get(identifier, 0)
            pending_money = self._money.get(identifier, 0)

        if record is None:
            if identifier not in self._games and identifier not in self._money:
                return None
            return Stats(identifier, pending_games, pending_money)

        stats = Stats.from_record(record)
        stats.games += pending_games
        stats.money += pending_money
        return stats
