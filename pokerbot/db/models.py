"""Database schema and initialization."""
from pokerbot.db.connection import db
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = """
-- Lifetime stats per player, keyed by chat identity
CREATE TABLE IF NOT EXISTS players (
    username VARCHAR(100) PRIMARY KEY,
    games INTEGER NOT NULL DEFAULT 0,
    money INTEGER NOT NULL DEFAULT 0,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


async def init_db() -> None:
    """Create the roster schema if it doesn't exist."""
    logger.info("Initializing database schema...")
    await db.execute(SCHEMA)
    logger.info("Database schema initialized")
