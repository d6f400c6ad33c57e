"""Persistence ports used by the game."""
from .roster import PostgresRoster, Roster, RosterError, Stats

__all__ = ["PostgresRoster", "Roster", "RosterError", "Stats"]
