"""Engine exceptions.

User mistakes surface as ``ValueError`` subclasses and are turned into
rejections by the table. Accounting and turn-order violations are
``RuntimeError`` subclasses and are never caught by the engine.
"""


class PokerError(Exception):
    """Base class for engine errors."""
    pass


class InsufficientFundsError(PokerError, ValueError):
    """A raise the player's stack cannot cover."""

    def __init__(self, player: str, chips: int, owed: int):
        super().__init__(f"{player} has {chips} but owes {owed}, cannot raise")
        self.player = player
        self.chips = chips
        self.owed = owed


class PotInvariantError(PokerError, RuntimeError):
    """Pot accounting reached an impossible state."""
    pass


class TableInvariantError(PokerError, RuntimeError):
    """Turn order reached an impossible state."""
    pass
