"""Cards and the per-hand deck."""
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Suit(str, Enum):
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"

    def __str__(self) -> str:
        return self.value


class Rank(int, Enum):
    """Card ranks, aces high (14)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        """Short name as shown in chat: 2-10, J, Q, K, A."""
        return _FACES.get(self.value, str(self.value))

    def __str__(self) -> str:
        return self.symbol


_FACES = {11: "J", 12: "Q", 13: "K", 14: "A"}

# Accepted spellings of each rank when parsing, "T" included
_PARSE_RANKS = {rank.symbol: rank for rank in Rank}
_PARSE_RANKS["T"] = Rank.TEN


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return str(self)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse a card such as ``Ah``, ``10s`` or ``Tc``.

        Raises:
            ValueError: If the rank or suit is not recognised.
        """
        rank_str, suit_str = s[:-1].upper(), s[-1:].lower()
        if rank_str not in _PARSE_RANKS:
            raise ValueError(f"Unknown rank in card {s!r}")
        return cls(rank=_PARSE_RANKS[rank_str], suit=Suit(suit_str))


def full_deck() -> list[Card]:
    """All 52 cards, suit by suit."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


class Deck:
    """Cards left to deal in the current hand.

    The deck starts empty; ``reset()`` refills and shuffles it at the start
    of every hand. Dealt cards never come back until the next reset.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._cards: list[Card] = []

    def reset(self) -> None:
        self._cards = full_deck()
        self._rng.shuffle(self._cards)

    def clear(self) -> None:
        self._cards = []

    def deal(self, count: int = 1) -> list[Card]:
        """Take ``count`` cards off the top.

        Raises:
            ValueError: If fewer than ``count`` cards are left.
        """
        if count > len(self._cards):
            raise ValueError(f"Cannot deal {count} cards, only {len(self._cards)} remain")
        dealt = self._cards[:count]
        del self._cards[:count]
        return dealt

    def deal_one(self) -> Card:
        return self.deal(1)[0]

    @property
    def remaining(self) -> int:
        return len(self._cards)

    def __len__(self) -> int:
        return self.remaining
