"""Game engine module."""
from .deck import Deck, Card, Suit, Rank
from .player import Player
from .hand_eval import evaluate_hand, best_hand, HandRank, HandValue
from .pot import Pot, PotLevel, calculate_small_blind
from .table import Table
from .errors import PokerError, InsufficientFundsError, PotInvariantError, TableInvariantError

__all__ = [
    "Deck",
    "Card",
    "Suit",
    "Rank",
    "Player",
    "evaluate_hand",
    "best_hand",
    "HandRank",
    "HandValue",
    "Pot",
    "PotLevel",
    "calculate_small_blind",
    "Table",
    "PokerError",
    "InsufficientFundsError",
    "PotInvariantError",
    "TableInvariantError",
]
