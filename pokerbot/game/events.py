"""Pydantic schemas for events the table emits.

The table never formats text for a chat channel; it emits one of these
models and whoever consumes the stream renders it.
"""
from typing import Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel


class Announcement(BaseModel):
    """Free-form notice for the channel."""
    type: Literal["announcement"] = "announcement"
    message: str


class PlayerCalled(BaseModel):
    type: Literal["player_called"] = "player_called"
    player: str
    amount: int


class PlayerRaised(BaseModel):
    type: Literal["player_raised"] = "player_raised"
    player: str
    amount: int


class PlayerChecked(BaseModel):
    type: Literal["player_checked"] = "player_checked"
    player: str


class PlayerFolded(BaseModel):
    type: Literal["player_folded"] = "player_folded"
    player: str


class PlayerCashedOut(BaseModel):
    """Player left the game with ``money`` chips."""
    type: Literal["player_cashed_out"] = "player_cashed_out"
    player: str
    money: int


class PlayerAllIn(BaseModel):
    type: Literal["player_all_in"] = "player_all_in"
    player: str


class TableUpdated(BaseModel):
    """Board, pot and whose turn it is (None while nobody can act)."""
    type: Literal["table_updated"] = "table_updated"
    board: list[str]
    pot: int
    current_player: Optional[str] = None


class MustCallRaise(BaseModel):
    """Player tried to check while owing money."""
    type: Literal["must_call_raise"] = "must_call_raise"
    player: str
    owed: int


class CannotRaise(BaseModel):
    """Player tried to raise more than their stack covers."""
    type: Literal["cannot_raise"] = "cannot_raise"
    player: str
    money: int


class PlayerCards(BaseModel):
    """Private hole card reveal, plus the decoy card when spy cards are on."""
    type: Literal["player_cards"] = "player_cards"
    player: str
    cards: list[str]
    spy_card: Optional[str] = None


class PlayersListed(BaseModel):
    """Stacks of everyone dealt into the hand, in seat order."""
    type: Literal["players_listed"] = "players_listed"
    stacks: dict[str, int]


class HandsRevealed(BaseModel):
    """Showdown reveal of the hands still in contention."""
    type: Literal["hands_revealed"] = "hands_revealed"
    hands: dict[str, list[str]]


class WinnerDeclared(BaseModel):
    """Single winner of a pot. ``hand`` is None when everyone else folded."""
    type: Literal["winner_declared"] = "winner_declared"
    player: str
    amount: int
    hand: Optional[str] = None
    hand_cards: list[str] = []


class SplitPotDeclared(BaseModel):
    type: Literal["split_pot_declared"] = "split_pot_declared"
    players: list[str]
    hand: str
    amount: int


class AnteCollected(BaseModel):
    type: Literal["ante_collected"] = "ante_collected"
    ante: int


class BlindsCollected(BaseModel):
    type: Literal["blinds_collected"] = "blinds_collected"
    big_blind_player: str
    big_blind: int
    small_blind_player: str
    small_blind: int


class PlayerTurn(BaseModel):
    """It is ``player``'s turn; ``owed`` is what they need to call."""
    type: Literal["player_turn"] = "player_turn"
    player: str
    chips: int
    owed: int


class GameEnded(BaseModel):
    type: Literal["game_ended"] = "game_ended"
    players: list[str]


# Union of all table events
TableEvent = Union[
    Announcement,
    PlayerCalled,
    PlayerRaised,
    PlayerChecked,
    PlayerFolded,
    PlayerCashedOut,
    PlayerAllIn,
    TableUpdated,
    MustCallRaise,
    CannotRaise,
    PlayerCards,
    PlayersListed,
    HandsRevealed,
    WinnerDeclared,
    SplitPotDeclared,
    AnteCollected,
    BlindsCollected,
    PlayerTurn,
    GameEnded,
]

EventCallback = Callable[[TableEvent], Awaitable[None]]
