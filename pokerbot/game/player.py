"""Player model."""
from dataclasses import dataclass, field

from pokerbot.game.deck import Card


@dataclass(eq=False)
class Player:
    """A player seated at a table.

    Identity is the ``user_id``, which never changes during a session;
    ``name`` is only for display and may follow nick changes.
    """

    user_id: str
    name: str = ""
    chips: int = 0
    hole_cards: list[Card] = field(default_factory=list)
    is_folded: bool = False
    is_all_in: bool = False
    is_cashed_out: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.user_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Player):
            return NotImplemented
        return self.user_id == other.user_id

    def __hash__(self) -> int:
        return hash(self.user_id)

    def __str__(self) -> str:
        return self.name

    def reset_for_new_hand(self) -> None:
        """Reset per-hand state."""
        self.hole_cards = []
        self.is_folded = False
        self.is_all_in = False

    def bet(self, amount: int) -> int:
        """Move chips from the stack, going all-in if the stack runs out.

        Args:
            amount: Amount to bet.

        Returns:
            Actual amount bet (less than ``amount`` if the stack ran out,
            0 for a cashed-out player).
        """
        if not self.is_active:
            return 0
        actual_bet = min(amount, self.chips)
        self.chips -= actual_bet

        if self.chips == 0:
            self.is_all_in = True

        return actual_bet

    def fold(self) -> None:
        """Fold the hand."""
        self.is_folded = True

    def cash_out(self) -> None:
        """Leave the game; the player folds and stops being dealt in."""
        self.fold()
        self.is_cashed_out = True

    def receive_cards(self, cards: list[Card]) -> None:
        """Receive hole cards."""
        self.hole_cards = cards

    def win_pot(self, amount: int) -> None:
        """Win chips from the pot. Cashed-out players collect nothing."""
        if not self.is_active:
            return
        self.chips += amount

    @property
    def is_active(self) -> bool:
        """Still part of the game (has not cashed out)."""
        return not self.is_cashed_out

    @property
    def is_broke(self) -> bool:
        return self.chips == 0

    @property
    def in_hand(self) -> bool:
        """Still contesting the current hand."""
        return self.is_active and not self.is_folded

    @property
    def can_act(self) -> bool:
        """Check if player can take a voluntary action."""
        return self.in_hand and not self.is_all_in
