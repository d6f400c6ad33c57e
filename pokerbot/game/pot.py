"""Pot ledger with side pots.

The ledger only records how much each player has committed this hand and
the bet everyone has to match. Pot levels (the main pot and any side pots)
are rebuilt from those totals after every operation, capped at the
commitments of all-in players.
"""
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pokerbot.game.errors import InsufficientFundsError, PotInvariantError
from pokerbot.game.player import Player
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)

MAX_POT_LEVELS = 64


def calculate_small_blind(big_blind: int) -> int:
    """Small blind is half the big blind, rounded up."""
    return -(-big_blind // 2)


def split_amount(amount: int, ways: int) -> list[int]:
    """Split an amount as evenly as possible.

    The first ``amount % ways`` shares get one extra unit, so nothing is lost.
    """
    if ways < 1:
        raise ValueError("Cannot split a pot between zero winners")
    share, remainder = divmod(amount, ways)
    return [share + 1 if i < remainder else share for i in range(ways)]


@dataclass
class PotLevel:
    """One pot in the chain: the main pot at index 0, side pots above it."""
    floor: int
    bet: int
    contributions: dict[Player, int] = field(default_factory=dict)

    @property
    def money(self) -> int:
        return sum(self.contributions.values())

    @property
    def participants(self) -> set[Player]:
        return set(self.contributions)

    def contribution(self, player: Player) -> int:
        return self.contributions.get(player, 0)

    def owed(self, player: Player) -> int:
        return self.bet - self.contribution(player)


class Pot:
    """Tracks the money put in during a hand and which players can win it."""

    def __init__(self):
        self._committed: dict[Player, int] = {}
        self._bet = 0
        self._collected = 0
        self.levels: list[PotLevel] = [PotLevel(floor=0, bet=0)]

    def _commit(self, player: Player, amount: int) -> int:
        """Move up to ``amount`` from the player's stack into the ledger."""
        if amount < 0:
            raise PotInvariantError(f"Cannot commit a negative amount ({amount}) for {player}")
        paid = player.bet(amount)
        self._committed[player] = self._committed.get(player, 0) + paid
        self._collected += paid
        logger.debug(f"{player} put {paid} into the pot (total {self._committed[player]})")
        return paid

    def _reconcile(self) -> None:
        """Rebuild the pot levels from the players' total commitments."""
        for player, committed in self._committed.items():
            if committed < 0:
                raise PotInvariantError(f"Contribution for {player} can't be negative: {committed}")

        top = max([self._bet, *self._committed.values()])
        caps = sorted({
            committed for player, committed in self._committed.items()
            if player.is_all_in and 0 < committed < top
        })
        if len(caps) + 1 > MAX_POT_LEVELS:
            raise PotInvariantError(f"Too many pot levels: {len(caps) + 1}")

        levels = []
        floor = 0
        for ceiling in caps + [top]:
            level = PotLevel(floor=floor, bet=ceiling - floor)
            for player, committed in self._committed.items():
                share = min(committed, ceiling) - floor
                if share > 0 or (floor == 0 and share == 0):
                    level.contributions[player] = share
            levels.append(level)
            floor = ceiling

        in_levels = sum(level.money for level in levels)
        committed_total = sum(self._committed.values())
        if not in_levels == committed_total == self._collected:
            raise PotInvariantError(
                f"Pot money mismatch: levels={in_levels}, "
                f"committed={committed_total}, collected={self._collected}"
            )

        self.levels = levels
        logger.debug(
            f"Pot reconciled: bet={top}, levels={[(l.bet, l.money) for l in levels]}"
        )

    # Forced bets

    def collect_ante(self, player: Player, ante: int) -> int:
        self._bet = max(self._bet, ante)
        paid = self._commit(player, ante)
        self._reconcile()
        return paid

    def collect_small_blind(self, player: Player, big_blind: int) -> int:
        paid = self._commit(player, calculate_small_blind(big_blind))
        self._reconcile()
        return paid

    def collect_big_blind(self, player: Player, big_blind: int) -> int:
        """Big blind is a raise from nothing by the blind amount.

        The table bet goes up by the full blind even when the player can
        only post part of it and goes all-in. The small blind never counts
        towards the bet, so it can be posted before or after this.
        """
        target = self._bet + big_blind
        owed = max(0, target - self.get_total_contribution(player))
        paid = self._commit(player, owed)
        self._bet = target
        self._reconcile()
        return paid

    # Player actions

    def raise_bet(self, player: Player, amount: int) -> int:
        """Raise the bet by ``amount`` on top of what the player owes.

        A raise the stack can only partly cover commits the whole stack. An
        all-in player first calls, then raises with whatever is left.

        Args:
            player: Raising player.
            amount: Amount to raise by.

        Returns:
            How much the table bet went up.

        Raises:
            InsufficientFundsError: The stack doesn't cover more than the call.
        """
        previous_bet = self._bet
        if player.is_all_in:
            paid = self.call(player)
            excess = min(player.chips, amount - paid)
            if excess < 1:
                return 0
            self._commit(player, excess)
        else:
            owed = self.get_total_owed(player)
            if player.chips <= owed:
                raise InsufficientFundsError(str(player), player.chips, owed)
            self._commit(player, min(player.chips, amount + owed))

        self._bet = max(self._bet, self._committed[player])
        self._reconcile()
        return self._bet - previous_bet

    def all_in(self, player: Player) -> int:
        """Commit the player's whole stack. Returns how much the bet went up."""
        player.is_all_in = True
        return self.raise_bet(player, player.chips)

    def call(self, player: Player) -> int:
        """Match the current bet, or as much of it as the stack covers.

        Returns:
            Amount actually put in.
        """
        owed = max(0, min(self.get_total_owed(player), player.chips))
        paid = self._commit(player, owed)
        if player.chips == 0:
            player.is_all_in = True
        self._reconcile()
        return paid

    def check_player(self, player: Player) -> bool:
        """Register a check. Valid only if the player owes nothing or is all-in."""
        if player not in self._committed:
            self._committed[player] = 0
            self._reconcile()
        if player.is_all_in:
            return True
        return self.get_total_owed(player) == 0

    def new_turn(self) -> None:
        """Close a betting round. The bet carries over to the next street."""
        self._reconcile()

    def reset(self) -> None:
        self._committed = {}
        self._bet = 0
        self._collected = 0
        self.levels = [PotLevel(floor=0, bet=0)]

    def refund(self) -> None:
        """Give every player back what they committed and empty the pot."""
        for player, committed in self._committed.items():
            player.win_pot(committed)
        self.reset()

    def split_pot(
        self,
        winners: Sequence[Player],
        level: int = 0,
        amount: Optional[int] = None,
    ) -> list[int]:
        """Pay out a pot level between winners.

        Args:
            winners: Winners, in the order odd units are handed out.
            level: Pot level to pay out.
            amount: Money to split, defaults to the level's money.

        Returns:
            Amount paid to each winner, in order.
        """
        if amount is None:
            amount = self.levels[level].money
        shares = split_amount(amount, len(winners))
        for winner, share in zip(winners, shares):
            winner.win_pot(share)
        return shares

    # Queries

    def get_money(self, level: int = 0) -> int:
        return self.levels[level].money

    def get_total_money(self) -> int:
        return sum(level.money for level in self.levels)

    def get_current_bet(self, level: int = 0) -> int:
        return self.levels[level].bet

    def get_total_bets(self) -> int:
        return sum(level.bet for level in self.levels)

    def get_contribution(self, player: Player, level: int = 0) -> int:
        return self.levels[level].contribution(player)

    def get_total_contribution(self, player: Player) -> int:
        return self._committed.get(player, 0)

    def get_total_owed(self, player: Player) -> int:
        return self.get_total_bets() - self.get_total_contribution(player)

    def get_participants(self, level: int = 0) -> set[Player]:
        return self.levels[level].participants

    def has_side_pot(self) -> bool:
        return len(self.levels) > 1

    def player_cleared(self, player: Player) -> bool:
        """True if the player doesn't owe anything to the pot."""
        return self.get_total_owed(player) == 0

    def __repr__(self) -> str:
        return f"Pot(bet={self._bet}, levels={self.levels})"
