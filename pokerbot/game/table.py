"""Table state machine for Texas Hold'em."""
import random
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from pokerbot.config import TableConfig
from pokerbot.game.deck import Card, Deck
from pokerbot.game.errors import InsufficientFundsError, TableInvariantError
from pokerbot.game.events import (
    AnteCollected,
    Announcement,
    BlindsCollected,
    CannotRaise,
    EventCallback,
    GameEnded,
    HandsRevealed,
    MustCallRaise,
    PlayerAllIn,
    PlayerCalled,
    PlayerCards,
    PlayerCashedOut,
    PlayerChecked,
    PlayerFolded,
    PlayerRaised,
    PlayersListed,
    PlayerTurn,
    SplitPotDeclared,
    TableEvent,
    TableUpdated,
    WinnerDeclared,
)
from pokerbot.game.hand_eval import HandValue, best_hand, rank_hands
from pokerbot.game.player import Player
from pokerbot.game.pot import Pot
from pokerbot.state.roster import Roster, RosterError
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)

# chat option name -> (TableConfig field, label used in announcements)
CONFIG_OPTIONS = {
    "bigblind": ("big_blind", "big blind"),
    "ante": ("ante", "ante"),
    "startstash": ("start_stash", "starting stash"),
    "spycards": ("spy_cards", "spycards"),
}


def _cards(cards: list[Card]) -> list[str]:
    return [str(card) for card in cards]


class Table:
    """A poker table running one game at a time.

    Players act in join order. ``turn_index`` points at the player to act,
    ``last_index`` at the player whose action closes the betting round, and
    ``start_player`` at the first player to act in the hand (it rotates by
    one seat each hand). All money goes through the ``Pot``.

    Every public coroutine must be awaited by one caller at a time.
    """

    def __init__(
        self,
        sink: EventCallback,
        roster: Roster,
        config: Optional[TableConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize an empty table.

        Args:
            sink: Async callable receiving every table event.
            roster: Persistence for lifetime player stats.
            config: Table knobs, defaults to the process-wide defaults.
            rng: Random source for shuffling and spy cards.
        """
        self._sink = sink
        self.roster = roster
        self.config = config or TableConfig.from_defaults()
        self._rng = rng or random.Random()

        self.players: list[Player] = []
        self.buyin_queue: list[Player] = []
        self.deck = Deck(self._rng)
        self.board: list[Card] = []
        self.pot = Pot()

        self.game_in_progress = False
        self.turn_index = 0
        self.last_index = 0
        self.start_player = 0
        self.last_activity: Optional[datetime] = None

    async def _emit(self, event: TableEvent) -> None:
        await self._sink(event)

    async def _announce(self, message: str) -> None:
        await self._emit(Announcement(message=message))

    def _touch(self) -> None:
        self.last_activity = datetime.now(timezone.utc)

    # Turn order

    @property
    def current_player(self) -> Optional[Player]:
        if not self.game_in_progress or not self.players:
            return None
        return self.players[self.turn_index]

    def _is_current(self, player: Player) -> bool:
        return player is not None and player == self.current_player

    def _wrap(self, index: int) -> int:
        return index % len(self.players)

    def _seek(self, index: int, step: int) -> int:
        """First seat at or after ``index`` (moving by ``step``) still in the hand."""
        if not any(p.in_hand for p in self.players):
            raise TableInvariantError("All players are folded.")
        index = self._wrap(index)
        while not self.players[index].in_hand:
            index = self._wrap(index + step)
        return index

    def _last_playing(self, index: int) -> int:
        return self._seek(index, -1)

    def _next_playing(self, index: int) -> int:
        return self._seek(index + 1, 1)

    def _everyone_all_in(self) -> bool:
        return all(p.is_all_in for p in self.players if p.in_hand)

    def _players_able_to_act(self) -> int:
        return sum(1 for p in self.players if p.can_act)

    def get_player(self, user_id: str) -> Optional[Player]:
        for player in self.players:
            if player.user_id == user_id:
                return player
        return None

    # Player management

    def _add_player(self, player: Player) -> bool:
        if player in self.players:
            return False
        player.chips = self.config.start_stash
        player.is_cashed_out = False
        player.reset_for_new_hand()
        self.players.append(player)
        return True

    async def register_player(self, player: Player) -> bool:
        """Join before the game starts."""
        if self.game_in_progress:
            await self._announce(
                "A game is already in progress! Use the buyin command if you still want to join"
            )
            return False
        if not self._add_player(player):
            await self._announce(f"{player} has already joined.")
            return False
        logger.info(f"{player.user_id} joined the table")
        await self._announce(f"{player} has joined the game.")
        return True

    async def buyin(self, player: Player) -> bool:
        """Join a running game at the next hand."""
        if not self.game_in_progress:
            await self._announce(f"{player}: Game hasn't started yet, putting you up for the game")
            return await self.register_player(player)
        if player in self.players and player.is_active:
            await self._announce(f"{player}: You're already in the game.")
            return False
        if player in self.buyin_queue:
            await self._announce(f"{player}: You've already bought in")
            return False
        self.buyin_queue.append(player)
        await self._announce(f"{player} has bought in the game, will join on next hand.")
        return True

    async def unjoin(self, player: Player) -> bool:
        if self.game_in_progress:
            if player in self.buyin_queue:
                self.buyin_queue.remove(player)
                await self._announce(f"{player}: Your buyin was nulled.")
            elif player in self.players:
                await self._announce(f"{player}: Cannot unjoin game in progress. Use cashout command.")
            else:
                await self._announce(f"{player}: You are not part of the active game.")
            return False

        if player not in self.players:
            await self._announce(f"{player}: You never joined.")
            return False
        self.players.remove(player)
        logger.info(f"{player.user_id} unjoined")
        await self._announce(f"{player}: You have unjoined.")
        return True

    async def player_left(self, player: Player) -> None:
        """The player disconnected or left the channel."""
        if player in self.buyin_queue:
            self.buyin_queue.remove(player)
        if player not in self.players:
            return
        if self.game_in_progress:
            await self.cashout(player)
        else:
            await self.unjoin(player)

    def clear_players(self) -> bool:
        if self.game_in_progress:
            return False
        self.players.clear()
        self.buyin_queue.clear()
        return True

    # Game lifecycle

    async def start_game(self) -> bool:
        if self.game_in_progress:
            await self._announce("A game is already in progress.")
            return False
        if len(self.players) < 2:
            await self._announce("Need at least two players to start a game.")
            return False

        names = ", ".join(str(p) for p in self.players)
        await self._announce(f"Starting game with: {names}.")
        logger.info(f"Starting game with {len(self.players)} players")
        for player in self.players:
            await self.roster.track_game(player.user_id)

        self.game_in_progress = True
        self.start_player = 0
        await self._setup_hand()
        return True

    async def stop_game(self) -> None:
        """End the game and settle every active player's winnings or losses."""
        logger.info("Stopping game")
        self.game_in_progress = False

        # Cashed-out players are owed what they left in an unfinished hand
        for player in self.players:
            committed = self.pot.get_total_contribution(player)
            if not player.is_active and committed > 0:
                await self.roster.modify_money(player.user_id, committed)
        self.pot.refund()

        for player in self.players:
            if player.is_active:
                await self.roster.modify_money(
                    player.user_id, player.chips - self.config.start_stash
                )

        old_players = [p.user_id for p in self.players]
        self.players.clear()
        self.buyin_queue.clear()
        self.deck.clear()
        self.board.clear()
        self.turn_index = self.last_index = self.start_player = 0

        await self._emit(GameEnded(players=old_players))
        await self._save_roster()

    async def _save_roster(self) -> None:
        try:
            await self.roster.save_roster()
        except (RosterError, OSError):
            logger.exception("Failed to save roster")

    def _increment_start_player(self) -> None:
        self.start_player = self._wrap(self.start_player + 1) if self.players else 0

    async def _setup_hand(self) -> None:
        for player in self.players:
            if player.is_active and player.is_broke:
                player.cash_out()
                await self.roster.modify_money(player.user_id, -self.config.start_stash)
                logger.info(f"{player.user_id} is broke and was cashed out")
                await self._announce(f"{player} is out of money.")

        self.players = [p for p in self.players if p.is_active]

        for player in self.buyin_queue:
            if self._add_player(player):
                await self.roster.track_game(player.user_id)
                logger.info(f"{player.user_id} bought in")
        self.buyin_queue.clear()

        await self._save_roster()

        if len(self.players) < 2:
            logger.info("Game ended, not enough players")
            await self._announce("Not enough players left to continue: game ended.")
            await self.stop_game()
            return

        self.start_player = self._wrap(self.start_player)
        await self._announce("Starting new hand...")

        for player in self.players:
            player.reset_for_new_hand()
        self.deck.reset()
        self.board.clear()
        self.turn_index = self.start_player
        self.last_index = self._last_playing(self.start_player - 1)
        self.pot.reset()

        await self._emit(PlayersListed(stacks={p.user_id: p.chips for p in self.players}))
        await self._deal()
        await self._collect_forced_bets()

        current = self.players[self.turn_index]
        if current.can_act:
            await self._send_status(current)
        else:
            await self._next_turn()

    async def _deal(self) -> None:
        for player in self.players:
            player.receive_cards(self.deck.deal(2))

        spy_cards = self.config.spy_cards
        phony: Optional[Card] = None
        unlucky: Optional[Player] = None
        if spy_cards:
            phony = self.deck.deal_one()
            unlucky = self._rng.choice(self.players)

        for player in self.players:
            spy_card = None
            if spy_cards:
                if player == unlucky:
                    spy_card = phony
                else:
                    other = self._rng.choice([p for p in self.players if p != player])
                    spy_card = self._rng.choice(other.hole_cards)
            await self._emit(PlayerCards(
                player=player.user_id,
                cards=_cards(player.hole_cards),
                spy_card=str(spy_card) if spy_card else None,
            ))

    async def _collect_forced_bets(self) -> None:
        ante = self.config.ante
        if ante > 0:
            await self._emit(AnteCollected(ante=ante))
            for player in self.players:
                self.pot.collect_ante(player, ante)

        big_blind = self.config.big_blind
        if big_blind > 0:
            small_blind_player = self.players[self.turn_index]
            big_blind_player = self.players[self._wrap(self.turn_index + 1)]
            small_blind = self.pot.collect_small_blind(small_blind_player, big_blind)
            posted = self.pot.collect_big_blind(big_blind_player, big_blind)
            await self._emit(BlindsCollected(
                big_blind_player=big_blind_player.user_id,
                big_blind=posted,
                small_blind_player=small_blind_player.user_id,
                small_blind=small_blind,
            ))

    def _draw(self) -> None:
        if not self.board:
            self.board.extend(self.deck.deal(3))
        elif len(self.board) < 5:
            self.board.append(self.deck.deal_one())

    async def _send_status(self, player: Player) -> None:
        await self._emit(TableUpdated(
            board=_cards(self.board),
            pot=self.pot.get_total_money(),
            current_player=player.user_id,
        ))
        await self._emit(PlayerTurn(
            player=player.user_id,
            chips=player.chips,
            owed=self.pot.get_total_owed(player),
        ))

    async def _next_turn(self) -> None:
        """Move to the next player, closing betting rounds as they complete."""
        while True:
            self.pot.new_turn()
            player = self.players[self.turn_index]
            round_over = self._everyone_all_in() or (
                self.turn_index == self.last_index
                and (player.is_folded or player.is_broke or self.pot.player_cleared(player))
            )

            if round_over:
                if len(self.board) == 5 or self._players_able_to_act() < 2:
                    await self._showdown()
                    return
                self.turn_index = self._wrap(self.start_player - 1)
                self.last_index = self._last_playing(self.start_player - 1)
                self._draw()

            self.turn_index = self._next_playing(self.turn_index)
            next_player = self.players[self.turn_index]

            if self._everyone_all_in():
                await self._emit(TableUpdated(
                    board=_cards(self.board), pot=self.pot.get_total_money()
                ))
                continue
            if next_player.is_all_in:
                await self._announce(f"{next_player} is all-in, next player...")
                continue

            await self._send_status(next_player)
            return

    async def _reveal_hands(self, players: list[Player]) -> None:
        await self._emit(HandsRevealed(
            hands={p.user_id: _cards(p.hole_cards) for p in players if p.in_hand}
        ))

    def _turn_order(self) -> list[Player]:
        """Players starting from the first to act this hand."""
        count = len(self.players)
        return [self.players[(self.start_player + i) % count] for i in range(count)]

    async def _showdown(self) -> None:
        """Run out the board and pay every pot level to its best live hand."""
        if len(self.board) < 5:
            while len(self.board) < 5:
                self._draw()
            await self._emit(TableUpdated(
                board=_cards(self.board), pot=self.pot.get_total_money()
            ))

        levels = self.pot.levels
        order = self._turn_order()
        hands: dict[Player, HandValue] = {
            p: best_hand(p.hole_cards[0], p.hole_cards[1], self.board)
            for p in order if p.in_hand
        }
        contenders = [
            [p for p in order if p in level.contributions and p in hands]
            for level in levels
        ]
        if not contenders[0]:
            raise TableInvariantError("Nobody left to win the main pot.")

        # Money nobody alive can win drops to the level below.
        amounts = [level.money for level in levels]
        for i in range(len(levels) - 1, 0, -1):
            if not contenders[i]:
                amounts[i - 1] += amounts[i]
                amounts[i] = 0

        for i, level in enumerate(levels):
            if not contenders[i]:
                continue
            if i > 0:
                await self._announce("Checking for sidepot winnings...")

            ranked = rank_hands([(p, hands[p]) for p in contenders[i]])
            winners = ranked[0]
            winning_hand = hands[winners[0]]
            await self._reveal_hands(contenders[i])

            amount = amounts[i]
            if len(winners) == 1:
                winner = winners[0]
                logger.info(f"{winner.user_id} wins {amount} with {winning_hand.description}")
                await self._emit(WinnerDeclared(
                    player=winner.user_id,
                    amount=amount,
                    hand=winning_hand.description,
                    hand_cards=_cards(winning_hand.cards),
                ))
                winner.win_pot(amount)
            else:
                logger.info(f"Split pot of {amount} between {[p.user_id for p in winners]}")
                await self._emit(SplitPotDeclared(
                    players=[p.user_id for p in winners],
                    hand=winning_hand.hand_type,
                    amount=amount,
                ))
                self.pot.split_pot(winners, level=i, amount=amount)

        self.pot.reset()
        self._increment_start_player()
        await self._setup_hand()

    async def _check_for_win_by_fold(self) -> bool:
        """End the hand if only one player is left in it."""
        live = [p for p in self.players if p.in_hand]
        if len(live) != 1:
            return False

        winner = live[0]
        total = self.pot.get_total_money()
        logger.info(f"{winner.user_id} wins {total}, everyone else folded")
        await self._emit(WinnerDeclared(player=winner.user_id, amount=total))
        winner.win_pot(total)
        self.pot.reset()
        self._increment_start_player()
        await self._setup_hand()
        return True

    # Player actions. Each returns False and does nothing unless it is the
    # player's turn.

    async def call(self, player: Player) -> bool:
        if not self._is_current(player):
            return False
        self._touch()
        amount = self.pot.call(player)
        await self._emit(PlayerCalled(player=player.user_id, amount=amount))
        if self._everyone_all_in():
            await self._reveal_hands(self.players)
        await self._next_turn()
        return True

    async def check(self, player: Player) -> bool:
        """Check, which is only allowed when the player owes nothing."""
        if not self._is_current(player):
            return False
        self._touch()

        if not self.pot.check_player(player):
            owed = self.pot.get_total_owed(player)
            logger.debug(f"{player.user_id} cannot check, owes {owed}")
            await self._emit(MustCallRaise(player=player.user_id, owed=owed))
            return False

        await self._emit(PlayerChecked(player=player.user_id))
        await self._next_turn()
        return True

    async def raise_bet(self, player: Player, amount: int) -> bool:
        """Raise by ``amount`` on top of what the player owes.

        Returns:
            True if the raise went through. A raise the stack can't cover
            emits ``CannotRaise`` and leaves the turn with the player.
        """
        if not self._is_current(player):
            return False
        self._touch()

        if amount < 1:
            await self._announce(f"{player}: Can only raise by a positive amount.")
            return False

        try:
            raised = self.pot.raise_bet(player, amount)
        except InsufficientFundsError as e:
            logger.debug(str(e))
            await self._emit(CannotRaise(player=player.user_id, money=player.chips))
            return False

        await self._emit(PlayerRaised(player=player.user_id, amount=raised))
        self.last_index = self._last_playing(self.turn_index - 1)
        if self._everyone_all_in():
            await self._reveal_hands(self.players)
        await self._next_turn()
        return True

    async def all_in(self, player: Player) -> bool:
        if not self._is_current(player):
            return False
        self._touch()

        raised = self.pot.all_in(player)
        await self._emit(PlayerAllIn(player=player.user_id))
        if raised > 0:
            self.last_index = self._last_playing(self.turn_index - 1)
        if self._everyone_all_in():
            await self._reveal_hands(self.players)
        await self._next_turn()
        return True

    async def fold(self, player: Player) -> bool:
        if not self._is_current(player):
            return False
        self._touch()
        player.fold()
        await self._emit(PlayerFolded(player=player.user_id))
        if not await self._check_for_win_by_fold():
            await self._next_turn()
        return True

    async def cashout(self, player: Player) -> bool:
        """Leave the running game, keeping the current stack.

        Money already in the pot stays there. Can be done out of turn.
        """
        if not self.game_in_progress or player not in self.players or not player.is_active:
            return False
        self._touch()
        was_current = self._is_current(player)
        seat = self.players.index(player)

        player.cash_out()
        logger.info(f"{player.user_id} cashed out with {player.chips}")
        await self._emit(PlayerCashedOut(player=player.user_id, money=player.chips))
        await self.roster.modify_money(player.user_id, player.chips - self.config.start_stash)

        if await self._check_for_win_by_fold():
            return True
        if was_current:
            await self._next_turn()
        elif seat == self.last_index:
            self.last_index = self._last_playing(seat - 1)
        return True

    # Information

    async def show_pot(self) -> None:
        parts = [f"Main pot: {self.pot.get_money(0)}"]
        parts += [f"Side pot: {level.money}" for level in self.pot.levels[1:]]
        await self._announce(", ".join(parts))

    async def show_current(self) -> None:
        player = self.current_player
        if player is None:
            await self._announce("Not currently playing.")
            return
        await self._emit(TableUpdated(
            board=_cards(self.board),
            pot=self.pot.get_total_money(),
            current_player=player.user_id,
        ))
        await self._announce(f"{player} has ${player.chips}")

    async def configure(self, option: str, value: Optional[str] = None) -> bool:
        """Review (``value`` is None) or change a table option.

        Returns:
            True if the option was changed.
        """
        option = option.lower()
        if option not in CONFIG_OPTIONS:
            await self._announce(f"Unrecognized option: {option}")
            return False
        field_name, label = CONFIG_OPTIONS[option]

        if value is None:
            await self._announce(self._describe_option(option))
            return False

        if self.game_in_progress:
            await self._announce("Can only change table configuration when a game is not in progress.")
            return False

        try:
            setattr(self.config, field_name, value)
        except ValidationError:
            await self._announce(f"Invalid value for {option}: {value}")
            return False

        new_value = getattr(self.config, field_name)
        logger.info(f"Table option {field_name} set to {new_value}")
        if option == "spycards":
            await self._announce(f"Spycards enabled: {new_value}")
        else:
            await self._announce(f"Changed {label} to {new_value}.")
        return True

    def _describe_option(self, option: str) -> str:
        if option == "bigblind":
            if self.config.big_blind < 1:
                return "Blinds are disabled on this table."
            return f"The big blind is currently set to {self.config.big_blind}."
        if option == "ante":
            if self.config.ante < 1:
                return "Antes are disabled on this table."
            return f"The ante is currently set to {self.config.ante}."
        if option == "startstash":
            return f"The starting stash is currently set to {self.config.start_stash}."
        state = "enabled" if self.config.spy_cards else "disabled"
        return f"Spycards are currently {state}."
