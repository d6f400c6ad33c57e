"""Chat command dispatch to per-channel tables."""
import asyncio
from typing import Callable, Optional

from pokerbot.config import TableConfig, config
from pokerbot.game.events import EventCallback
from pokerbot.game.player import Player
from pokerbot.game.table import Table
from pokerbot.protocol.commands import (
    COMMAND_NAMES,
    CommandError,
    ConfigCommand,
    PingCommand,
    RaiseCommand,
    parse_command,
)
from pokerbot.state.roster import Roster, RosterError
from pokerbot.utils.logger import get_logger

logger = get_logger(__name__)

# Commands that only make sense while a game is running
GAME_ACTIONS = frozenset({"call", "check", "allin", "fold", "cashout", "raise"})


class CommandHandler:
    """Routes chat lines from each channel to that channel's table.

    Every call into a table happens under the table's lock, so one table
    only ever processes one command at a time while tables in other
    channels run independently.
    """

    def __init__(
        self,
        roster: Roster,
        sink_factory: Callable[[str], EventCallback],
        prefix: Optional[str] = None,
    ):
        """Initialize the handler.

        Args:
            roster: Roster shared by all tables.
            sink_factory: Builds the event sink for a channel's table.
            prefix: Command prefix, defaults to ``COMMAND_PREFIX``.
        """
        self.roster = roster
        self._sink_factory = sink_factory
        self.prefix = prefix or config.command_prefix
        self.tables: dict[str, Table] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # channel -> user_id -> player
        self._players: dict[str, dict[str, Player]] = {}

    def open_table(self, channel: str, table_config: Optional[TableConfig] = None) -> Table:
        """Set up a table for a channel, or return the existing one."""
        if channel in self.tables:
            return self.tables[channel]
        logger.info(f"Setting up a table for {channel}")
        table = Table(self._sink_factory(channel), self.roster, table_config)
        self.tables[channel] = table
        self._locks[channel] = asyncio.Lock()
        self._players[channel] = {}
        return table

    async def close_table(self, channel: str) -> None:
        """Tear down a channel's table, settling any running game."""
        table = self.tables.get(channel)
        if table is None:
            return
        async with self._locks[channel]:
            if table.game_in_progress:
                await table.stop_game()
        logger.info(f"Removed table for {channel}")
        del self.tables[channel]
        del self._locks[channel]
        del self._players[channel]

    def _get_player(self, channel: str, user_id: str, nick: str) -> Player:
        players = self._players[channel]
        player = players.get(user_id)
        if player is None:
            logger.debug(f"Registering {user_id} as {nick} in {channel}")
            player = Player(user_id=user_id, name=nick)
            players[user_id] = player
        return player

    async def handle_message(
        self,
        channel: str,
        user_id: str,
        nick: str,
        text: str,
    ) -> Optional[str]:
        """Handle a chat line.

        Args:
            channel: Channel the line was said in.
            user_id: Stable identifier of the sender.
            nick: Sender's display name.
            text: The line itself.

        Returns:
            Reply for the channel, if any. Everything the table has to say
            goes through its event sink instead.
        """
        if channel not in self.tables:
            return None
        try:
            command = parse_command(text, self.prefix)
        except CommandError as e:
            return f"{nick}: {e}"
        if command is None:
            return None

        async with self._locks[channel]:
            return await self._dispatch(channel, user_id, nick, command)

    async def _dispatch(self, channel: str, user_id: str, nick: str, command) -> Optional[str]:
        table = self.tables[channel]
        name = command.name

        if name in GAME_ACTIONS and not table.game_in_progress:
            return None

        if isinstance(command, PingCommand):
            return f"{nick}: {command.text}"

        if isinstance(command, RaiseCommand):
            await table.raise_bet(self._get_player(channel, user_id, nick), command.amount)
            return None

        if isinstance(command, ConfigCommand):
            if command.option is None:
                return "Specify an option to configure, followed by its new value."
            await table.configure(command.option, command.value)
            return None

        player_actions = {
            "join": table.register_player,
            "unjoin": table.unjoin,
            "buyin": table.buyin,
            "call": table.call,
            "check": table.check,
            "allin": table.all_in,
            "fold": table.fold,
            "cashout": table.cashout,
        }
        if name in player_actions:
            await player_actions[name](self._get_player(channel, user_id, nick))
            return None

        if name == "pot":
            await table.show_pot()
        elif name == "current":
            await table.show_current()
        elif name == "players":
            return self._describe_players(table)
        elif name == "activity":
            if table.last_activity is None:
                return "There hasn't been any activity on this table."
            return f"Last activity: {table.last_activity:%Y-%m-%d %H:%M:%S} UTC"
        elif name == "stats":
            return await self._stats(user_id, nick)
        elif name == "clear":
            if not table.clear_players():
                return f"{nick}: A game is already in progress."
            self._players[channel].clear()
            return "Players list cleared."
        elif name == "start":
            if table.game_in_progress:
                return None
            if len(table.players) < 2:
                return f"{nick}: Need at least 2 players to join before starting."
            await table.start_game()
        elif name == "stop":
            if table.game_in_progress:
                await table.stop_game()
                self._players[channel].clear()
        elif name == "help":
            commands = " ".join(f"{self.prefix}{c}" for c in sorted(COMMAND_NAMES))
            return f"Commands: {commands}"
        return None

    @staticmethod
    def _describe_players(table: Table) -> str:
        if not table.players:
            return "No joined players."
        if table.game_in_progress:
            stacks = ", ".join(f"{p} ${p.chips}" for p in table.players)
            return f"Now playing: {stacks}."
        names = ", ".join(str(p) for p in table.players)
        return f"Joined players: {names}."

    async def _stats(self, user_id: str, nick: str) -> str:
        try:
            stats = await self.roster.get_stats(user_id)
        except RosterError:
            logger.exception(f"Could not load stats for {user_id}")
            return "No stats available at this time"
        if stats is None:
            return f"No stats tracked for {nick}"
        return f"{nick}: {stats.games} games played, net winnings {stats.money}"

    def player_renamed(self, user_id: str, nick: str) -> None:
        """Follow a nick change in every channel."""
        for players in self._players.values():
            if user_id in players:
                logger.debug(f"{user_id} is now known as {nick}")
                players[user_id].name = nick

    async def player_left(self, channel: str, user_id: str) -> None:
        """The user parted or was kicked from one channel."""
        player = self._players.get(channel, {}).get(user_id)
        if player is None:
            return
        async with self._locks[channel]:
            await self.tables[channel].player_left(player)

    async def player_quit(self, user_id: str) -> None:
        """The user disconnected: leave every table."""
        for channel in list(self.tables):
            await self.player_left(channel, user_id)
