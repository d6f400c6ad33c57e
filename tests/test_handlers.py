"""Tests for chat command dispatch."""
from unittest.mock import AsyncMock

import pytest

from pokerbot.config import TableConfig
from pokerbot.game.events import Announcement, PlayerCalled
from pokerbot.protocol.handlers import CommandHandler
from pokerbot.state.roster import RosterError, Stats


class Channels:
    """Collects the events of every channel's table."""

    def __init__(self):
        self.events: dict[str, list] = {}

    def sink_for(self, channel: str):
        events = self.events.setdefault(channel, [])

        async def sink(event):
            events.append(event)
        return sink

    def messages(self, channel: str) -> list[str]:
        return [e.message for e in self.events[channel] if isinstance(e, Announcement)]


@pytest.fixture
def channels():
    return Channels()


@pytest.fixture
def handler(channels):
    handler = CommandHandler(AsyncMock(), channels.sink_for, prefix="!")
    handler.open_table("#poker", TableConfig(big_blind=5, ante=0, start_stash=200))
    return handler


async def say(handler, nick: str, text: str, channel: str = "#poker"):
    return await handler.handle_message(channel, f"id-{nick}", nick, text)


class TestDispatch:
    """Test routing commands to the table."""

    @pytest.mark.asyncio
    async def test_unknown_channel_and_chatter_ignored(self, handler):
        assert await say(handler, "alice", "!join", channel="#other") is None
        assert await say(handler, "alice", "good luck all") is None

    @pytest.mark.asyncio
    async def test_ping(self, handler):
        assert await say(handler, "alice", "!ping") == "alice: !ping"

    @pytest.mark.asyncio
    async def test_join_and_players(self, handler, channels):
        assert await say(handler, "alice", "!players") == "No joined players."
        await say(handler, "alice", "!join")
        await say(handler, "bob", "!join")

        assert await say(handler, "alice", "!players") == "Joined players: alice, bob."
        assert "alice has joined the game." in channels.messages("#poker")

    @pytest.mark.asyncio
    async def test_start_needs_two_players(self, handler):
        await say(handler, "alice", "!join")
        reply = await say(handler, "alice", "!start")
        assert reply == "alice: Need at least 2 players to join before starting."

    @pytest.mark.asyncio
    async def test_play_a_hand(self, handler, channels):
        await say(handler, "alice", "!join")
        await say(handler, "bob", "!join")
        await say(handler, "alice", "!start")
        table = handler.tables["#poker"]

        assert table.game_in_progress
        assert await say(handler, "alice", "!players") == "Now playing: alice $197, bob $195."

        await say(handler, "alice", "!call")
        called = [e for e in channels.events["#poker"] if isinstance(e, PlayerCalled)]
        assert called[-1].player == "id-alice"
        assert table.current_player.user_id == "id-bob"

    @pytest.mark.asyncio
    async def test_actions_ignored_without_game(self, handler, channels):
        await say(handler, "alice", "!join")
        before = len(channels.events["#poker"])

        assert await say(handler, "alice", "!call") is None
        assert await say(handler, "alice", "!raise 10") is None
        assert len(channels.events["#poker"]) == before

    @pytest.mark.asyncio
    async def test_raise_errors_are_replies(self, handler):
        assert await say(handler, "alice", "!raise") == "alice: Specify an amount to raise by."
        assert await say(handler, "alice", "!raise x") == "alice: Malformed number: x."

    @pytest.mark.asyncio
    async def test_config(self, handler, channels):
        reply = await say(handler, "alice", "!config")
        assert reply == "Specify an option to configure, followed by its new value."

        await say(handler, "alice", "!config ante 5")
        assert handler.tables["#poker"].config.ante == 5
        assert channels.messages("#poker")[-1] == "Changed ante to 5."

    @pytest.mark.asyncio
    async def test_stop_and_clear(self, handler):
        await say(handler, "alice", "!join")
        await say(handler, "bob", "!join")
        await say(handler, "alice", "!start")

        assert await say(handler, "alice", "!clear") == "alice: A game is already in progress."
        await say(handler, "alice", "!stop")
        assert not handler.tables["#poker"].game_in_progress

        await say(handler, "alice", "!join")
        assert await say(handler, "alice", "!clear") == "Players list cleared."

    @pytest.mark.asyncio
    async def test_activity(self, handler):
        reply = await say(handler, "alice", "!activity")
        assert reply == "There hasn't been any activity on this table."

        await say(handler, "alice", "!join")
        await say(handler, "bob", "!join")
        await say(handler, "alice", "!start")
        await say(handler, "alice", "!call")
        assert (await say(handler, "alice", "!activity")).startswith("Last activity: ")

    @pytest.mark.asyncio
    async def test_help(self, handler):
        reply = await say(handler, "alice", "!help")
        assert "!raise" in reply
        assert "!cashout" in reply


class TestStats:
    """Test the stats command."""

    @pytest.mark.asyncio
    async def test_stats(self, handler):
        handler.roster.get_stats.return_value = Stats("id-alice", games=3, money=-40)
        reply = await say(handler, "alice", "!stats")
        assert reply == "alice: 3 games played, net winnings -40"
        handler.roster.get_stats.assert_awaited_with("id-alice")

    @pytest.mark.asyncio
    async def test_no_stats(self, handler):
        handler.roster.get_stats.return_value = None
        assert await say(handler, "alice", "!stats") == "No stats tracked for alice"

    @pytest.mark.asyncio
    async def test_stats_unavailable(self, handler):
        handler.roster.get_stats.side_effect = RosterError("down")
        assert await say(handler, "alice", "!stats") == "No stats available at this time"


class TestMembership:
    """Test nick changes, parts and quits."""

    @pytest.mark.asyncio
    async def test_rename(self, handler):
        await say(handler, "alice", "!join")
        handler.player_renamed("id-alice", "alicia")

        assert await say(handler, "alicia", "!players") == "Joined players: alicia."

    @pytest.mark.asyncio
    async def test_quit_cashes_out_everywhere(self, handler):
        handler.open_table("#other", TableConfig())
        for channel in ("#poker", "#other"):
            for nick in ("alice", "bob", "carol"):
                await say(handler, nick, "!join", channel=channel)
            await say(handler, "alice", "!start", channel=channel)

        await handler.player_quit("id-carol")

        for table in handler.tables.values():
            carol = table.get_player("id-carol")
            assert carol is not None
            assert not carol.is_active
            assert table.game_in_progress

    @pytest.mark.asyncio
    async def test_part_before_game_unjoins(self, handler):
        await say(handler, "alice", "!join")
        await handler.player_left("#poker", "id-alice")

        assert handler.tables["#poker"].players == []

    @pytest.mark.asyncio
    async def test_close_table_settles_game(self, handler):
        await say(handler, "alice", "!join")
        await say(handler, "bob", "!join")
        await say(handler, "alice", "!start")

        await handler.close_table("#poker")

        assert "#poker" not in handler.tables
        handler.roster.save_roster.assert_awaited()
