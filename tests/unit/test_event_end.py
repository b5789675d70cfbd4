"""
Unit tests for the event-end reset entry point.

The gateway client is never started; `start` and `close` are mocked.
"""

import discord
import pytest

from starsync import event_end
from starsync.event_end import EventEndClient, reset_nicknames
from starsync.modules.nickname.service import UpdateOutcome, UpdateResult


@pytest.fixture
def guilds(mocker, make_guild, make_member):
    guild = make_guild(make_member(1, "alice", nick="alice ⭐3"))
    mocker.patch.object(
        EventEndClient, "guilds", new_callable=mocker.PropertyMock, return_value=[guild]
    )
    return [guild]


@pytest.fixture
def database(mocker):
    mocker.patch.object(event_end.Config, "validate")
    init = mocker.patch.object(event_end.DatabaseService, "initialize", mocker.AsyncMock())
    shutdown = mocker.patch.object(event_end.DatabaseService, "shutdown", mocker.AsyncMock())
    return init, shutdown


@pytest.mark.asyncio
class TestEventEndClient:
    async def test_on_ready_resets_once(self, mocker, guilds):
        nicknames = mocker.MagicMock()
        nicknames.reset_all = mocker.AsyncMock(return_value=[])
        client = EventEndClient(nicknames)
        mocker.patch.object(client, "close", mocker.AsyncMock())

        await client.on_ready()
        await client.on_ready()

        nicknames.reset_all.assert_awaited_once_with(guilds)
        client.close.assert_awaited_once()
        assert client.error is None

    async def test_on_ready_records_failure(self, mocker, guilds):
        nicknames = mocker.MagicMock()
        nicknames.reset_all = mocker.AsyncMock(side_effect=RuntimeError("store down"))
        client = EventEndClient(nicknames)
        mocker.patch.object(client, "close", mocker.AsyncMock())

        await client.on_ready()

        assert isinstance(client.error, RuntimeError)
        client.close.assert_awaited_once()


@pytest.mark.asyncio
class TestResetNicknames:
    async def test_success(self, mocker, database):
        result = UpdateResult("1", "2", "3", UpdateOutcome.UPDATED)

        async def fake_start(self, token):
            self.results = [result]

        mocker.patch.object(EventEndClient, "start", fake_start)
        mocker.patch.object(EventEndClient, "is_closed", return_value=True)

        assert await reset_nicknames() == 0
        database[0].assert_awaited_once_with(create_schema=False)
        database[1].assert_awaited_once()

    async def test_login_failure(self, mocker, database):
        mocker.patch.object(
            EventEndClient, "start", mocker.AsyncMock(side_effect=discord.LoginFailure("bad"))
        )
        mocker.patch.object(EventEndClient, "is_closed", return_value=True)

        assert await reset_nicknames() == 1
        database[1].assert_awaited_once()

    async def test_reset_error_exit_code(self, mocker, database):
        async def fake_start(self, token):
            self.error = RuntimeError("boom")

        mocker.patch.object(EventEndClient, "start", fake_start)
        mocker.patch.object(EventEndClient, "is_closed", return_value=True)

        assert await reset_nicknames() == 1

    async def test_database_failure(self, mocker, database):
        database[0].side_effect = RuntimeError("no database")
        start = mocker.patch.object(EventEndClient, "start", mocker.AsyncMock())

        assert await reset_nicknames() == 1
        start.assert_not_awaited()
