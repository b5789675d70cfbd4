"""
Unit tests for the reconciliation cycle.

The fetcher and the bot are mocks; claims live in the in-memory store.
"""

import discord
import pytest

from starsync.core.exceptions import DatabaseError, UpstreamFetchFailure
from starsync.modules.claims.record import ClaimRecord
from starsync.modules.leaderboard.snapshot import LeaderboardSnapshot
from starsync.modules.nickname.service import UpdateOutcome
from starsync.modules.sync.reconciler import Reconciler
from tests.conftest import GUILD_ID


@pytest.fixture
def fetcher(mocker):
    fetcher = mocker.MagicMock()
    fetcher.fetch = mocker.AsyncMock()
    return fetcher


@pytest.fixture
def client(mocker):
    client = mocker.MagicMock()
    client.guilds = []
    return client


@pytest.fixture
def reconciler(client, fetcher, snapshots, claim_store, nicknames) -> Reconciler:
    return Reconciler(client, fetcher, snapshots, claim_store, nicknames)


@pytest.mark.asyncio
class TestRunCycle:
    async def test_updates_claimed_members(
        self, reconciler, client, fetcher, claim_store, make_member, make_guild
    ):
        alice = make_member(1, "alice")
        bob = make_member(2, "bob", nick="Bobby ⭐1")
        client.guilds = [make_guild(alice, bob)]
        await claim_store.add(ClaimRecord.of(GUILD_ID, 1, "A"))
        await claim_store.add(ClaimRecord.of(GUILD_ID, 2, "B"))
        fetcher.fetch.return_value = LeaderboardSnapshot({"A": 5, "B": 2})

        report = await reconciler.run_cycle()

        assert not report.aborted
        assert report.affected_ids == {"A", "B"}
        assert report.count(UpdateOutcome.UPDATED) == 2
        assert alice.nick == "alice ⭐5"
        assert bob.nick == "Bobby ⭐2"

    async def test_fetch_failure_keeps_previous_snapshot(
        self, reconciler, client, fetcher, snapshots, make_member, make_guild
    ):
        previous = LeaderboardSnapshot({"A": 5})
        snapshots.replace(previous)
        member = make_member(1, "alice")
        client.guilds = [make_guild(member)]
        fetcher.fetch.side_effect = UpstreamFetchFailure("https://example", "HTTP 500", status=500)

        report = await reconciler.run_cycle()

        assert report.aborted
        assert report.results == []
        assert snapshots.current is previous
        member.edit.assert_not_awaited()

    async def test_only_affected_ids_touched(
        self, reconciler, client, fetcher, snapshots, claim_store, make_member, make_guild
    ):
        snapshots.replace(LeaderboardSnapshot({"A": 1}))
        alice = make_member(1, "alice")
        carol = make_member(3, "carol", nick="carol ⭐?")
        client.guilds = [make_guild(alice, carol)]
        await claim_store.add(ClaimRecord.of(GUILD_ID, 1, "A"))
        await claim_store.add(ClaimRecord.of(GUILD_ID, 3, "Z"))
        fetcher.fetch.return_value = LeaderboardSnapshot({"B": 2})

        report = await reconciler.run_cycle()

        # A left the leaderboard, so it falls back to unknown; Z was never on it
        assert report.affected_ids == {"A", "B"}
        assert alice.nick == "alice ⭐?"
        carol.edit.assert_not_awaited()

    async def test_per_member_failure_reported(
        self, reconciler, client, fetcher, claim_store, make_member, make_guild, http_error
    ):
        alice = make_member(1, "alice")
        alice.edit.side_effect = http_error(discord.Forbidden, 403, "Missing Permissions")
        bob = make_member(2, "bob")
        client.guilds = [make_guild(alice, bob)]
        await claim_store.add(ClaimRecord.of(GUILD_ID, 1, "A"))
        await claim_store.add(ClaimRecord.of(GUILD_ID, 2, "B"))
        fetcher.fetch.return_value = LeaderboardSnapshot({"A": 1, "B": 2})

        report = await reconciler.run_cycle()

        assert [f.discord_id for f in report.failures] == ["1"]
        assert bob.nick == "bob ⭐2"
        assert report.summary()["failed"] == 1
        assert report.summary()["updated"] == 1

    async def test_claims_scoped_to_guild(
        self, reconciler, client, fetcher, claim_store, make_member, make_guild
    ):
        member = make_member(1, "alice")
        other_guild = make_guild(member, guild_id=555)
        client.guilds = [other_guild]
        await claim_store.add(ClaimRecord.of(GUILD_ID, 1, "A"))
        fetcher.fetch.return_value = LeaderboardSnapshot({"A": 1})

        report = await reconciler.run_cycle()

        assert report.results == []
        member.edit.assert_not_awaited()

    async def test_unchunked_guild_is_chunked(self, reconciler, client, fetcher, make_guild):
        guild = make_guild()
        guild.chunked = False
        client.guilds = [guild]
        fetcher.fetch.return_value = LeaderboardSnapshot({})

        await reconciler.run_cycle()

        guild.chunk.assert_awaited_once()

    async def test_guild_error_does_not_stop_other_guilds(
        self, reconciler, client, fetcher, claim_store, make_member, make_guild, http_error
    ):
        broken = make_guild(guild_id=1)
        broken.chunked = False
        broken.chunk.side_effect = http_error(discord.HTTPException, 500)
        member = make_member(1, "alice")
        client.guilds = [broken, make_guild(member)]
        await claim_store.add(ClaimRecord.of(GUILD_ID, 1, "A"))
        fetcher.fetch.return_value = LeaderboardSnapshot({"A": 4})

        report = await reconciler.run_cycle()

        assert len(report.guild_errors) == 1
        assert member.nick == "alice ⭐4"

    async def test_claim_store_error_recorded(
        self, reconciler, client, fetcher, claim_store, make_guild, mocker
    ):
        client.guilds = [make_guild()]
        mocker.patch.object(
            claim_store, "find_many", side_effect=DatabaseError("find_many claims", RuntimeError("down"))
        )
        fetcher.fetch.return_value = LeaderboardSnapshot({"A": 1})

        report = await reconciler.run_cycle()

        assert isinstance(report.guild_errors[0], DatabaseError)
