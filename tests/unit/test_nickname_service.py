"""
Unit tests for NicknameService.

Tests nickname updates, idempotence, owner skipping, resets and how Discord
failures are reported.
"""

import discord
import pytest

from starsync.core.exceptions import PlatformOperationFailure
from starsync.modules.claims.record import ClaimRecord
from starsync.modules.leaderboard.snapshot import LeaderboardSnapshot
from starsync.modules.nickname.service import UpdateOutcome
from tests.conftest import GUILD_ID, OWNER_ID


def claim_for(discord_id, aoc_id="1001") -> ClaimRecord:
    return ClaimRecord.of(GUILD_ID, discord_id, aoc_id)


@pytest.mark.asyncio
class TestUpdateMember:
    async def test_writes_current_score(self, nicknames, snapshots, make_member, make_guild):
        snapshots.replace(LeaderboardSnapshot({"1001": 12}))
        member = make_member(1, "alice")
        guild = make_guild(member)

        result = await nicknames.update_member(guild, claim_for(1))

        assert result.outcome is UpdateOutcome.UPDATED
        assert member.nick == "alice ⭐12"
        member.edit.assert_awaited_once()

    async def test_unknown_score_writes_marker(self, nicknames, make_member, make_guild):
        member = make_member(1, "alice")

        await nicknames.update_member(make_guild(member), claim_for(1))

        assert member.nick == "alice ⭐?"

    async def test_existing_suffix_replaced(self, nicknames, snapshots, make_member, make_guild):
        snapshots.replace(LeaderboardSnapshot({"1001": 14}))
        member = make_member(1, "alice", nick="Ally ⭐12")

        await nicknames.update_member(make_guild(member), claim_for(1))

        assert member.nick == "Ally ⭐14"

    async def test_idempotent(self, nicknames, snapshots, make_member, make_guild):
        """Two updates against an unchanged snapshot produce one write."""
        snapshots.replace(LeaderboardSnapshot({"1001": 3}))
        member = make_member(1, "alice")
        guild = make_guild(member)

        first = await nicknames.update_member(guild, claim_for(1))
        second = await nicknames.update_member(guild, claim_for(1))

        assert first.outcome is UpdateOutcome.UPDATED
        assert second.outcome is UpdateOutcome.UNCHANGED
        assert member.edit.await_count == 1

    async def test_owner_is_skipped(self, nicknames, make_member, make_guild):
        owner = make_member(OWNER_ID, "boss")

        result = await nicknames.update_member(make_guild(owner), claim_for(OWNER_ID))

        assert result.outcome is UpdateOutcome.SKIPPED
        assert result.reason == "guild owner"
        owner.edit.assert_not_awaited()

    async def test_missing_member_is_skipped(self, nicknames, make_guild):
        result = await nicknames.update_member(make_guild(), claim_for(42))

        assert result.outcome is UpdateOutcome.SKIPPED
        assert result.reason == "member not in guild"

    async def test_edit_failure_reported(self, nicknames, make_member, make_guild, http_error):
        member = make_member(1, "alice")
        member.edit.side_effect = http_error(discord.Forbidden, 403, "Missing Permissions")

        result = await nicknames.update_member(make_guild(member), claim_for(1))

        assert result.outcome is UpdateOutcome.FAILED
        assert isinstance(result.error, PlatformOperationFailure)
        assert not result.ok

    async def test_fetch_failure_reported(self, nicknames, make_guild, http_error):
        guild = make_guild()
        guild.fetch_member.side_effect = http_error(discord.HTTPException, 500)

        result = await nicknames.update_member(guild, claim_for(1))

        assert result.outcome is UpdateOutcome.FAILED

    async def test_falls_back_to_fetch(self, nicknames, make_member, make_guild, mocker):
        member = make_member(1, "alice")
        guild = make_guild()
        guild.fetch_member = mocker.AsyncMock(return_value=member)

        result = await nicknames.update_member(guild, claim_for(1))

        assert result.outcome is UpdateOutcome.UPDATED
        guild.fetch_member.assert_awaited_once_with(1)


@pytest.mark.asyncio
class TestUpdateForAocId:
    async def test_unclaimed_id_skipped(self, nicknames, make_guild):
        result = await nicknames.update_for_aoc_id(make_guild(), "555")

        assert result.outcome is UpdateOutcome.SKIPPED
        assert result.reason == "unclaimed"

    async def test_claimed_id_updated(self, nicknames, claim_store, snapshots, make_member, make_guild):
        snapshots.replace(LeaderboardSnapshot({"555": 8}))
        await claim_store.add(claim_for(1, "555"))
        member = make_member(1, "alice")

        result = await nicknames.update_for_aoc_id(make_guild(member), "555")

        assert result.outcome is UpdateOutcome.UPDATED
        assert member.nick == "alice ⭐8"


@pytest.mark.asyncio
class TestReset:
    async def test_base_equal_to_username_clears_nick(self, nicknames, make_member, make_guild):
        member = make_member(1, "alice", nick="alice ⭐12")

        result = await nicknames.reset_member(make_guild(member), claim_for(1))

        assert result.outcome is UpdateOutcome.UPDATED
        member.edit.assert_awaited_once()
        assert member.edit.await_args.kwargs["nick"] is None
        assert member.nick is None

    async def test_custom_base_kept(self, nicknames, make_member, make_guild):
        member = make_member(1, "alice", nick="Ally ⭐12")

        await nicknames.reset_member(make_guild(member), claim_for(1))

        assert member.nick == "Ally"

    async def test_no_nick_no_write(self, nicknames, make_member, make_guild):
        member = make_member(1, "alice")

        result = await nicknames.reset_member(make_guild(member), claim_for(1))

        assert result.outcome is UpdateOutcome.UNCHANGED
        member.edit.assert_not_awaited()

    async def test_reset_all(self, nicknames, claim_store, make_member, make_guild):
        alice = make_member(1, "alice", nick="alice ⭐3")
        bob = make_member(2, "bob", nick="Bobby ⭐?")
        owner = make_member(OWNER_ID, "boss", nick="boss ⭐9")
        guild = make_guild(alice, bob, owner)
        guild.chunked = False
        for member_id in (1, 2, OWNER_ID):
            await claim_store.add(claim_for(member_id, str(member_id)))

        results = await nicknames.reset_all([guild])

        guild.chunk.assert_awaited_once()
        assert [r.outcome for r in results] == [
            UpdateOutcome.UPDATED,
            UpdateOutcome.UPDATED,
            UpdateOutcome.SKIPPED,
        ]
        assert alice.nick is None
        assert bob.nick == "Bobby"
        assert owner.nick == "boss ⭐9"

    async def test_reset_all_continues_after_failure(
        self, nicknames, claim_store, make_member, make_guild, http_error
    ):
        alice = make_member(1, "alice", nick="Al ⭐3")
        alice.edit.side_effect = http_error(discord.Forbidden, 403)
        bob = make_member(2, "bob", nick="Bobby ⭐4")
        await claim_store.add(claim_for(1, "1"))
        await claim_store.add(claim_for(2, "2"))

        results = await nicknames.reset_all([make_guild(alice, bob)])

        assert results[0].outcome is UpdateOutcome.FAILED
        assert bob.nick == "Bobby"
