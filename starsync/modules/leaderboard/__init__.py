"""
Leaderboard Module
==================

- LeaderboardFetcher: pulls the private leaderboard JSON
- LeaderboardSnapshot / SnapshotStore: the latest star counts
- rank_entries / render_leaderboard: competition ranking and text output
"""

from .fetcher import LeaderboardFetcher, parse_members
from .ranking import RankedRow, RankingEntry, rank_entries, render_leaderboard
from .snapshot import EMPTY_SNAPSHOT, LeaderboardSnapshot, SnapshotStore, compute_affected_ids

__all__ = [
    "LeaderboardFetcher",
    "parse_members",
    "RankingEntry",
    "RankedRow",
    "rank_entries",
    "render_leaderboard",
    "LeaderboardSnapshot",
    "SnapshotStore",
    "EMPTY_SNAPSHOT",
    "compute_affected_ids",
]
