"""
Leaderboard snapshots and the store holding the active one.

A snapshot is an immutable `aoc_id -> stars` mapping. Ids absent from the
mapping have an unknown score. The reconciler swaps snapshots wholesale; the
command handlers only read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Optional, Set


@dataclass(frozen=True)
class LeaderboardSnapshot:
    scores: Mapping[str, int] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "scores",
            MappingProxyType({str(key): int(value) for key, value in self.scores.items()}),
        )

    def get(self, aoc_id: str) -> Optional[int]:
        return self.scores.get(str(aoc_id))

    def ids(self) -> Set[str]:
        return set(self.scores)

    def __contains__(self, aoc_id: object) -> bool:
        return str(aoc_id) in self.scores

    def __len__(self) -> int:
        return len(self.scores)


EMPTY_SNAPSHOT = LeaderboardSnapshot({})


def compute_affected_ids(
    old: Optional[LeaderboardSnapshot],
    new: LeaderboardSnapshot,
) -> Set[str]:
    """
    Ids whose nickname may need rewriting after a snapshot swap.

    The union of both key sets: ids that left the leaderboard must fall back
    to the unknown marker, new ids need their first score.
    """
    previous = old.ids() if old is not None else set()
    return previous | new.ids()


class SnapshotStore:
    """Holds the active snapshot. Replacement is a single assignment."""

    def __init__(self, initial: Optional[LeaderboardSnapshot] = None) -> None:
        self._current: LeaderboardSnapshot = initial or EMPTY_SNAPSHOT
        self._has_data = initial is not None

    @property
    def current(self) -> LeaderboardSnapshot:
        return self._current

    @property
    def has_data(self) -> bool:
        """False until the first successful fetch."""
        return self._has_data

    def get_score(self, aoc_id: str) -> Optional[int]:
        return self._current.get(aoc_id)

    def replace(self, snapshot: LeaderboardSnapshot) -> LeaderboardSnapshot:
        """Install `snapshot` and return the one it replaced."""
        previous, self._current = self._current, snapshot
        self._has_data = True
        return previous
