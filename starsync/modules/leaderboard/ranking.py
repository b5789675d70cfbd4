"""
Standard competition ranking ("1224") over claimed members.

Scored entries are ordered by score descending; equal scores share a rank and
the following rank skips the tie size. Entries with an unknown score are
listed last with `?` in place of rank and score.

    >>> print(render_leaderboard([
    ...     RankingEntry("A", 50), RankingEntry("B", 50),
    ...     RankingEntry("C", 30), RankingEntry("D", None),
    ... ]))
    1. 50⭐ A
    1. 50⭐ B
    3. 30⭐ C
    ?.  ?⭐ D
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from starsync.modules.nickname.codec import STAR, UNKNOWN_MARKER


@dataclass(frozen=True, slots=True)
class RankingEntry:
    name: str
    score: Optional[int]


@dataclass(frozen=True, slots=True)
class RankedRow:
    rank: Optional[int]
    name: str
    score: Optional[int]


def _name_key(indexed: Tuple[int, RankingEntry]) -> Tuple[str, int]:
    position, entry = indexed
    return entry.name.casefold(), position


def rank_entries(entries: Sequence[RankingEntry]) -> List[RankedRow]:
    """Order and rank entries; ties are broken by case-folded name, then input order."""
    indexed = list(enumerate(entries))
    scored = [pair for pair in indexed if pair[1].score is not None]
    unscored = [pair for pair in indexed if pair[1].score is None]

    scored.sort(key=lambda pair: (-pair[1].score, *_name_key(pair)))
    unscored.sort(key=_name_key)

    rows: List[RankedRow] = []
    previous: Optional[RankedRow] = None
    for position, (_, entry) in enumerate(scored, start=1):
        if previous is not None and previous.score == entry.score:
            rank = previous.rank
        else:
            rank = position
        previous = RankedRow(rank, entry.name, entry.score)
        rows.append(previous)

    rows.extend(RankedRow(None, entry.name, None) for _, entry in unscored)
    return rows


def render_leaderboard(entries: Sequence[RankingEntry]) -> str:
    """Render ranked lines as `"{rank}. {score}⭐ {name}"`; empty input gives ``""``."""
    rows = rank_entries(entries)
    if not rows:
        return ""

    width = len(str(len(rows)))
    lines = []
    for row in rows:
        rank = UNKNOWN_MARKER if row.rank is None else str(row.rank)
        score = UNKNOWN_MARKER if row.score is None else str(row.score)
        lines.append(f"{rank:>{width}}. {score:>2}{STAR} {row.name}")
    return "\n".join(lines)
