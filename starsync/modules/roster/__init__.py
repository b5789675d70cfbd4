"""
Roster Module
=============

Business logic behind the claim, unclaim, verify and leaderboard commands.
"""

from .service import ClaimOutcome, RosterService, parse_aoc_id, parse_member_reference

__all__ = ["RosterService", "ClaimOutcome", "parse_aoc_id", "parse_member_reference"]
