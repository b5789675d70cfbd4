"""
Claim storage.

Exports:
- ClaimRecord: value object for one claim
- ClaimStore: storage interface used by the services

The SQL implementation lives in `starsync.modules.claims.repository`.
"""

from starsync.modules.claims.record import ClaimRecord
from starsync.modules.claims.store import ClaimStore

__all__ = ["ClaimRecord", "ClaimStore"]
