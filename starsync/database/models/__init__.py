"""
Model aggregator. Importing this package registers every table on
`Base.metadata`.
"""

from starsync.database.models.claim import Claim

__all__ = ["Claim"]
