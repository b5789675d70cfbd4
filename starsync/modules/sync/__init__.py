"""
Sync Module
===========

Keeps nicknames in step with the leaderboard.

Exports:
- PollSchedule: when to poll
- Reconciler / ReconcileReport: one fetch-and-rename cycle
- PollRunner: background task driving the reconciler
"""

from starsync.modules.sync.reconciler import ReconcileReport, Reconciler
from starsync.modules.sync.runner import PollRunner
from starsync.modules.sync.schedule import PollSchedule

__all__ = ["PollRunner", "PollSchedule", "ReconcileReport", "Reconciler"]
