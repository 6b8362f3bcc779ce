"""
Friction Aggregator — per-content-unit evidence of reading difficulty.

    friction_score = 2 * rereads + 1 * long_pauses + (1 if excessive_time else 0)

Records are created lazily the first time a unit id is touched. Reread
evidence always wins over skim evidence: a reread clears `skimmed`, and a
unit that has been reread can never be marked skimmed again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from . import thresholds as T

logger = logging.getLogger(__name__)


@dataclass
class FrictionRecord:
    reread_count: int = 0
    long_pause_count: int = 0
    cumulative_dwell_seconds: float = 0.0
    excessive_time_flag: bool = False
    friction_score: int = 0
    load_samples: List[float] = field(default_factory=list)
    average_load: float = 0.0
    skimmed: bool = False

    def recompute(self) -> None:
        self.friction_score = (
            T.REREAD_WEIGHT * self.reread_count
            + T.LONG_PAUSE_WEIGHT * self.long_pause_count
            + (T.EXCESSIVE_TIME_WEIGHT if self.excessive_time_flag else 0)
        )


@dataclass
class FrictionUpdate:
    kind: str                          # "reread" | "visit_time"
    amount: int = 1                    # reread only
    time: Optional[float] = None       # visit_time: seconds spent on this visit
    expected: Optional[float] = None   # visit_time: expected seconds for the unit


@dataclass
class RankedFriction:
    id: str
    record: FrictionRecord


class FrictionAggregator:

    def __init__(self):
        # dicts keep insertion order, which the ranking relies on for ties
        self._records: Dict[str, FrictionRecord] = {}

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_friction(self, unit_id: str, update: FrictionUpdate) -> FrictionRecord:
        rec = self._touch(unit_id)

        if update.kind == "reread":
            rec.reread_count += update.amount
            rec.skimmed = False
        elif update.kind == "visit_time" and update.time and update.expected:
            limit = update.expected * T.STRAIN_RATIO
            rec.cumulative_dwell_seconds += update.time
            if update.time > limit:
                rec.long_pause_count += 1
            if rec.cumulative_dwell_seconds > limit:
                rec.excessive_time_flag = True

        rec.recompute()
        logger.debug("Friction %s → %d (%s)", unit_id, rec.friction_score, update.kind)
        return rec

    def mark_as_skimmed(self, unit_id: str) -> bool:
        """Returns True if the unit is now marked skimmed."""
        rec = self._touch(unit_id)
        if rec.reread_count > 0:
            return False
        rec.skimmed = True
        logger.debug("Unit %s marked skimmed", unit_id)
        return True

    def record_load_sample(self, unit_id: str, score: float) -> None:
        rec = self._touch(unit_id)
        rec.load_samples.append(score)
        rec.average_load = sum(rec.load_samples) / len(rec.load_samples)

    def reset(self) -> None:
        self._records.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, unit_id: str) -> Optional[FrictionRecord]:
        return self._records.get(unit_id)

    def friction_map(self) -> Dict[str, FrictionRecord]:
        """Copies of every record, keyed by unit id in first-touched order."""
        return {uid: _copy(rec) for uid, rec in self._records.items()}

    def get_top_friction_chunks(self, n: int = 3) -> List[RankedFriction]:
        # sorted() is stable, so equal scores stay in first-touched order
        ranked = sorted(
            self._records.items(), key=lambda kv: kv[1].friction_score, reverse=True
        )
        return [RankedFriction(id=uid, record=_copy(rec)) for uid, rec in ranked[:max(n, 0)]]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _touch(self, unit_id: str) -> FrictionRecord:
        rec = self._records.get(unit_id)
        if rec is None:
            rec = FrictionRecord()
            self._records[unit_id] = rec
        return rec


def _copy(rec: FrictionRecord) -> FrictionRecord:
    return replace(rec, load_samples=list(rec.load_samples))
