"""
Post-session report — summary, effort curve and friction heat-map built from
a finished (or paused) ReadingSession.

    effort(unit) = 0                                   if skimmed
                 = dwell / expected + 0.5 * rereads    otherwise
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..inference import thresholds as T
from ..inference.friction import FrictionRecord, RankedFriction
from ..inference.load_state_machine import LoadState, SessionMetrics
from .content import ContentUnit, UnitKind

REREAD_EFFORT_WEIGHT = 0.5
HEATMAP_HIGH_EFFORT_SCORE = 3
MAX_SKIMMED_LISTED = 5


@dataclass
class FrictionHighlight:
    id: str
    friction_score: int
    level: str                 # "high" | "moderate"
    reread_count: int
    long_pause_count: int
    has_figure_reference: bool


@dataclass
class SessionSummary:
    active_seconds: int
    active_time_label: str
    focus_mode_activations: int
    time_in_state: Dict[str, int]
    time_in_state_labels: Dict[str, str]
    top_friction: List[FrictionHighlight]
    skimmed_unit_ids: List[str]
    skimmed_count: int


@dataclass
class EffortPoint:
    index: int
    id: str
    kind: str
    effort: float
    normalized: float


@dataclass
class HeatmapCell:
    id: str
    band: str                  # "smooth" | "high-effort" | "strain" | "skimmed"
    friction_score: int
    reread_count: int
    long_pause_count: int


def format_duration(seconds: int) -> str:
    """`125` → `"2m 5s"`, `45` → `"45s"`."""
    m, s = divmod(int(seconds), 60)
    return f"{m}m {s}s" if m > 0 else f"{s}s"


def friction_level(score: int) -> str:
    return "high" if score >= T.HIGH_FRICTION_SCORE else "moderate"


def build_summary(
    metrics: SessionMetrics,
    units: Sequence[ContentUnit],
    top: Sequence[RankedFriction],
    friction_map: Dict[str, FrictionRecord],
) -> SessionSummary:
    by_id = {u.id: u for u in units}
    highlights = [
        FrictionHighlight(
            id=r.id,
            friction_score=r.record.friction_score,
            level=friction_level(r.record.friction_score),
            reread_count=r.record.reread_count,
            long_pause_count=r.record.long_pause_count,
            has_figure_reference=by_id[r.id].has_figure_reference,
        )
        for r in top
        if r.id in by_id
    ]
    skimmed = [u.id for u in units if _skimmed(friction_map.get(u.id))]
    times = {s.value: metrics.cumulative_time_in_state.get(s, 0) for s in LoadState}
    return SessionSummary(
        active_seconds=metrics.active_session_seconds,
        active_time_label=format_duration(metrics.active_session_seconds),
        focus_mode_activations=metrics.focus_mode_activation_count,
        time_in_state=times,
        time_in_state_labels={k: _minutes_seconds(v) for k, v in times.items()},
        top_friction=highlights,
        skimmed_unit_ids=skimmed[:MAX_SKIMMED_LISTED],
        skimmed_count=len(skimmed),
    )


def build_effort_curve(
    units: Sequence[ContentUnit],
    friction_map: Dict[str, FrictionRecord],
) -> List[EffortPoint]:
    if not units:
        return []

    dwell = np.zeros(len(units))
    expected = np.zeros(len(units))
    rereads = np.zeros(len(units))
    skimmed = np.zeros(len(units), dtype=bool)
    for i, unit in enumerate(units):
        rec = friction_map.get(unit.id)
        expected[i] = unit.expected_dwell_seconds
        if rec is not None:
            dwell[i] = rec.cumulative_dwell_seconds
            rereads[i] = rec.reread_count
            skimmed[i] = rec.skimmed

    ratio = np.divide(dwell, expected, out=np.zeros_like(dwell), where=expected > 0)
    effort = np.where(skimmed, 0.0, ratio + REREAD_EFFORT_WEIGHT * rereads)
    peak = effort.max()
    normalized = effort / peak if peak > 0 else np.zeros_like(effort)

    return [
        EffortPoint(
            index=i,
            id=unit.id,
            kind=unit.kind.value if isinstance(unit.kind, UnitKind) else str(unit.kind),
            effort=round(float(effort[i]), 4),
            normalized=round(float(normalized[i]), 4),
        )
        for i, unit in enumerate(units)
    ]


def build_heatmap(
    units: Sequence[ContentUnit],
    friction_map: Dict[str, FrictionRecord],
) -> List[HeatmapCell]:
    cells = []
    for unit in units:
        rec = friction_map.get(unit.id) or FrictionRecord()
        cells.append(
            HeatmapCell(
                id=unit.id,
                band=_band(rec),
                friction_score=rec.friction_score,
                reread_count=rec.reread_count,
                long_pause_count=rec.long_pause_count,
            )
        )
    return cells


def _band(rec: FrictionRecord) -> str:
    if rec.skimmed:
        return "skimmed"
    if rec.friction_score >= T.HIGH_FRICTION_SCORE:
        return "strain"
    if rec.friction_score >= HEATMAP_HIGH_EFFORT_SCORE:
        return "high-effort"
    return "smooth"


def _skimmed(rec: Optional[FrictionRecord]) -> bool:
    return rec is not None and rec.skimmed


def _minutes_seconds(seconds: int) -> str:
    m, s = divmod(int(seconds), 60)
    return f"{m}m {s}s"
