"""
Pydantic schemas for the local reading-session API.
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# ── Content units ──────────────────────────────────────────────────────────

class ContentUnitIn(BaseModel):
    id: str
    kind: Literal["paragraph", "heading"] = "paragraph"
    expected_dwell_seconds: float = Field(0.0, ge=0.0)
    has_figure_reference: bool = False


class UnitsLoadedOut(BaseModel):
    unit_count: int


# ── Session state ──────────────────────────────────────────────────────────

class SessionStateOut(BaseModel):
    score: float = Field(..., ge=0.0, le=100.0)
    state: str
    focus_mode_active: bool
    focus_mode_activation_count: int
    cumulative_time_in_state: Dict[str, int]
    active_session_seconds: int
    session_running: bool
    sustained_strain_seconds: int
    velocity: float
    skimming: bool
    break_suggested: bool
    active_unit_id: Optional[str]
    unit_count: int


# ── Raw signals ────────────────────────────────────────────────────────────

class ScrollSampleIn(BaseModel):
    position: float = Field(..., description="Viewport offset from the top, px")
    timestamp: Optional[float] = Field(None, description="Seconds; defaults to now")


class ScrollOutcomeOut(BaseModel):
    intensity: Optional[str]
    rereads: int
    smooth: bool


class DwellIn(BaseModel):
    unit_id: str
    dwell_seconds: float = Field(..., ge=0.0)
    expected_seconds: Optional[float] = Field(None, ge=0.0)
    is_periodic: bool = False


class DwellOutcomeOut(BaseModel):
    is_strain: bool
    is_high_effort: bool
    is_skimmed: bool
    skim_override: bool
    ignored: bool


class VisibleIn(BaseModel):
    unit_id: str


# ── Tagged engine events ───────────────────────────────────────────────────

class ScrollUpEventIn(BaseModel):
    kind: Literal["scroll_up"]
    intensity: Literal["small", "medium", "large"]
    unit_id: Optional[str] = None


class DwellEventIn(BaseModel):
    kind: Literal["dwell"]
    unit_id: str
    dwell_seconds: float = Field(..., ge=0.0)
    expected_seconds: Optional[float] = Field(None, ge=0.0)
    is_periodic: bool = False


class HesitationEventIn(BaseModel):
    kind: Literal["hesitation"]


class SmoothReadingEventIn(BaseModel):
    kind: Literal["smooth_reading"]


EngineEventIn = Annotated[
    Union[ScrollUpEventIn, DwellEventIn, HesitationEventIn, SmoothReadingEventIn],
    Field(discriminator="kind"),
]


# ── Friction ───────────────────────────────────────────────────────────────

class FrictionRecordOut(BaseModel):
    id: str
    reread_count: int
    long_pause_count: int
    cumulative_dwell_seconds: float
    excessive_time_flag: bool
    friction_score: int
    load_samples: List[float]
    average_load: float
    skimmed: bool


class FrictionMapOut(BaseModel):
    units: Dict[str, FrictionRecordOut]


class TopFrictionOut(BaseModel):
    units: List[FrictionRecordOut]


# ── Report ─────────────────────────────────────────────────────────────────

class FrictionHighlightOut(BaseModel):
    id: str
    friction_score: int
    level: str
    reread_count: int
    long_pause_count: int
    has_figure_reference: bool


class SessionSummaryOut(BaseModel):
    active_seconds: int
    active_time_label: str
    focus_mode_activations: int
    time_in_state: Dict[str, int]
    time_in_state_labels: Dict[str, str]
    top_friction: List[FrictionHighlightOut]
    skimmed_unit_ids: List[str]
    skimmed_count: int


class EffortPointOut(BaseModel):
    index: int
    id: str
    kind: str
    effort: float
    normalized: float


class HeatmapCellOut(BaseModel):
    id: str
    band: str
    friction_score: int
    reread_count: int
    long_pause_count: int
