"""
/report — post-session summary, effort curve and friction heat-map.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Request

from ...api.schemas import EffortPointOut, HeatmapCellOut, SessionSummaryOut
from ...config import config
from ...session.report import build_effort_curve, build_heatmap, build_summary

router = APIRouter(prefix="/report", tags=["report"])


def _get_session(request: Request):
    return request.app.state.session


@router.get("/summary", response_model=SessionSummaryOut)
def get_summary(session=Depends(_get_session)):
    inputs = session.report_inputs(config.top_friction_count)
    summary = build_summary(inputs.metrics, inputs.units, inputs.top, inputs.friction_map)
    return SessionSummaryOut(**asdict(summary))


@router.get("/effort", response_model=List[EffortPointOut])
def get_effort(session=Depends(_get_session)):
    """Per-unit effort in document order."""
    inputs = session.report_inputs()
    return [EffortPointOut(**asdict(p)) for p in build_effort_curve(inputs.units, inputs.friction_map)]


@router.get("/heatmap", response_model=List[HeatmapCellOut])
def get_heatmap(session=Depends(_get_session)):
    inputs = session.report_inputs()
    return [HeatmapCellOut(**asdict(c)) for c in build_heatmap(inputs.units, inputs.friction_map)]
