"""
/friction — per-unit friction records for the heat-map overlay and ranking.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...api.schemas import FrictionMapOut, FrictionRecordOut, TopFrictionOut
from ...config import config
from ...inference.friction import FrictionRecord

router = APIRouter(prefix="/friction", tags=["friction"])


def _get_session(request: Request):
    return request.app.state.session


def _record_out(unit_id: str, rec: FrictionRecord) -> FrictionRecordOut:
    return FrictionRecordOut(
        id=unit_id,
        reread_count=rec.reread_count,
        long_pause_count=rec.long_pause_count,
        cumulative_dwell_seconds=rec.cumulative_dwell_seconds,
        excessive_time_flag=rec.excessive_time_flag,
        friction_score=rec.friction_score,
        load_samples=rec.load_samples,
        average_load=rec.average_load,
        skimmed=rec.skimmed,
    )


@router.get("", response_model=FrictionMapOut)
def get_friction_map(session=Depends(_get_session)):
    """Full friction map keyed by unit id."""
    return FrictionMapOut(
        units={uid: _record_out(uid, rec) for uid, rec in session.friction_map().items()}
    )


@router.get("/top", response_model=TopFrictionOut)
def get_top_friction(
    n: int = Query(default=config.top_friction_count, ge=0, le=100),
    session=Depends(_get_session),
):
    """Units ranked by friction score, highest first."""
    return TopFrictionOut(units=[_record_out(r.id, r.record) for r in session.top_friction(n)])


@router.get("/unit/{unit_id}", response_model=FrictionRecordOut)
def get_unit_friction(unit_id: str, session=Depends(_get_session)):
    rec = session.friction_map().get(unit_id)
    if rec is None:
        raise HTTPException(status_code=404, detail=f"No friction recorded for {unit_id!r}")
    return _record_out(unit_id, rec)
