"""
/session — lifecycle control, document units, live state + WebSocket stream.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect

from ...api.schemas import ContentUnitIn, SessionStateOut, UnitsLoadedOut
from ...config import config
from ...session.content import ContentUnit, UnitKind
from ...session.reading_session import ReadingSession, SessionSnapshot

router = APIRouter(prefix="/session", tags=["session"])


def _get_session(request: Request) -> ReadingSession:
    return request.app.state.session


def _state_out(snap: SessionSnapshot) -> SessionStateOut:
    m = snap.metrics
    return SessionStateOut(
        score=round(m.score, 4),
        state=m.state.value,
        focus_mode_active=m.focus_mode_active,
        focus_mode_activation_count=m.focus_mode_activation_count,
        cumulative_time_in_state={s.value: t for s, t in m.cumulative_time_in_state.items()},
        active_session_seconds=m.active_session_seconds,
        session_running=m.session_running,
        sustained_strain_seconds=m.sustained_strain_seconds,
        velocity=round(snap.velocity, 4),
        skimming=snap.skimming,
        break_suggested=snap.break_suggested,
        active_unit_id=snap.active_unit_id,
        unit_count=snap.unit_count,
    )


@router.get("", response_model=SessionStateOut)
def get_state(session=Depends(_get_session)):
    """Return the current load snapshot."""
    return _state_out(session.snapshot())


@router.put("/units", response_model=UnitsLoadedOut)
def load_units(units: list[ContentUnitIn], session=Depends(_get_session)):
    """Replace the document's ordered content units."""
    session.load_units(
        ContentUnit(
            id=u.id,
            kind=UnitKind(u.kind),
            expected_dwell_seconds=u.expected_dwell_seconds,
            has_figure_reference=u.has_figure_reference,
        )
        for u in units
    )
    return UnitsLoadedOut(unit_count=len(units))


@router.post("/start", response_model=SessionStateOut)
def start(session=Depends(_get_session)):
    session.start_session()
    return _state_out(session.snapshot())


@router.post("/pause", response_model=SessionStateOut)
def pause(session=Depends(_get_session)):
    session.pause_session()
    return _state_out(session.snapshot())


@router.post("/end", response_model=SessionStateOut)
def end(session=Depends(_get_session)):
    session.end_session()
    return _state_out(session.snapshot())


@router.post("/reset", response_model=SessionStateOut)
def reset(session=Depends(_get_session)):
    """Clear metrics and friction; the loaded units are kept."""
    session.reset()
    return _state_out(session.snapshot())


@router.websocket("/ws")
async def session_websocket(websocket: WebSocket):
    """
    WebSocket stream — pushes the session state JSON object every
    `ws_push_interval_s` seconds for the reading view.
    """
    session: ReadingSession = websocket.app.state.session
    await websocket.accept()
    try:
        while True:
            payload = _state_out(session.snapshot()).model_dump()
            await websocket.send_json(payload)
            await asyncio.sleep(config.ws_push_interval_s)
    except WebSocketDisconnect:
        pass
