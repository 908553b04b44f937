import logging
from pathlib import Path

import yaml
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..adaptive.panels import DetailPanels, format_uptime, indicator_text
from ..runtime.engine import EngineConfig, ProfilerEngine
from ..runtime.scheduler import AsyncioScheduler, Scheduler
from ..signals.dwell import SectionLayout
from ..signals.events import ClientClock, EventType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# ── Global state (single session per process) ──────────────────────────────

_engine: ProfilerEngine | None = None
_panels: DetailPanels | None = None
_client_clock: ClientClock | None = None
_config: dict = {}

_EVENT_TYPES = {e.value for e in EventType}


def load_config(config_path: str = "config.yaml") -> dict:
    global _config
    path = Path(config_path)
    if path.exists():
        with open(path, "r") as f:
            _config = yaml.safe_load(f) or {}
    else:
        _config = {}
    return _config


def init_engine(config: dict, scheduler: Scheduler | None = None) -> ProfilerEngine:
    """Create and start the session engine. Without a scheduler, the running event loop is used."""
    global _engine, _panels, _client_clock

    engine_cfg = EngineConfig.from_dict(config)
    scheduler = scheduler or AsyncioScheduler(frame_ms=engine_cfg.frame_ms)

    _engine = ProfilerEngine(scheduler, engine_cfg)
    _panels = DetailPanels(_engine, engine_cfg.panels)
    _client_clock = ClientClock(scheduler.now)
    _engine.start()
    return _engine


def _require_engine() -> ProfilerEngine:
    if _engine is None:
        raise HTTPException(503, "Profiler not initialized.")
    return _engine


# ── Request/Response models ────────────────────────────────────────────────

class EventRequest(BaseModel):
    event_type: str
    scroll_y: float | None = None
    target: list[str] = []
    data: dict = {}
    timestamp: float | None = None   # page clock, ms

class SectionBox(BaseModel):
    id: str
    top: float
    height: float = Field(ge=0)

class LayoutRequest(BaseModel):
    viewport_height: float = Field(gt=0)
    sections: list[SectionBox] = []

class BoostRequest(BaseModel):
    amount: int = Field(3, ge=1)

class StateResponse(BaseModel):
    profile: str
    mode: str
    indicator: str
    uptime: str
    state: dict

class PanelResponse(BaseModel):
    panel_id: str
    revealed: bool


# ── Routes ─────────────────────────────────────────────────────────────────

@router.post("/events")
async def receive_event(req: EventRequest) -> dict:
    engine = _require_engine()
    if req.event_type not in _EVENT_TYPES:
        logger.debug("Ignoring unknown event type %r", req.event_type)
        return {"status": "ignored"}

    timestamp = _client_clock.to_engine(req.timestamp) if req.timestamp is not None else None
    engine.source.emit(
        req.event_type, scroll_y=req.scroll_y, target=req.target, data=req.data, timestamp=timestamp,
    )
    return {"status": "ok"}


@router.post("/layout")
async def update_layout(req: LayoutRequest) -> dict:
    engine = _require_engine()
    if not isinstance(engine.viewport, SectionLayout):
        raise HTTPException(409, "Viewport does not accept layout updates.")

    engine.viewport.update(
        viewport_height=req.viewport_height,
        sections={s.id: (s.top, s.top + s.height) for s in req.sections},
    )
    return {"status": "ok", "sections": len(req.sections)}


@router.get("/state")
async def get_state() -> StateResponse:
    engine = _require_engine()
    snapshot = engine.get_state()
    profile = engine.get_profile()
    return StateResponse(
        profile=profile.value,
        mode=engine.mode.value,
        indicator=indicator_text(profile),
        uptime=format_uptime(snapshot.time_on_page_s),
        state=snapshot.to_dict(),
    )


@router.get("/profile")
async def get_profile() -> dict:
    return {"profile": _require_engine().get_profile().value}


@router.post("/boost")
async def boost(req: BoostRequest) -> dict:
    engine = _require_engine()
    engine.boost(req.amount)
    return {"status": "ok", "interaction_count": engine.state.interaction_count}


@router.post("/panels/{panel_id}/toggle")
async def toggle_panel(panel_id: str) -> PanelResponse:
    _require_engine()
    try:
        revealed = _panels.toggle(panel_id)
    except KeyError:
        raise HTTPException(404, f"Unknown panel: {panel_id}")
    return PanelResponse(panel_id=panel_id, revealed=revealed)


@router.get("/panels")
async def get_panels() -> dict:
    _require_engine()
    return {"panels": _panels.snapshot()}


@router.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "engine_ready": _engine is not None and _engine.started,
        "mode": _engine.mode.value if _engine else None,
    }
