"""Game control API — state, placement, removal, pickups, tools, speed, reset."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from lawnline.simulation import PlaceOutcome, RemoveOutcome, CollectOutcome

router = APIRouter(prefix="/api/game", tags=["game"])


class PlaceDefender(BaseModel):
    row: int
    col: int
    type: str  # defender type_id, e.g. "sunflower"


class Cell(BaseModel):
    row: int
    col: int


class CollectPickup(BaseModel):
    pickup_id: str


class Click(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class SelectTool(BaseModel):
    tool: str | None = None  # defender type_id, "remove", or null to clear


class SetSpeed(BaseModel):
    multiplier: int


class SetAutoCollect(BaseModel):
    enabled: bool


def _get_game(request: Request):
    """Retrieve the Game from app state."""
    game = getattr(request.app.state, "game", None)
    if game is None:
        raise HTTPException(503, "Game not available")
    return game


@router.get("/state")
async def get_game_state(request: Request):
    """Get the HUD state."""
    game = _get_game(request)
    return game.get_game_state()


@router.get("/snapshot")
async def get_snapshot(request: Request):
    """Get the HUD state plus every entity, for late-joining renderers."""
    game = _get_game(request)
    return game.snapshot()


@router.post("/place")
async def place_defender(body: PlaceDefender, request: Request):
    """Plant a defender in a grid cell."""
    game = _get_game(request)
    outcome = game.place_defender(body.row, body.col, body.type)
    if outcome is not PlaceOutcome.PLACED:
        raise HTTPException(400, outcome.value)
    return {"status": outcome.value, "resource": game.resource}


@router.post("/remove")
async def remove_defender(body: Cell, request: Request):
    """Dig up a defender for a half refund."""
    game = _get_game(request)
    outcome = game.remove_defender(body.row, body.col)
    if outcome is not RemoveOutcome.REMOVED:
        raise HTTPException(400, outcome.value)
    return {"status": outcome.value, "resource": game.resource}


@router.post("/collect")
async def collect_pickup(body: CollectPickup, request: Request):
    game = _get_game(request)
    outcome = game.collect_pickup(body.pickup_id)
    if outcome is not CollectOutcome.COLLECTED:
        raise HTTPException(400, outcome.value)
    return {"status": outcome.value, "resource": game.resource}


@router.post("/click")
async def click(body: Click, request: Request):
    """Resolve a pointer click on the playfield with the selected tool."""
    game = _get_game(request)
    result = game.click(body.x, body.y)
    return {**result.to_dict(), "resource": game.resource}


@router.post("/tool")
async def select_tool(body: SelectTool, request: Request):
    """Select (or toggle off) a placement tool or the removal tool."""
    game = _get_game(request)
    if not game.select_tool(body.tool):
        raise HTTPException(400, f"Unknown tool: {body.tool}")
    return {"selected_tool": game.selected_tool}


@router.post("/speed")
async def set_speed(body: SetSpeed, request: Request):
    game = _get_game(request)
    if not game.set_speed(body.multiplier):
        raise HTTPException(400, f"Unsupported speed multiplier: {body.multiplier}")
    return {"speed_multiplier": game.speed_multiplier}


@router.post("/auto-collect")
async def set_auto_collect(body: SetAutoCollect, request: Request):
    game = _get_game(request)
    game.set_auto_collect(body.enabled)
    return {"auto_collect": game.auto_collect}


@router.post("/reset")
async def reset_game(request: Request):
    """Start a fresh episode."""
    game = _get_game(request)
    game.reset()
    return {"status": "reset", "state": game.get_game_state()}
