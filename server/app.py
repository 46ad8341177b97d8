from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from events.mapper import map_income_effect
from machikoro.exceptions import (
    AlreadyOwnedError,
    IllegalStateError,
    InsufficientFundsError,
    InvalidReferenceError,
    InvalidRollError,
    MachiKoroError,
    NotFoundError,
)
from machikoro.registry import MatchRegistry
from machikoro.rules import Action, ActionType, get_legal_actions
from snapshot import serialize_snapshot

from .registry import MatchHub
from .schemas import (
    ActionMessage,
    CreateMatchRequest,
    EndTurnResponse,
    IncomeEffectDTO,
    JoinMatchRequest,
    LeaveResponse,
    PlayerRequest,
    PurchaseRequest,
    PurchaseResponse,
    RollRequest,
    RollResponse,
    SeatResponse,
)
from .settings import ServerSettings, get_server_settings

logger = logging.getLogger(__name__)

STATUS_CODES = {
    NotFoundError: 404,
    IllegalStateError: 409,
    AlreadyOwnedError: 409,
    InvalidReferenceError: 400,
    InsufficientFundsError: 402,
    InvalidRollError: 422,
}


def status_for(exc: MachiKoroError) -> int:
    for exc_type, status in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status
    return 400


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Build the FastAPI app with its own registry of live matches."""
    settings = settings or get_server_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle - startup and shutdown."""
        logging.basicConfig(level=settings.log_level)
        logger.info("Starting Machi Koro server...")
        yield
        logger.info(f"Shutting down with {len(app.state.hub.registry)} live matches")

    app = FastAPI(title="Machi Koro Arena Server", version="0.1.0", lifespan=lifespan)
    app.state.hub = MatchHub(
        MatchRegistry(settings.game_config(), code_length=settings.code_length)
    )

    @app.exception_handler(MachiKoroError)
    async def engine_error_handler(request: Request, exc: MachiKoroError):
        return JSONResponse(
            status_code=status_for(exc),
            content={"error": exc.code, "detail": str(exc)},
        )

    app.include_router(router)
    return app


def get_hub(request: Request) -> MatchHub:
    return request.app.state.hub


router = APIRouter()


@router.post("/matches", response_model=SeatResponse)
async def create_match(req: CreateMatchRequest, hub: MatchHub = Depends(get_hub)):
    match, player_id = await hub.create_match(req.player_name)
    return SeatResponse(match_code=match.code, player_id=player_id, snapshot=serialize_snapshot(match))


@router.post("/matches/{code}/join", response_model=SeatResponse)
async def join_match(code: str, req: JoinMatchRequest, hub: MatchHub = Depends(get_hub)):
    match, player_id = await hub.join(code, req.player_name)
    return SeatResponse(match_code=code, player_id=player_id, snapshot=serialize_snapshot(match))


@router.post("/matches/{code}/start")
async def start_match(code: str, req: PlayerRequest, hub: MatchHub = Depends(get_hub)):
    match, _ = await hub.dispatch(code, req.player_id, Action(ActionType.START_GAME))
    return serialize_snapshot(match)


@router.post("/matches/{code}/roll", response_model=RollResponse)
async def roll(code: str, req: RollRequest, hub: MatchHub = Depends(get_hub)):
    if req.dice is not None:
        action = Action(ActionType.ROLL_DICE, dice=req.dice)
    else:
        action = Action(ActionType.ROLL_DICE, dice_count=req.dice_count)
    _, outcome = await hub.dispatch(code, req.player_id, action)
    return RollResponse(
        dice=list(outcome.roll.dice),
        total=outcome.roll.total,
        is_double=outcome.roll.is_double,
        income=[IncomeEffectDTO(**map_income_effect(e)) for e in outcome.income.effects],
        balances=dict(outcome.balances),
    )


@router.post("/matches/{code}/purchase", response_model=PurchaseResponse)
async def purchase(code: str, req: PurchaseRequest, hub: MatchHub = Depends(get_hub)):
    match, result = await hub.dispatch(code, req.player_id, Action(ActionType.BUY, card=req.card))
    return PurchaseResponse(
        card=result.asset_id.value,
        card_name=result.name,
        price=result.cost,
        coins=result.new_balance,
        is_landmark=result.is_landmark,
        has_won=match.check_win(req.player_id),
    )


@router.post("/matches/{code}/end-turn", response_model=EndTurnResponse)
async def end_turn(code: str, req: PlayerRequest, hub: MatchHub = Depends(get_hub)):
    _, outcome = await hub.dispatch(code, req.player_id, Action(ActionType.END_TURN))
    return EndTurnResponse(
        bonus_turn=outcome.bonus_turn,
        current_player_id=outcome.current_player_id,
        current_player_index=outcome.current_player_index,
        turn=outcome.turn,
    )


@router.post("/matches/{code}/leave", response_model=LeaveResponse)
async def leave(code: str, req: PlayerRequest, hub: MatchHub = Depends(get_hub)):
    seated, closed = await hub.leave(req.player_id, code)
    return LeaveResponse(match_code=seated, match_closed=closed)


@router.get("/matches/{code}/snapshot")
async def get_snapshot(code: str, hub: MatchHub = Depends(get_hub)):
    return serialize_snapshot(hub.registry.get(code))


@router.get("/matches/{code}/legal_actions")
async def legal_actions(code: str, player_id: str, hub: MatchHub = Depends(get_hub)):
    match = hub.registry.get(code)
    acts = get_legal_actions(match, player_id)
    return {"match_code": code, "player_id": player_id, "actions": [a.to_dict() for a in acts]}


@router.websocket("/ws/matches/{code}")
async def ws_match(websocket: WebSocket, code: str, player_id: Optional[str] = None):
    hub: MatchHub = websocket.app.state.hub
    await websocket.accept()
    try:
        queue = await hub.subscribe(code)
    except NotFoundError:
        await websocket.close(code=4404)
        return

    async def sender():
        while True:
            msg = await queue.get()
            await websocket.send_json(msg)

    sender_task = asyncio.create_task(sender())
    try:
        while True:
            try:
                message = await websocket.receive_text()
            except WebSocketDisconnect:
                break
            if player_id is None:
                continue
            try:
                msg = ActionMessage.model_validate_json(message)
                action = Action(ActionType(msg.action_type), **msg.params)
            except (ValueError, TypeError) as exc:
                await websocket.send_json({"type": "error", "error": "invalid_action", "detail": str(exc)})
                continue
            try:
                await hub.dispatch(code, player_id, action)
            except MachiKoroError as exc:
                await websocket.send_json({"type": "error", "error": exc.code, "detail": str(exc)})
    finally:
        sender_task.cancel()
        await hub.unsubscribe(code, queue)
        if player_id is not None and hub.registry.match_code_for(player_id) == code:
            logger.info(f"Player {player_id} disconnected from match {code}")
            await hub.leave(player_id, code)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_server_settings()
    uvicorn.run("server.app:app", host=_settings.host, port=_settings.port)
