from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    engine_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    unknown_position_handler,
)
from .session import PositionStore, UnknownPositionError
from ...config import Settings, load_settings
from ...engine.attacks import attackers_of
from ...engine.castling import rights_to_str
from ...engine.errors import EngineError
from ...engine.lookup import piece_type_from_name, reachability_table, targets
from ...engine.move import square_to_str, str_to_square
from ...engine.perft import divide as perft_divide
from ...engine.perft import perft as perft_nodes
from ...engine.piece import BLACK, WHITE, color_name
from ...engine.position import STARTPOS_FEN, Position


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_POSITION_PATH = re.compile(r"^/api/positions/([^/]+)")


class CreatePositionRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="FEN string; start position if omitted")


class CreatePositionResponse(BaseModel):
    position_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Long algebraic move, e.g. e2-e4, Ng1-f3, O-O")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN, description="FEN string")
    depth: int = Field(default=1, ge=0)
    divide: bool = False


class PerftResponse(BaseModel):
    fen: str
    depth: int
    nodes: int
    divide: Optional[Dict[str, int]] = None


class PositionState(BaseModel):
    position_id: str
    fen: str
    turn: str
    legal_moves: List[str]
    in_check: bool
    castling: str
    en_passant: Optional[str]
    halfmove_clock: int
    fullmove_number: int
    last_move: Optional[str]
    move_history: List[str]


class AttackResponse(BaseModel):
    square: str
    color: str
    attacked: bool
    attackers: List[str]


class ReachabilityResponse(BaseModel):
    piece: str
    targets: Dict[str, List[str]]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Chess Rules API", version="0.1.0")
    app.state.settings = settings

    logging.basicConfig(level=settings.log_level)

    app.add_exception_handler(EngineError, engine_error_handler)
    app.add_exception_handler(UnknownPositionError, unknown_position_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = PositionStore()
    app.state.positions = store

    @app.middleware("http")
    async def tag_request(request: Request, call_next):
        """Log each request under an id and echo the id back in ``x-request-id``.

        A caller-supplied id is kept; otherwise a fresh UUID4 is generated.
        Requests against a session also carry its ``position_id``.
        """
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        match = _POSITION_PATH.match(request.url.path)
        position_id = match.group(1) if match else None

        logger.info(
            "request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "position_id": position_id,
            },
        )

        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "response",
            extra={
                "request_id": request_id,
                "position_id": position_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/positions", response_model=CreatePositionResponse)
    async def create_position(
        req: Optional[CreatePositionRequest] = None,
    ) -> CreatePositionResponse:
        position_id, position = store.create(req.fen if req is not None else None)
        logger.info("position created", extra={"position_id": position_id})
        return CreatePositionResponse(position_id=position_id, fen=position.to_fen())

    @app.get("/api/positions/{position_id}/state", response_model=PositionState)
    async def get_state(position_id: str) -> PositionState:
        return _state(position_id, store.get(position_id))

    @app.post("/api/positions/{position_id}/fen", response_model=PositionState)
    async def set_position(position_id: str, req: SetPositionRequest) -> PositionState:
        return _state(position_id, store.reset(position_id, req.fen))

    @app.post("/api/positions/{position_id}/move", response_model=PositionState)
    async def make_move(position_id: str, req: MoveRequest) -> PositionState:
        return _state(position_id, store.play(position_id, req.move))

    @app.post("/api/positions/{position_id}/undo", response_model=PositionState)
    async def undo(position_id: str) -> PositionState:
        _, position = store.take_back(position_id)
        return _state(position_id, position)

    @app.post("/api/positions/{position_id}/fork", response_model=CreatePositionResponse)
    async def fork(position_id: str) -> CreatePositionResponse:
        new_id, clone = store.fork(position_id)
        logger.info("position forked", extra={"position_id": new_id, "parent_id": position_id})
        return CreatePositionResponse(position_id=new_id, fen=clone.to_fen())

    @app.delete("/api/positions/{position_id}", status_code=204)
    async def delete_position(position_id: str) -> Response:
        store.delete(position_id)
        return Response(status_code=204)

    @app.get("/api/positions/{position_id}/attacks/{square}", response_model=AttackResponse)
    async def get_attacks(
        position_id: str,
        square: str,
        color: Optional[Literal["white", "black"]] = Query(default=None),
    ) -> AttackResponse:
        """Attack query against ``color`` as defender (side to move by default)."""
        position = store.get(position_id)
        sq = str_to_square(square)
        defender = position.turn if color is None else (WHITE if color == "white" else BLACK)
        found = attackers_of(position, sq, defender)
        return AttackResponse(
            square=square,
            color=color_name(defender),
            attacked=bool(found),
            attackers=[square_to_str(s) for s in found],
        )

    @app.post("/api/perft", response_model=PerftResponse)
    async def perft(req: PerftRequest) -> PerftResponse:
        if req.depth > settings.max_perft_depth:
            raise HTTPException(
                status_code=400,
                detail=f"depth must be <= {settings.max_perft_depth}",
            )
        if req.divide and req.depth < 1:
            raise HTTPException(status_code=400, detail="divide needs depth >= 1")
        position = Position.from_fen(req.fen)
        if req.divide:
            counts = perft_divide(position, req.depth)
            return PerftResponse(
                fen=req.fen, depth=req.depth, nodes=sum(counts.values()), divide=counts
            )
        return PerftResponse(fen=req.fen, depth=req.depth, nodes=perft_nodes(position, req.depth))

    @app.get("/api/reachability/{piece}", response_model=ReachabilityResponse)
    async def reachability(piece: str) -> ReachabilityResponse:
        try:
            ptype = piece_type_from_name(piece)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        table = reachability_table(ptype)
        return ReachabilityResponse(
            piece=piece.lower(),
            targets={
                square_to_str(sq): [square_to_str(t) for t in targets(mask)]
                for sq, mask in enumerate(table)
            },
        )

    return app


def _state(position_id: str, position: Position) -> PositionState:
    history = [m.to_lan() for m in position.moves_played]
    return PositionState(
        position_id=position_id,
        fen=position.to_fen(),
        turn=color_name(position.turn),
        legal_moves=[m.to_lan() for m in position.legal_moves],
        in_check=position.in_check(),
        castling=rights_to_str(position.castling_rights),
        en_passant=None if position.ep_square is None else square_to_str(position.ep_square),
        halfmove_clock=position.halfmove_clock,
        fullmove_number=position.fullmove_number,
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
