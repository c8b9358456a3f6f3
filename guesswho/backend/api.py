"""FastAPI endpoints for game intents, roster relay and websocket sync."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from .config import GameSettings, load_settings
from .content import ContentProvider
from .context import ActivityContext
from .errors import GameError, ProviderError
from .models import Participant, RoundPhase
from .roster import InMemoryRosterProvider
from .samples import create_sample_content, create_sample_roster
from .session import GameSession


class GameStateResponse(BaseModel):
    state: dict[str, Any]


class SelectRequest(BaseModel):
    player_id: str = Field(min_length=1)
    phase: RoundPhase | None = None


class LockInRequest(BaseModel):
    phase: RoundPhase | None = None


class ResultReport(BaseModel):
    reporter_id: str = Field(min_length=1)
    round_index: int = Field(ge=1)
    initial_guess: str | None = None
    final_guess: str | None = None


class ParticipantPayload(BaseModel):
    id: str = Field(min_length=1)
    display_name: str = Field(min_length=1, max_length=100)
    avatar_ref: str | None = None
    bot: bool = False


class RosterUpdate(BaseModel):
    participants: list[ParticipantPayload]
    current_participant_id: str | None = None


class GameWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._pending: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def send_state(self, websocket: WebSocket, state: dict[str, Any]) -> None:
        await websocket.send_json({"type": "state.full", "state": state})

    async def broadcast_state(self, state: dict[str, Any]) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await self.send_state(websocket, state)
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket)

    def publish(self, state: dict[str, Any]) -> None:
        """Schedule a broadcast from synchronous session listeners."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.broadcast_state(state))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def _http_error(exc: GameError) -> HTTPException:
    if isinstance(exc, ProviderError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=409, detail=str(exc))


def _default_roster(settings: GameSettings) -> InMemoryRosterProvider:
    if settings.dev_mode:
        return create_sample_roster()
    return InMemoryRosterProvider()


def create_app(
    roster: InMemoryRosterProvider | None = None,
    content: ContentProvider | None = None,
    settings: GameSettings | None = None,
) -> FastAPI:
    game_settings = settings if settings is not None else load_settings()
    roster_provider = roster if roster is not None else _default_roster(game_settings)
    context = ActivityContext(
        roster=roster_provider,
        content=content if content is not None else create_sample_content(),
        settings=game_settings,
    )
    websocket_hub = GameWebSocketHub()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await context.close()

    app = FastAPI(title="Guess Who Said It API", version="0.1.0", lifespan=lifespan)
    app.state.context = context
    app.state.roster = roster_provider
    app.state.websocket_hub = websocket_hub
    app.state.published_session = None

    async def get_session() -> GameSession:
        try:
            session = await context.start()
        except GameError as exc:
            raise _http_error(exc) from exc
        if app.state.published_session is not session:
            app.state.published_session = session
            session.subscribe(websocket_hub.publish)
        return session

    def run_intent(session: GameSession, intent: Any) -> GameStateResponse:
        try:
            intent()
        except GameError as exc:
            raise _http_error(exc) from exc
        return GameStateResponse(state=session.snapshot())

    @app.get("/api/game", response_model=GameStateResponse)
    async def get_game(session: GameSession = Depends(get_session)) -> GameStateResponse:
        return GameStateResponse(state=session.snapshot())

    @app.post("/api/game/start", response_model=GameStateResponse)
    async def start_game(session: GameSession = Depends(get_session)) -> GameStateResponse:
        return run_intent(session, session.start_game)

    @app.post("/api/game/select", response_model=GameStateResponse)
    async def select_candidate(
        payload: SelectRequest,
        session: GameSession = Depends(get_session),
    ) -> GameStateResponse:
        return run_intent(session, lambda: session.select_candidate(payload.player_id, phase=payload.phase))

    @app.post("/api/game/lock-in", response_model=GameStateResponse)
    async def lock_in(
        payload: LockInRequest | None = None,
        session: GameSession = Depends(get_session),
    ) -> GameStateResponse:
        phase = payload.phase if payload is not None else None
        return run_intent(session, lambda: session.lock_in(phase=phase))

    @app.post("/api/game/result", response_model=GameStateResponse)
    async def report_result(
        payload: ResultReport,
        session: GameSession = Depends(get_session),
    ) -> GameStateResponse:
        return run_intent(
            session,
            lambda: session.report_result(
                payload.reporter_id,
                payload.round_index,
                initial_guess=payload.initial_guess,
                final_guess=payload.final_guess,
            ),
        )

    @app.post("/api/game/continue", response_model=GameStateResponse)
    async def continue_game(session: GameSession = Depends(get_session)) -> GameStateResponse:
        return run_intent(session, session.on_continue)

    @app.post("/api/game/play-again", response_model=GameStateResponse)
    async def play_again(session: GameSession = Depends(get_session)) -> GameStateResponse:
        return run_intent(session, session.on_play_again)

    @app.put("/api/roster", response_model=GameStateResponse)
    async def put_roster(payload: RosterUpdate) -> GameStateResponse:
        if payload.current_participant_id is not None:
            roster_provider.current_participant_id = payload.current_participant_id
        roster_provider.set_participants(
            [
                Participant(
                    id=participant.id,
                    display_name=participant.display_name,
                    avatar_ref=participant.avatar_ref,
                    bot=participant.bot,
                )
                for participant in payload.participants
            ]
        )
        session = await get_session()
        if payload.current_participant_id is not None:
            run_intent(session, session.refresh_identity)
        return GameStateResponse(state=session.snapshot())

    @app.websocket("/ws/game")
    async def game_ws(websocket: WebSocket) -> None:
        try:
            session = await get_session()
        except HTTPException:
            await websocket.close(code=1011)
            return

        await websocket_hub.connect(websocket)
        await websocket_hub.send_state(websocket=websocket, state=session.snapshot())

        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket)

    return app


app = create_app()
