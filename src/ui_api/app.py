"""FastAPI app for the tracker UI."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.hanabi import (
    GameHistory,
    GameSetup,
    GameState,
    InvalidReferenceError,
    ResourceExhaustedError,
    TrackerError,
    TrackerSettings,
    auto_deduce,
    clear_my_deductions,
    complete_card_input,
    discard_card,
    edit_player_hand,
    finish_last_round,
    give_clue,
    initialize_game,
    play_card,
    record_drawn_card,
    set_view_player,
    toggle_my_exclusion,
    update_settings,
    view_for_player,
)

from .models import (
    CardActionRequest,
    CardInputRequest,
    ClueRequest,
    DrawnCardRequest,
    EditHandRequest,
    ExclusionToggleRequest,
    GameCreateRequest,
    GameResponse,
    SavedGameSummary,
    SettingsUpdateRequest,
    ViewPlayerRequest,
)
from .storage import ensure_storage, list_games, load_game, save_game


@dataclass
class Session:
    state: GameState
    history: GameHistory = field(default_factory=GameHistory)


app = FastAPI(title="Hanabi Tracker UI API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_sessions: dict[str, Session] = {}
logger = logging.getLogger("ui_api")

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _session(game_id: str) -> Session:
    """Find a game in memory, falling back to storage."""
    session = _sessions.get(game_id)
    if session:
        return session
    try:
        state = load_game(game_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Game not found")
    session = Session(state=state)
    _sessions[game_id] = session
    logger.info("Loaded game %s from storage", game_id)
    return session


def _response(session: Session) -> GameResponse:
    state = session.state
    return GameResponse(
        game_id=state.game_id,
        state=state.model_dump(mode="json"),
        score=state.score,
        phase=state.phase.value,
        can_undo=session.history.can_undo,
    )


def _http_error(exc: TrackerError) -> HTTPException:
    if isinstance(exc, ResourceExhaustedError):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _apply(
    game_id: str,
    transition: Callable[[GameState], GameState],
    *,
    undoable: bool = True,
) -> GameResponse:
    """Run a transition on a session, keep the previous state for undo and persist."""
    session = _session(game_id)
    previous = session.state
    try:
        new_state = transition(previous)
    except TrackerError as exc:
        logger.warning("Rejected request for game %s: %s", game_id, exc)
        raise _http_error(exc)

    # The session never runs ahead of the stored game
    save_game(new_state)
    if undoable:
        session.history.push(previous)
    session.state = new_state

    if new_state.is_game_over and not previous.is_game_over:
        logger.info("Game %s over (%s), score %d", game_id, new_state.game_over_reason, new_state.score)
    return _response(session)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/games", response_model=GameResponse)
def create_game(req: GameCreateRequest) -> GameResponse:
    try:
        setup = GameSetup(player_names=req.player_names, my_player_index=req.my_player_index)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    ensure_storage()
    state = initialize_game(setup, TrackerSettings(focus_mode=req.focus_mode))
    session = Session(state=state)
    _sessions[state.game_id] = session
    save_game(state)
    return _response(session)


@app.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: str) -> GameResponse:
    return _response(_session(game_id))


@app.post("/games/{game_id}/hands", response_model=GameResponse)
def enter_hands(game_id: str, req: CardInputRequest) -> GameResponse:
    hands = {
        pid: [c.model_dump(exclude_none=True) for c in cards]
        for pid, cards in req.hands.items()
    }
    return _apply(game_id, lambda s: complete_card_input(s, hands))


@app.put("/games/{game_id}/players/{player_id}/hand", response_model=GameResponse)
def edit_hand(game_id: str, player_id: str, req: EditHandRequest) -> GameResponse:
    cards = [c.model_dump(exclude_none=True) for c in req.cards]
    return _apply(game_id, lambda s: edit_player_hand(s, player_id, cards))


@app.post("/games/{game_id}/clue", response_model=GameResponse)
def post_clue(game_id: str, req: ClueRequest) -> GameResponse:
    return _apply(
        game_id,
        lambda s: give_clue(s, req.receiver_id, req.positions, req.clue_type, req.clue_value),
    )


@app.post("/games/{game_id}/play", response_model=GameResponse)
def post_play(game_id: str, req: CardActionRequest) -> GameResponse:
    return _apply(
        game_id,
        lambda s: play_card(s, req.player_id, req.position, req.revealed_color, req.revealed_number),
    )


@app.post("/games/{game_id}/discard", response_model=GameResponse)
def post_discard(game_id: str, req: CardActionRequest) -> GameResponse:
    return _apply(
        game_id,
        lambda s: discard_card(s, req.player_id, req.position, req.revealed_color, req.revealed_number),
    )


@app.post("/games/{game_id}/draw", response_model=GameResponse)
def post_drawn_card(game_id: str, req: DrawnCardRequest) -> GameResponse:
    return _apply(game_id, lambda s: record_drawn_card(s, req.color, req.number))


@app.post("/games/{game_id}/deductions/auto", response_model=GameResponse)
def post_auto_deduce(game_id: str) -> GameResponse:
    return _apply(game_id, auto_deduce)


@app.post("/games/{game_id}/deductions/toggle", response_model=GameResponse)
def post_toggle_exclusion(game_id: str, req: ExclusionToggleRequest) -> GameResponse:
    return _apply(
        game_id,
        lambda s: toggle_my_exclusion(s, req.position, req.exclusion_type, req.value),
    )


@app.delete("/games/{game_id}/deductions", response_model=GameResponse)
def delete_deductions(game_id: str) -> GameResponse:
    return _apply(game_id, clear_my_deductions)


@app.patch("/games/{game_id}/settings", response_model=GameResponse)
def patch_settings(game_id: str, req: SettingsUpdateRequest) -> GameResponse:
    changes = req.model_dump(exclude_none=True)
    # Settings changes are not game actions and are not undoable
    return _apply(game_id, lambda s: update_settings(s, **changes), undoable=False)


@app.post("/games/{game_id}/view", response_model=GameResponse)
def post_view_player(game_id: str, req: ViewPlayerRequest) -> GameResponse:
    return _apply(game_id, lambda s: set_view_player(s, req.player_id), undoable=False)


@app.post("/games/{game_id}/finish", response_model=GameResponse)
def post_finish(game_id: str) -> GameResponse:
    return _apply(game_id, finish_last_round)


@app.post("/games/{game_id}/undo", response_model=GameResponse)
def post_undo(game_id: str) -> GameResponse:
    session = _session(game_id)
    previous = session.history.undo()
    if previous is None:
        raise HTTPException(status_code=409, detail="Nothing to undo")
    try:
        save_game(previous)
    except OSError:
        session.history.push(previous)
        raise
    session.state = previous
    return _response(session)


@app.get("/games/{game_id}/players/{player_id}/view")
def get_player_view(game_id: str, player_id: str) -> dict[str, Any]:
    session = _session(game_id)
    try:
        return view_for_player(session.state, player_id)
    except InvalidReferenceError:
        raise HTTPException(status_code=404, detail=f"Player not found: {player_id}")


@app.get("/saved", response_model=list[SavedGameSummary])
def get_saved_games() -> list[dict[str, Any]]:
    return list_games()


# =============================================================================
# Static File Serving (Production)
# =============================================================================

# Serve built UI in production (must be last to not override API routes)
_ui_dist = Path(__file__).parent.parent.parent / "ui" / "dist"
if _ui_dist.exists():
    app.mount("/", StaticFiles(directory=_ui_dist, html=True), name="ui")
