"""Storage helpers for tracked games."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from src.hanabi.models import GameState

logger = logging.getLogger("ui_api")


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _data_dir() -> Path:
    """Get tracker data directory, using env var when set."""
    env_dir = os.environ.get("TRACKER_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return _repo_root() / "tracker_data"


def _base_dir() -> Path:
    return _data_dir() / "sessions"


def _game_path(game_id: str) -> Path:
    # Game ids become filenames; refuse anything that could leave the directory
    if not game_id or "/" in game_id or "\\" in game_id or game_id.startswith("."):
        raise FileNotFoundError(game_id)
    return _base_dir() / f"{game_id}.json"


def ensure_storage() -> None:
    _base_dir().mkdir(parents=True, exist_ok=True)


def save_game(state: GameState) -> Path:
    """Write the whole state as JSON. Returns the written filepath."""
    ensure_storage()
    path = _game_path(state.game_id)
    with open(path, "w") as f:
        json.dump(state.model_dump(mode="json"), f, indent=2)
    return path


def load_game(game_id: str) -> GameState:
    path = _game_path(game_id)
    if not path.exists():
        raise FileNotFoundError(game_id)
    with open(path, "r") as f:
        data = json.load(f)
    return GameState.model_validate(data)


def delete_game(game_id: str) -> bool:
    path = _game_path(game_id)
    if not path.exists():
        return False
    path.unlink()
    logger.info("Deleted stored game %s", game_id)
    return True


def list_games() -> list[dict[str, Any]]:
    """Summaries of every stored game, newest first."""
    ensure_storage()
    games: list[dict[str, Any]] = []
    paths = sorted(_base_dir().glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
    for path in paths:
        try:
            state = load_game(path.stem)
        except (OSError, ValueError) as e:
            logger.warning("Skipping unreadable game file %s: %s", path.name, e)
            continue
        games.append(
            {
                "game_id": state.game_id,
                "players": [p.name for p in state.players],
                **state.summary(),
            }
        )
    return games
