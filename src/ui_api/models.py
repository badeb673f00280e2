"""Request/response models for the UI API."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from src.hanabi.models import Color, ClueType, Number


class CardInput(BaseModel):
    color: Color
    number: Number
    id: str | None = None  # keep the id when correcting an entered card


class GameCreateRequest(BaseModel):
    player_names: list[str] = Field(min_length=2, max_length=5)
    my_player_index: int = 0
    focus_mode: bool = False


class CardInputRequest(BaseModel):
    """Cards dealt to each opponent, keyed by player id, left to right."""
    hands: dict[str, list[CardInput]]


class EditHandRequest(BaseModel):
    cards: list[CardInput]


class ClueRequest(BaseModel):
    receiver_id: str
    positions: list[int]
    clue_type: ClueType
    clue_value: Color | Number | None = None


class CardActionRequest(BaseModel):
    """Play or discard. The reveal is required for the local player's cards."""
    player_id: str
    position: int
    revealed_color: Color | None = None
    revealed_number: Number | None = None


class DrawnCardRequest(BaseModel):
    color: Color
    number: Number


class ExclusionToggleRequest(BaseModel):
    position: int
    exclusion_type: ClueType
    value: Color | Number


class SettingsUpdateRequest(BaseModel):
    show_safe_to_play: bool | None = None
    show_safe_to_discard: bool | None = None
    show_deductions: bool | None = None
    focus_mode: bool | None = None


class ViewPlayerRequest(BaseModel):
    player_id: str


class GameResponse(BaseModel):
    """Full state plus the derived counters the UI shows."""
    game_id: str
    state: dict[str, Any]
    score: int
    phase: Literal["setup", "active", "last_round", "game_over"]
    can_undo: bool


class SavedGameSummary(BaseModel):
    game_id: str
    players: list[str]
    score: int
    phase: str
    hint_tokens: int
    strike_tokens: int
    deck_count: int
