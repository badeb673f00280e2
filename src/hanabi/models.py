"""Data models for the Hanabi table tracker."""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_serializer, model_validator


class Color(str, Enum):
    """Firework colors."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    WHITE = "white"


Number = Literal[1, 2, 3, 4, 5]

COLORS: list[Color] = list(Color)
NUMBERS: list[Number] = [1, 2, 3, 4, 5]

# Card distribution: 1s x3, 2s x2, 3s x2, 4s x2, 5s x1 per color = 10 per color, 50 total
CARD_COUNTS: dict[int, int] = {1: 3, 2: 2, 3: 2, 4: 2, 5: 1}
DECK_SIZE = len(COLORS) * sum(CARD_COUNTS.values())

MAX_HINT_TOKENS = 8
MAX_STRIKES = 3
MAX_SCORE = 25


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _ordered_colors(values: set[Color]) -> list[str]:
    return [c.value for c in COLORS if c in values]


def _ordered_numbers(values: set[int]) -> list[int]:
    return [n for n in NUMBERS if n in values]


class Card(BaseModel):
    """An observed card. The id follows the physical card between hand and pile."""

    id: str = Field(default_factory=lambda: new_id("card"))
    color: Color
    number: Number

    def __str__(self) -> str:
        return f"{self.color.value[0].upper()}{self.number}"

    @property
    def identity(self) -> tuple[Color, int]:
        return (self.color, self.number)


class ManualExclusions(BaseModel):
    """Colors and numbers ruled out by deduction rather than by a clue."""

    colors: set[Color] = Field(default_factory=set)
    numbers: set[Number] = Field(default_factory=set)

    @field_serializer("colors")
    def serialize_colors(self, value: set[Color]) -> list[str]:
        return _ordered_colors(value)

    @field_serializer("numbers")
    def serialize_numbers(self, value: set[int]) -> list[int]:
        return _ordered_numbers(value)


class CardPossibilities(BaseModel):
    """What the holder of a hidden card knows about it."""

    id: str = Field(default_factory=lambda: new_id("card"))
    position: int
    possible_colors: set[Color] = Field(default_factory=lambda: set(COLORS))
    possible_numbers: set[Number] = Field(default_factory=lambda: set(NUMBERS))
    manual_exclusions: ManualExclusions | None = None

    @field_serializer("possible_colors")
    def serialize_possible_colors(self, value: set[Color]) -> list[str]:
        return _ordered_colors(value)

    @field_serializer("possible_numbers")
    def serialize_possible_numbers(self, value: set[int]) -> list[int]:
        return _ordered_numbers(value)


class ClueType(str, Enum):
    """Clue type enumeration."""
    COLOR = "color"
    NUMBER = "number"


class Clue(BaseModel):
    """A clue as given at the table.

    Cards are referenced by id, never by position: positions shift every
    time a card leaves the hand, ids do not.
    """

    id: str = Field(default_factory=lambda: new_id("clue"))
    type: ClueType
    value: Color | Number
    card_ids: list[str]
    timestamp: float = Field(default_factory=time.time)

    @model_validator(mode="after")
    def check_value_matches_type(self) -> "Clue":
        if self.type == ClueType.COLOR and not isinstance(self.value, Color):
            raise ValueError(f"Color clue needs a color, got {self.value!r}")
        if self.type == ClueType.NUMBER and isinstance(self.value, Color):
            raise ValueError(f"Number clue needs a number, got {self.value!r}")
        if not self.card_ids:
            raise ValueError("Clue must reference at least one card")
        return self


# Hands: opponents' cards are visible to the tracker, the self player's are not
class ObservedHand(BaseModel):
    kind: Literal["observed"] = "observed"
    cards: list[Card] = Field(default_factory=list)


class HiddenHand(BaseModel):
    kind: Literal["hidden"] = "hidden"
    cards: list[CardPossibilities] = Field(default_factory=list)


Hand = Annotated[ObservedHand | HiddenHand, Field(discriminator="kind")]


class Player(BaseModel):
    """A player seated at the table."""

    id: str
    name: str
    is_me: bool = False
    hand: Hand
    clues_received: list[Clue] = Field(default_factory=list)

    @property
    def card_ids(self) -> list[str]:
        return [card.id for card in self.hand.cards]


class TrackerSettings(BaseModel):
    """Per-game display and rule settings.

    focus_mode is the relaxed mode: hint tokens are not enforced, three
    strikes do not end the game and card input for opponents is optional.
    """

    show_safe_to_play: bool = False
    show_safe_to_discard: bool = False
    show_deductions: bool = False
    focus_mode: bool = False


class GameSetup(BaseModel):
    """Player names in seating order and which seat is the local player."""

    player_names: list[str] = Field(min_length=2, max_length=5)
    my_player_index: int = 0

    @model_validator(mode="after")
    def check_index(self) -> "GameSetup":
        if not 0 <= self.my_player_index < len(self.player_names):
            raise ValueError(
                f"my_player_index {self.my_player_index} out of range for "
                f"{len(self.player_names)} players"
            )
        if any(not name.strip() for name in self.player_names):
            raise ValueError("Player names must not be blank")
        return self

    @property
    def player_count(self) -> int:
        return len(self.player_names)


class PendingCardInput(BaseModel):
    """An opponent drew a card whose identity has not been entered yet."""

    player_id: str
    position: int


class GamePhase(str, Enum):
    """Lifecycle phase, derived from the state flags."""
    SETUP = "setup"
    ACTIVE = "active"
    LAST_ROUND = "last_round"
    GAME_OVER = "game_over"


class GameState(BaseModel):
    """The tracked state of a physical Hanabi game."""

    game_id: str = Field(default_factory=lambda: new_id("game"))
    players: list[Player]
    my_player_id: str
    current_view_player_id: str

    # Fireworks: color -> highest successfully played number (0 if none)
    fireworks: dict[Color, int] = Field(default_factory=lambda: {c: 0 for c in COLORS})

    discard_pile: list[Card] = Field(default_factory=list)

    # Tokens
    hint_tokens: int = MAX_HINT_TOKENS
    strike_tokens: int = 0

    deck_count: int
    settings: TrackerSettings = Field(default_factory=TrackerSettings)

    is_game_over: bool = False
    game_over_reason: str | None = None
    last_round_started: bool = False
    needs_card_input: bool = True
    pending_card_input: PendingCardInput | None = None

    @property
    def score(self) -> int:
        """Current score (sum of firework heights)."""
        return sum(self.fireworks.values())

    @property
    def phase(self) -> GamePhase:
        if self.is_game_over:
            return GamePhase.GAME_OVER
        if self.needs_card_input:
            return GamePhase.SETUP
        if self.last_round_started:
            return GamePhase.LAST_ROUND
        return GamePhase.ACTIVE

    @property
    def my_player(self) -> Player:
        return self.get_player(self.my_player_id)

    @property
    def opponents(self) -> list[Player]:
        return [p for p in self.players if not p.is_me]

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def get_player(self, player_id: str) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise KeyError(player_id)
        return player

    @field_serializer("fireworks")
    def serialize_fireworks(self, value: dict[Color, int]) -> dict[str, int]:
        return {c.value: value.get(c, 0) for c in COLORS}

    def summary(self) -> dict[str, Any]:
        """Public counters, for logs and API responses."""
        return {
            "score": self.score,
            "phase": self.phase.value,
            "hint_tokens": self.hint_tokens,
            "strike_tokens": self.strike_tokens,
            "deck_count": self.deck_count,
        }
