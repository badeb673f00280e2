"""Hanabi table tracker: rules engine and knowledge inference."""

from .errors import (
    TrackerError,
    InvalidReferenceError,
    InvalidInputError,
    ResourceExhaustedError,
)
from .models import (
    Color,
    Number,
    COLORS,
    NUMBERS,
    CARD_COUNTS,
    Card,
    CardPossibilities,
    ManualExclusions,
    Clue,
    ClueType,
    ObservedHand,
    HiddenHand,
    Player,
    TrackerSettings,
    GameSetup,
    PendingCardInput,
    GamePhase,
    GameState,
)
from .knowledge import (
    apply_clue,
    get_final_possibilities,
    get_possibility_count,
    get_card_summary,
    new_card_possibilities,
    toggle_exclusion,
    clear_exclusions,
)
from .inference import (
    compute_player_knowledge,
    is_safe_to_play,
    is_safe_to_discard,
    apply_auto_deductions,
)
from .game import (
    get_hand_size,
    initialize_game,
    complete_card_input,
    edit_player_hand,
    record_drawn_card,
    give_clue,
    play_card,
    discard_card,
    auto_deduce,
    toggle_my_exclusion,
    clear_my_deductions,
    update_settings,
    set_view_player,
    check_terminal,
    finish_last_round,
)
from .history import GameHistory
from .visibility import (
    visible_cards,
    knowledge_for_player,
    view_for_player,
)

__all__ = [
    # Errors
    "TrackerError",
    "InvalidReferenceError",
    "InvalidInputError",
    "ResourceExhaustedError",
    # Models
    "Color",
    "Number",
    "COLORS",
    "NUMBERS",
    "CARD_COUNTS",
    "Card",
    "CardPossibilities",
    "ManualExclusions",
    "Clue",
    "ClueType",
    "ObservedHand",
    "HiddenHand",
    "Player",
    "TrackerSettings",
    "GameSetup",
    "PendingCardInput",
    "GamePhase",
    "GameState",
    # Knowledge
    "apply_clue",
    "get_final_possibilities",
    "get_possibility_count",
    "get_card_summary",
    "new_card_possibilities",
    "toggle_exclusion",
    "clear_exclusions",
    # Inference
    "compute_player_knowledge",
    "is_safe_to_play",
    "is_safe_to_discard",
    "apply_auto_deductions",
    # Game
    "get_hand_size",
    "initialize_game",
    "complete_card_input",
    "edit_player_hand",
    "record_drawn_card",
    "give_clue",
    "play_card",
    "discard_card",
    "auto_deduce",
    "toggle_my_exclusion",
    "clear_my_deductions",
    "update_settings",
    "set_view_player",
    "check_terminal",
    "finish_last_round",
    # History
    "GameHistory",
    # Visibility
    "visible_cards",
    "knowledge_for_player",
    "view_for_player",
]
