"""Visibility and view generation for the tracker.

Core principle: A player can see ALL other players' hands but NOT their own cards.
They only know about their own cards through clues received and deduction.
"""

from __future__ import annotations

from typing import Any

from .errors import InvalidReferenceError
from .inference import compute_player_knowledge, is_safe_to_discard, is_safe_to_play
from .knowledge import get_card_summary, get_final_possibilities, get_possibility_count
from .models import COLORS, NUMBERS, Card, CardPossibilities, GameState


def visible_cards(state: GameState) -> list[Card]:
    """Every card the local player can see: the discard pile and opponents' hands."""
    cards: list[Card] = list(state.discard_pile)
    for player in state.opponents:
        cards.extend(player.hand.cards)  # type: ignore[arg-type]
    return cards


def knowledge_for_player(state: GameState, player_id: str) -> list[CardPossibilities]:
    """
    What a player knows about their own hand.

    For the local player this is the tracked hidden hand. For an opponent it
    is rebuilt from the clues they received, since the tracker sees their
    actual cards.
    """
    player = state.find_player(player_id)
    if player is None:
        raise InvalidReferenceError(f"Unknown player: {player_id}")
    if player.is_me:
        return list(player.hand.cards)  # type: ignore[arg-type]
    return compute_player_knowledge(player.hand.cards, player.clues_received)  # type: ignore[arg-type]


def _describe_card(state: GameState, card: CardPossibilities) -> dict[str, Any]:
    settings = state.settings
    colors, numbers = get_final_possibilities(card)
    described: dict[str, Any] = {
        "id": card.id,
        "position": card.position,
        "possible_colors": [c.value for c in COLORS if c in card.possible_colors],
        "possible_numbers": [n for n in NUMBERS if n in card.possible_numbers],
        "possibility_count": get_possibility_count(card),
        "summary": get_card_summary(card),
    }
    if settings.show_deductions:
        described["final_colors"] = [c.value for c in COLORS if c in colors]
        described["final_numbers"] = [n for n in NUMBERS if n in numbers]
    if settings.show_safe_to_play:
        described["safe_to_play"] = is_safe_to_play(card, state.fireworks)
    if settings.show_safe_to_discard:
        described["safe_to_discard"] = is_safe_to_discard(card, state.fireworks, state.discard_pile)
    return described


def view_for_player(state: GameState, player_id: str) -> dict[str, Any]:
    """
    Build the view of the table from one player's seat.

    The player's own cards appear only as knowledge; every other hand is
    shown as observed by the tracker. Safety flags and deductions are
    included only when the matching setting is on.

    Args:
        state: Current game state
        player_id: The player whose seat the view is from

    Returns:
        View dictionary for the presentation layer
    """
    player = state.find_player(player_id)
    if player is None:
        raise InvalidReferenceError(f"Unknown player: {player_id}")

    # Hidden (local player) hands never appear here, whoever is viewing
    visible_hands: dict[str, list[dict[str, Any]]] = {}
    for other in state.opponents:
        if other.id != player_id:
            visible_hands[other.id] = [
                {"id": card.id, "color": card.color.value, "number": card.number}
                for card in other.hand.cards
            ]

    knowledge = knowledge_for_player(state, player_id)

    return {
        "player_id": player_id,
        "player_name": player.name,
        "is_me": player.is_me,

        # Own hand - only knowledge from clues, NOT actual cards
        "hand_knowledge": [_describe_card(state, card) for card in knowledge],
        "clues_received": [clue.model_dump(mode="json") for clue in player.clues_received],

        # Other hands - VISIBLE
        "visible_hands": visible_hands,

        # Public table state
        "fireworks": {c.value: state.fireworks[c] for c in COLORS},
        "discard_pile": [
            {"id": card.id, "color": card.color.value, "number": card.number}
            for card in state.discard_pile
        ],
        "hint_tokens": state.hint_tokens,
        "strike_tokens": state.strike_tokens,
        "deck_count": state.deck_count,
        "score": state.score,
        "phase": state.phase.value,
        "last_round_started": state.last_round_started,
        "game_over": state.is_game_over,
    }
