"""Core game logic for tracking a physical Hanabi game.

Every transition takes a GameState and returns a new one. Validation runs
before anything is copied, so a rejected request leaves the input as it was.
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import InvalidInputError, InvalidReferenceError, ResourceExhaustedError
from .inference import apply_auto_deductions
from .knowledge import (
    apply_clue,
    clear_exclusions,
    new_card_possibilities,
    reindex,
    toggle_exclusion,
)
from .models import (
    DECK_SIZE,
    MAX_HINT_TOKENS,
    MAX_SCORE,
    MAX_STRIKES,
    NUMBERS,
    Card,
    CardPossibilities,
    Clue,
    ClueType,
    Color,
    GameSetup,
    GameState,
    HiddenHand,
    Number,
    ObservedHand,
    PendingCardInput,
    Player,
    TrackerSettings,
)
from .visibility import visible_cards

logger = logging.getLogger(__name__)


def get_hand_size(player_count: int) -> int:
    """Hanabi rules: 2-3 players hold 5 cards, 4-5 players hold 4."""
    return 5 if player_count <= 3 else 4


def initialize_game(setup: GameSetup, settings: TrackerSettings | None = None) -> GameState:
    """
    Create a new tracked game.

    The local player starts with a hand of fully unknown cards; opponents
    start with empty hands until their dealt cards are entered with
    complete_card_input.
    """
    hand_size = get_hand_size(setup.player_count)

    players: list[Player] = []
    for index, name in enumerate(setup.player_names):
        is_me = index == setup.my_player_index
        if is_me:
            hand: HiddenHand | ObservedHand = HiddenHand(
                cards=[new_card_possibilities(pos) for pos in range(hand_size)]
            )
        else:
            hand = ObservedHand()
        players.append(Player(id=f"player-{index}", name=name.strip(), is_me=is_me, hand=hand))

    my_player_id = players[setup.my_player_index].id
    state = GameState(
        players=players,
        my_player_id=my_player_id,
        current_view_player_id=my_player_id,
        deck_count=DECK_SIZE - setup.player_count * hand_size,
        settings=settings or TrackerSettings(),
        needs_card_input=True,
    )
    logger.info("Created game %s with %d players", state.game_id, setup.player_count)
    return state


# =============================================================================
# Validation helpers
# =============================================================================


def _require_active(state: GameState) -> None:
    if state.is_game_over:
        raise InvalidInputError("Game is already over")


def _require_ready(state: GameState) -> None:
    """Outside focus mode, table actions wait for every card to be entered."""
    if state.settings.focus_mode:
        return
    if state.needs_card_input:
        raise InvalidInputError("Enter the opponents' cards before recording actions")
    if state.pending_card_input is not None:
        raise InvalidInputError("Enter the drawn card before recording the next action")


def _require_player(state: GameState, player_id: str) -> Player:
    player = state.find_player(player_id)
    if player is None:
        raise InvalidReferenceError(f"Unknown player: {player_id}")
    return player


def _require_position(player: Player, position: int) -> None:
    if position < 0 or position >= len(player.hand.cards):
        raise InvalidReferenceError(f"Invalid card position: {position}")


def _parse_color(value: Any) -> Color:
    try:
        return Color(value)
    except ValueError:
        raise InvalidInputError(f"Invalid color: {value!r}") from None


def _parse_number(value: Any) -> Number:
    if isinstance(value, bool) or value not in NUMBERS:
        raise InvalidInputError(f"Invalid number: {value!r}")
    return value


def _parse_clue_value(clue_type: ClueType | str, value: Any) -> tuple[ClueType, Color | Number]:
    if value is None or value == "":
        raise InvalidInputError("Clue value is required")
    try:
        clue_type = ClueType(clue_type)
    except ValueError:
        raise InvalidInputError(f"Invalid clue type: {clue_type!r}") from None
    if clue_type == ClueType.COLOR:
        return clue_type, _parse_color(value)
    return clue_type, _parse_number(value)


def _replace_player(state: GameState, player: Player) -> None:
    state.players = [player if p.id == player.id else p for p in state.players]


# =============================================================================
# Card input
# =============================================================================


def _build_observed_cards(cards: list[Card | dict[str, Any]]) -> list[Card]:
    built: list[Card] = []
    for card in cards:
        if isinstance(card, Card):
            built.append(card)
            continue
        color = _parse_color(card.get("color"))
        number = _parse_number(card.get("number"))
        # Keep the id of a corrected card so earlier clues still point at it
        if card.get("id"):
            built.append(Card(id=card["id"], color=color, number=number))
        else:
            built.append(Card(color=color, number=number))
    return built


def complete_card_input(
    state: GameState,
    hands: dict[str, list[Card | dict[str, Any]]],
) -> GameState:
    """
    Record the cards dealt to every opponent and leave the setup phase.

    Each opponent must get exactly a full hand, except in focus mode where
    card input is optional and partial hands are accepted.
    """
    hand_size = get_hand_size(len(state.players))
    focus_mode = state.settings.focus_mode

    resolved: dict[str, list[Card]] = {}
    for player_id, cards in hands.items():
        player = _require_player(state, player_id)
        if player.is_me:
            raise InvalidInputError("Cannot enter cards for your own hand")
        observed = _build_observed_cards(cards)
        if len(observed) > hand_size or (not focus_mode and len(observed) != hand_size):
            raise InvalidInputError(
                f"{player.name} needs {hand_size} cards, got {len(observed)}"
            )
        resolved[player_id] = observed

    if not focus_mode:
        missing = [p.name for p in state.opponents if p.id not in resolved]
        if missing:
            raise InvalidInputError(f"Missing cards for: {', '.join(missing)}")

    new_state = state.model_copy(deep=True)
    for player in new_state.opponents:
        if player.id in resolved:
            _replace_player(
                new_state,
                player.model_copy(update={"hand": ObservedHand(cards=resolved[player.id])}),
            )
    new_state.needs_card_input = False
    logger.debug("Card input complete for game %s", new_state.game_id)
    return new_state


def edit_player_hand(
    state: GameState,
    player_id: str,
    cards: list[Card | dict[str, Any]],
) -> GameState:
    """Replace an opponent's observed hand, for correcting mis-entered cards."""
    player = _require_player(state, player_id)
    if player.is_me:
        raise InvalidInputError("Your own cards are hidden; use deductions instead")

    hand_size = get_hand_size(len(state.players))
    observed = _build_observed_cards(cards)
    if len(observed) > hand_size:
        raise InvalidInputError(f"{player.name} can hold at most {hand_size} cards")

    new_state = state.model_copy(deep=True)
    _replace_player(new_state, player.model_copy(update={"hand": ObservedHand(cards=observed)}, deep=True))
    pending = new_state.pending_card_input
    if pending is not None and pending.player_id == player_id and len(observed) > pending.position:
        new_state.pending_card_input = None
    return new_state


def record_drawn_card(state: GameState, color: Color | str, number: int) -> GameState:
    """Enter the identity of the card an opponent just drew."""
    pending = state.pending_card_input
    if pending is None:
        raise InvalidReferenceError("No drawn card is waiting for input")

    player = _require_player(state, pending.player_id)
    card = Card(color=_parse_color(color), number=_parse_number(number))

    new_state = state.model_copy(deep=True)
    cards = list(player.hand.cards)
    cards.insert(min(pending.position, len(cards)), card)
    _replace_player(new_state, player.model_copy(update={"hand": ObservedHand(cards=cards)}, deep=True))
    new_state.pending_card_input = None
    logger.debug("%s drew %s", player.name, card)
    return new_state


# =============================================================================
# Actions
# =============================================================================


def give_clue(
    state: GameState,
    receiver_id: str,
    positions: list[int],
    clue_type: ClueType | str,
    clue_value: Color | Number | str | None,
) -> GameState:
    """
    Record a clue given to a player.

    Selected positions are resolved to card ids before the clue is stored.
    Only the local player's hand is narrowed here: opponents' cards are
    visible, so their clue is just appended to their history.
    """
    _require_active(state)
    _require_ready(state)
    clue_type, value = _parse_clue_value(clue_type, clue_value)
    if not positions:
        raise InvalidInputError("Select at least one card for the clue")

    focus_mode = state.settings.focus_mode
    if state.hint_tokens <= 0 and not focus_mode:
        raise ResourceExhaustedError("No hint tokens available")

    receiver = _require_player(state, receiver_id)
    unique_positions = list(dict.fromkeys(positions))
    for pos in unique_positions:
        _require_position(receiver, pos)

    card_ids = [receiver.hand.cards[pos].id for pos in unique_positions]
    clue = Clue(type=clue_type, value=value, card_ids=card_ids)

    if receiver.is_me:
        hand = apply_clue(receiver.hand.cards, clue)  # type: ignore[arg-type]
        for card in hand:
            if not card.possible_colors or not card.possible_numbers:
                raise InvalidInputError(
                    f"Clue {clue_type.value}={value} contradicts earlier clues "
                    f"for position {card.position}"
                )
        updated = receiver.model_copy(
            update={"hand": HiddenHand(cards=hand), "clues_received": [*receiver.clues_received, clue]},
            deep=True,
        )
    else:
        updated = receiver.model_copy(
            update={"clues_received": [*receiver.clues_received, clue]},
            deep=True,
        )

    new_state = state.model_copy(deep=True)
    _replace_player(new_state, updated)
    new_state.hint_tokens = max(state.hint_tokens - 1, 0)
    logger.debug(
        "Clue %s=%s to %s touching positions %s",
        clue_type.value, value, receiver.name, unique_positions,
    )
    return new_state


def _resolve_removed_card(
    player: Player,
    position: int,
    revealed_color: Color | str | None,
    revealed_number: int | None,
) -> Card:
    """The identity of the card leaving a hand, with the hand card's id."""
    hand_card = player.hand.cards[position]
    if isinstance(hand_card, Card):
        return hand_card.model_copy()

    if revealed_color is None or revealed_number is None:
        raise InvalidInputError("Card color and number required for revealing")
    return Card(
        id=hand_card.id,
        color=_parse_color(revealed_color),
        number=_parse_number(revealed_number),
    )


def _remove_and_replace(new_state: GameState, player: Player, position: int) -> None:
    """Take a card out of a hand and handle the draw that follows."""
    cards = list(player.hand.cards)
    cards.pop(position)
    pending: PendingCardInput | None = None

    if player.is_me:
        hidden: list[CardPossibilities] = cards  # type: ignore[assignment]
        if new_state.deck_count > 0:
            hidden.append(new_card_possibilities(len(hidden)))
        hand: HiddenHand | ObservedHand = HiddenHand(cards=reindex(hidden))
    else:
        hand = ObservedHand(cards=cards)  # type: ignore[arg-type]
        if new_state.deck_count > 0:
            pending = PendingCardInput(player_id=player.id, position=len(cards))

    _replace_player(new_state, player.model_copy(update={"hand": hand}, deep=True))
    new_state.pending_card_input = pending
    new_state.deck_count = max(new_state.deck_count - 1, 0)
    if new_state.deck_count == 0:
        new_state.last_round_started = True


def play_card(
    state: GameState,
    player_id: str,
    position: int,
    revealed_color: Color | str | None = None,
    revealed_number: int | None = None,
) -> GameState:
    """
    Play a card from a player's hand.

    Opponents' cards are read from their visible hand; the local player's
    card must be revealed by the caller.
    """
    _require_active(state)
    _require_ready(state)
    player = _require_player(state, player_id)
    _require_position(player, position)
    card = _resolve_removed_card(player, position, revealed_color, revealed_number)

    new_state = state.model_copy(deep=True)
    current = new_state.fireworks[card.color]

    if current + 1 == card.number:
        new_state.fireworks[card.color] = card.number
        # Bonus hint token for completing a firework
        if card.number == 5:
            new_state.hint_tokens = min(new_state.hint_tokens + 1, MAX_HINT_TOKENS)
        logger.debug("%s played %s successfully", player.name, card)
    else:
        new_state.discard_pile.append(card)
        new_state.strike_tokens = min(new_state.strike_tokens + 1, MAX_STRIKES)
        logger.debug(
            "%s played %s but needed %s %d; strike %d",
            player.name, card, card.color.value, current + 1, new_state.strike_tokens,
        )

    _remove_and_replace(new_state, player, position)
    return _update_terminal(new_state)


def discard_card(
    state: GameState,
    player_id: str,
    position: int,
    revealed_color: Color | str | None = None,
    revealed_number: int | None = None,
) -> GameState:
    """Discard a card from a player's hand and regain a hint token."""
    _require_active(state)
    _require_ready(state)
    player = _require_player(state, player_id)
    _require_position(player, position)
    card = _resolve_removed_card(player, position, revealed_color, revealed_number)

    new_state = state.model_copy(deep=True)
    new_state.discard_pile.append(card)
    new_state.hint_tokens = min(new_state.hint_tokens + 1, MAX_HINT_TOKENS)
    logger.debug("%s discarded %s", player.name, card)

    _remove_and_replace(new_state, player, position)
    return new_state


# =============================================================================
# Deductions and settings
# =============================================================================


def _my_hidden_hand(state: GameState) -> tuple[Player, list[CardPossibilities]]:
    me = state.my_player
    return me, list(me.hand.cards)  # type: ignore[arg-type]


def auto_deduce(state: GameState) -> GameState:
    """Add count-elimination exclusions to the local player's hand."""
    me, hand = _my_hidden_hand(state)
    deduced = apply_auto_deductions(hand, visible_cards(state))
    new_state = state.model_copy(deep=True)
    _replace_player(new_state, me.model_copy(update={"hand": HiddenHand(cards=deduced)}, deep=True))
    return new_state


def toggle_my_exclusion(
    state: GameState,
    position: int,
    clue_type: ClueType | str,
    value: Color | Number | str,
) -> GameState:
    """Mark or unmark a color/number as impossible for one of the local player's cards."""
    me, hand = _my_hidden_hand(state)
    _require_position(me, position)
    clue_type, parsed = _parse_clue_value(clue_type, value)
    hand[position] = toggle_exclusion(hand[position], clue_type, parsed)

    new_state = state.model_copy(deep=True)
    _replace_player(new_state, me.model_copy(update={"hand": HiddenHand(cards=hand)}, deep=True))
    return new_state


def clear_my_deductions(state: GameState) -> GameState:
    me, hand = _my_hidden_hand(state)
    new_state = state.model_copy(deep=True)
    _replace_player(
        new_state,
        me.model_copy(update={"hand": HiddenHand(cards=clear_exclusions(hand))}, deep=True),
    )
    return new_state


def update_settings(state: GameState, **changes: bool) -> GameState:
    unknown = set(changes) - set(TrackerSettings.model_fields)
    if unknown:
        raise InvalidInputError(f"Unknown settings: {', '.join(sorted(unknown))}")
    new_state = state.model_copy(deep=True)
    new_state.settings = state.settings.model_copy(update=changes)
    return new_state


def set_view_player(state: GameState, player_id: str) -> GameState:
    _require_player(state, player_id)
    return state.model_copy(update={"current_view_player_id": player_id}, deep=True)


# =============================================================================
# Terminal conditions
# =============================================================================


def check_terminal(state: GameState) -> tuple[bool, str | None]:
    """
    Check if the game has ended.

    Returns:
        (is_game_over, reason)
        Reasons: "strikes", "perfect_score", "final_round_complete", None (not over)

    The last round is counted by the caller; once it is over the caller
    ends the game with finish_last_round.
    """
    if state.is_game_over:
        return True, state.game_over_reason

    # Strikes only end the game outside focus mode
    if state.strike_tokens >= MAX_STRIKES and not state.settings.focus_mode:
        return True, "strikes"

    if state.score == MAX_SCORE:
        return True, "perfect_score"

    return False, None


def _update_terminal(state: GameState) -> GameState:
    game_over, reason = check_terminal(state)
    if game_over and not state.is_game_over:
        state.is_game_over = True
        state.game_over_reason = reason
        logger.info("Game %s over (%s), score %d", state.game_id, reason, state.score)
    return state


def finish_last_round(state: GameState) -> GameState:
    """End the game once every player has taken their final turn."""
    _require_active(state)
    if not state.last_round_started:
        raise InvalidInputError("The last round has not started")
    new_state = state.model_copy(deep=True)
    new_state.is_game_over = True
    new_state.game_over_reason = "final_round_complete"
    logger.info("Game %s over (final_round_complete), score %d", new_state.game_id, new_state.score)
    return new_state

