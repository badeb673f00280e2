"""Knowledge reconstruction and safety checks for hidden cards."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from .knowledge import apply_clue, get_final_possibilities, new_card_possibilities
from .models import (
    CARD_COUNTS,
    COLORS,
    Card,
    CardPossibilities,
    Clue,
    Color,
    ManualExclusions,
)


def total_copies(number: int) -> int:
    """Physical copies of each identity: three 1s, two 2-4s, one 5."""
    return CARD_COUNTS[number]


def count_identities(cards: Iterable[Card]) -> Counter[tuple[Color, int]]:
    return Counter(card.identity for card in cards)


def compute_player_knowledge(
    observed_hand: list[Card],
    clues_received: list[Clue],
) -> list[CardPossibilities]:
    """
    Rebuild what a player knows about their own hand from the clues they got.

    Every position starts fully open (keeping the observed card's id), then
    clues are replayed in issuance order. Clues whose cards have all left
    the hand are skipped: they stay in the history but no longer say
    anything about the current cards.
    """
    hand = [new_card_possibilities(pos, card.id) for pos, card in enumerate(observed_hand)]
    current_ids = {card.id for card in observed_hand}

    for clue in sorted(clues_received, key=lambda c: c.timestamp):
        if any(card_id in current_ids for card_id in clue.card_ids):
            hand = apply_clue(hand, clue)

    return hand


def is_safe_to_play(card: CardPossibilities, fireworks: dict[Color, int]) -> bool:
    """True when every remaining possibility is the next card on its firework."""
    colors, numbers = get_final_possibilities(card)
    if not colors or not numbers:
        return False

    for color in colors:
        for number in numbers:
            if fireworks[color] + 1 != number:
                return False
    return True


def is_safe_to_discard(
    card: CardPossibilities,
    fireworks: dict[Color, int],
    discard_pile: list[Card],
) -> bool:
    """
    True when no remaining possibility could still be needed.

    A possibility is not needed if its firework is already past it, or if
    every copy of it is already in the discard pile.
    """
    colors, numbers = get_final_possibilities(card)
    if not colors or not numbers:
        return False

    discarded = count_identities(discard_pile)
    for color in colors:
        for number in numbers:
            if fireworks[color] >= number:
                continue
            if discarded[(color, number)] < total_copies(number):
                return False
    return True


def apply_auto_deductions(
    hand: list[CardPossibilities],
    visible_cards: list[Card],
) -> list[CardPossibilities]:
    """
    Count elimination: rule out identities whose copies are all visible elsewhere.

    A color is excluded only when every number still possible for the card
    is impossible in that color, and symmetrically for numbers. An exclusion
    that would leave no color (or no number) is never added.
    """
    visible = count_identities(visible_cards)
    return [_deduce_card(card, visible) for card in hand]


def _deduce_card(card: CardPossibilities, visible: Counter[tuple[Color, int]]) -> CardPossibilities:
    exclusions = (
        card.manual_exclusions.model_copy(deep=True)
        if card.manual_exclusions is not None
        else ManualExclusions()
    )
    colors, numbers = get_final_possibilities(card)

    impossible = {
        (color, number)
        for color in colors
        for number in numbers
        if visible[(color, number)] >= total_copies(number)
    }

    remaining_colors = set(colors)
    for color in [c for c in COLORS if c in colors]:
        if all((color, number) in impossible for number in numbers) and len(remaining_colors) > 1:
            exclusions.colors.add(color)
            remaining_colors.discard(color)

    remaining_numbers = set(numbers)
    for number in sorted(numbers):
        if all((color, number) in impossible for color in colors) and len(remaining_numbers) > 1:
            exclusions.numbers.add(number)
            remaining_numbers.discard(number)

    return card.model_copy(update={"manual_exclusions": exclusions}, deep=True)
