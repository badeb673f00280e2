"""Per-card possibility sets and the pure functions that narrow them."""

from __future__ import annotations

from .errors import InvalidInputError
from .models import (
    COLORS,
    NUMBERS,
    CardPossibilities,
    Clue,
    ClueType,
    Color,
    ManualExclusions,
    Number,
)


def new_card_possibilities(position: int, card_id: str | None = None) -> CardPossibilities:
    """A card nothing is known about yet."""
    if card_id is None:
        return CardPossibilities(position=position)
    return CardPossibilities(id=card_id, position=position)


def apply_clue(hand: list[CardPossibilities], clue: Clue) -> list[CardPossibilities]:
    """
    Apply a clue to every card in a hand.

    Cards whose id is in the clue are known to match it, every other card is
    known not to. Returns a new hand; the input is left untouched.
    """
    selected = set(clue.card_ids)
    if clue.type == ClueType.COLOR:
        return [_apply_color_clue(card, clue.value, card.id in selected) for card in hand]  # type: ignore[arg-type]
    return [_apply_number_clue(card, clue.value, card.id in selected) for card in hand]  # type: ignore[arg-type]


def _apply_color_clue(card: CardPossibilities, color: Color, was_selected: bool) -> CardPossibilities:
    if was_selected:
        colors = {color}
    else:
        colors = set(card.possible_colors) - {color}
    return card.model_copy(update={"possible_colors": colors}, deep=True)


def _apply_number_clue(card: CardPossibilities, number: Number, was_selected: bool) -> CardPossibilities:
    if was_selected:
        numbers = {number}
    else:
        numbers = set(card.possible_numbers) - {number}
    return card.model_copy(update={"possible_numbers": numbers}, deep=True)


def get_final_possibilities(card: CardPossibilities) -> tuple[set[Color], set[Number]]:
    """Clue-derived sets with manual and automatic exclusions removed."""
    colors = set(card.possible_colors)
    numbers = set(card.possible_numbers)
    if card.manual_exclusions is not None:
        colors -= card.manual_exclusions.colors
        numbers -= card.manual_exclusions.numbers
    return colors, numbers


def get_possibility_count(card: CardPossibilities) -> int:
    """How many (color, number) pairs the clues still allow. Lower means more is known."""
    return len(card.possible_colors) * len(card.possible_numbers)


def get_card_summary(card: CardPossibilities) -> str:
    """Human-readable summary of the clue-derived possibilities."""
    colors = [c.value for c in COLORS if c in card.possible_colors]
    numbers = [str(n) for n in NUMBERS if n in card.possible_numbers]
    if len(colors) == 1 and len(numbers) == 1:
        return f"{colors[0]} {numbers[0]}"
    return f"Colors: {', '.join(colors)} | Numbers: {', '.join(numbers)}"


def toggle_exclusion(
    card: CardPossibilities,
    clue_type: ClueType,
    value: Color | Number,
) -> CardPossibilities:
    """
    Mark a color or number impossible for a card, or unmark it.

    Removing an exclusion always succeeds. Adding one raises
    InvalidInputError when clues already ruled the value out or when it
    would leave the card with no effective color (or number).
    """
    exclusions = (
        card.manual_exclusions.model_copy(deep=True)
        if card.manual_exclusions is not None
        else ManualExclusions()
    )
    colors, numbers = get_final_possibilities(card)

    if clue_type == ClueType.COLOR:
        try:
            color = Color(value)
        except ValueError:
            raise InvalidInputError(f"Invalid color: {value!r}") from None
        if color in exclusions.colors:
            exclusions.colors.discard(color)
        else:
            if color not in card.possible_colors:
                raise InvalidInputError(f"Clues already rule out {color.value}")
            if not colors - {color}:
                raise InvalidInputError(f"Cannot exclude {color.value}: no color would remain")
            exclusions.colors.add(color)
    else:
        if value not in NUMBERS:
            raise InvalidInputError(f"Invalid number: {value!r}")
        if value in exclusions.numbers:
            exclusions.numbers.discard(value)  # type: ignore[arg-type]
        else:
            if value not in card.possible_numbers:
                raise InvalidInputError(f"Clues already rule out {value}")
            if not numbers - {value}:
                raise InvalidInputError(f"Cannot exclude {value}: no number would remain")
            exclusions.numbers.add(value)  # type: ignore[arg-type]

    return card.model_copy(update={"manual_exclusions": exclusions}, deep=True)


def clear_exclusions(hand: list[CardPossibilities]) -> list[CardPossibilities]:
    return [
        card.model_copy(update={"manual_exclusions": ManualExclusions()}, deep=True)
        for card in hand
    ]


def reindex(hand: list[CardPossibilities]) -> list[CardPossibilities]:
    """Rewrite positions to match list order after a card leaves the hand."""
    return [card.model_copy(update={"position": idx}, deep=True) for idx, card in enumerate(hand)]
