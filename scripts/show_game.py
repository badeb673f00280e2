#!/usr/bin/env python3
"""Print a stored tracker game: board, hands and what each player knows."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.hanabi import (
    COLORS,
    GameState,
    get_card_summary,
    is_safe_to_discard,
    is_safe_to_play,
    knowledge_for_player,
)
from src.hanabi.knowledge import get_final_possibilities
from src.ui_api.storage import list_games, load_game


class Colors:
    RED = "\033[91m"
    BLUE = "\033[94m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"


_CARD_COLORS = {
    "red": Colors.RED,
    "yellow": Colors.YELLOW,
    "green": Colors.GREEN,
    "blue": Colors.BLUE,
    "white": Colors.WHITE,
}


def format_board(state: GameState) -> str:
    """One line per counter: fireworks, tokens, deck."""
    fireworks = "  ".join(
        f"{_CARD_COLORS[c.value]}{c.value}:{state.fireworks[c]}{Colors.RESET}" for c in COLORS
    )
    lines = [
        f"Fireworks: {fireworks}",
        f"Score: {state.score}  Hints: {state.hint_tokens}  Strikes: {state.strike_tokens}  Deck: {state.deck_count}",
        f"Phase: {state.phase.value}",
    ]
    if state.discard_pile:
        lines.append("Discards: " + " ".join(str(c) for c in state.discard_pile))
    return "\n".join(lines)


def format_player(state: GameState, player_id: str) -> list[str]:
    player = state.get_player(player_id)
    marker = " (me)" if player.is_me else ""
    lines = [f"{Colors.BOLD}{player.name}{marker}{Colors.RESET}"]
    if not player.is_me:
        lines.append("  Cards: " + " ".join(str(c) for c in player.hand.cards))

    for card in knowledge_for_player(state, player_id):
        flags = []
        if is_safe_to_play(card, state.fireworks):
            flags.append("play")
        if is_safe_to_discard(card, state.fireworks, state.discard_pile):
            flags.append("discard")
        colors, numbers = get_final_possibilities(card)
        excluded = (len(card.possible_colors) - len(colors)) + (len(card.possible_numbers) - len(numbers))
        line = f"  [{card.position}] {get_card_summary(card)}"
        if excluded:
            line += f" {Colors.DIM}({excluded} excluded){Colors.RESET}"
        if flags:
            line += f" {Colors.GREEN}safe: {', '.join(flags)}{Colors.RESET}"
        lines.append(line)
    return lines


def main() -> int:
    parser = argparse.ArgumentParser(description="Show a stored tracker game")
    parser.add_argument("game_id", nargs="?", help="Game to show (defaults to the newest)")
    parser.add_argument("--list", action="store_true", help="List stored games and exit")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    games = list_games()
    if args.list:
        if not games:
            print(f"{Colors.DIM}(no stored games){Colors.RESET}")
        for g in games:
            print(f"{g['game_id']}  {', '.join(g['players'])}  score={g['score']} phase={g['phase']}")
        return 0

    game_id = args.game_id or (games[0]["game_id"] if games else None)
    if game_id is None:
        print("No stored games", file=sys.stderr)
        return 1

    try:
        state = load_game(game_id)
    except FileNotFoundError:
        print(f"Game not found: {game_id}", file=sys.stderr)
        return 1

    print(f"\n{Colors.BOLD}{'=' * 60}{Colors.RESET}")
    print(f"{Colors.BOLD}GAME {state.game_id}{Colors.RESET}")
    print(f"{'=' * 60}")
    print(format_board(state))
    for player in state.players:
        print()
        print("\n".join(format_player(state, player.id)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
