from __future__ import annotations

import os
from pathlib import Path

import pytest

from src.hanabi.game import (
    complete_card_input,
    give_clue,
    initialize_game,
    play_card,
    toggle_my_exclusion,
)
from src.hanabi.models import Card, ClueType, Color, GameSetup
from src.ui_api import storage


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("TRACKER_DATA_DIR", str(tmp_path / "tracker"))
    return tmp_path / "tracker"


def played_state():
    state = initialize_game(GameSetup(player_names=["Alice", "Bob"], my_player_index=0))
    state = complete_card_input(state, {
        "player-1": [Card(color="red", number=n) for n in [1, 2, 3, 4, 5]],
    })
    state = give_clue(state, "player-0", [0, 3], ClueType.COLOR, "blue")
    return play_card(state, "player-1", 0)


def test_save_and_load_preserve_state(data_dir: Path) -> None:
    state = played_state()

    path = storage.save_game(state)
    loaded = storage.load_game(state.game_id)

    assert path.parent == data_dir / "sessions"
    assert loaded.model_dump() == state.model_dump()
    assert loaded.fireworks[Color.RED] == 1
    assert loaded.my_player.hand.cards[0].possible_colors == {Color.BLUE}
    assert loaded.pending_card_input is not None


def test_exclusions_survive_reload(data_dir: Path) -> None:
    state = played_state()
    state = toggle_my_exclusion(state, 1, ClueType.COLOR, "red")
    state = toggle_my_exclusion(state, 1, ClueType.COLOR, "white")
    state = toggle_my_exclusion(state, 1, ClueType.NUMBER, 4)

    storage.save_game(state)
    loaded = storage.load_game(state.game_id)

    card = loaded.my_player.hand.cards[1]
    assert card.manual_exclusions.colors == {Color.RED, Color.WHITE}
    assert card.manual_exclusions.numbers == {4}
    assert card.possible_colors == {Color.RED, Color.YELLOW, Color.GREEN, Color.WHITE}
    assert card.id == state.my_player.hand.cards[1].id
    assert loaded.my_player.hand.cards[0].manual_exclusions is None


def test_load_missing_game(data_dir: Path) -> None:
    with pytest.raises(FileNotFoundError):
        storage.load_game("game-missing")


def test_rejects_path_like_ids(data_dir: Path) -> None:
    for bad in ["", "../escape", "a/b", "..\\x", ".hidden"]:
        with pytest.raises(FileNotFoundError):
            storage.load_game(bad)


def test_delete_game(data_dir: Path) -> None:
    state = played_state()
    storage.save_game(state)

    assert storage.delete_game(state.game_id)
    assert not storage.delete_game(state.game_id)
    with pytest.raises(FileNotFoundError):
        storage.load_game(state.game_id)


def test_list_games_newest_first(data_dir: Path) -> None:
    older = played_state()
    newer = initialize_game(GameSetup(player_names=["Dee", "Eli", "Fay"], my_player_index=2))
    old_path = storage.save_game(older)
    new_path = storage.save_game(newer)
    os.utime(old_path, (1_000_000, 1_000_000))
    os.utime(new_path, (2_000_000, 2_000_000))

    games = storage.list_games()

    assert [g["game_id"] for g in games] == [newer.game_id, older.game_id]
    assert games[0]["players"] == ["Dee", "Eli", "Fay"]
    assert games[0]["phase"] == "setup"
    assert games[1]["score"] == 1
    assert games[1]["hint_tokens"] == 7


def test_list_games_skips_unreadable_files(data_dir: Path) -> None:
    storage.save_game(played_state())
    (data_dir / "sessions" / "broken.json").write_text("{not json")

    games = storage.list_games()

    assert len(games) == 1
