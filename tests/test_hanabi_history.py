"""Tests for the undo snapshot stack."""

from src.hanabi.game import complete_card_input, give_clue, initialize_game
from src.hanabi.history import GameHistory
from src.hanabi.models import Card, ClueType, GameSetup


def new_state():
    state = initialize_game(GameSetup(player_names=["Alice", "Bob"], my_player_index=0))
    return complete_card_input(state, {
        "player-1": [Card(color="blue", number=n) for n in [1, 1, 2, 3, 4]],
    })


class TestGameHistory:
    def test_empty_history(self):
        history = GameHistory()
        assert not history.can_undo
        assert len(history) == 0
        assert history.undo() is None

    def test_undo_restores_previous_state(self):
        history = GameHistory()
        before = new_state()
        history.push(before)
        after = give_clue(before, "player-0", [0], ClueType.NUMBER, 1)

        restored = history.undo()

        assert restored is before
        assert restored.hint_tokens == 8
        assert after.hint_tokens == 7
        assert not history.can_undo

    def test_undo_is_last_in_first_out(self):
        history = GameHistory()
        first, second = new_state(), new_state()
        history.push(first)
        history.push(second)

        assert history.undo() is second
        assert history.undo() is first
        assert history.undo() is None

    def test_max_depth_drops_oldest(self):
        history = GameHistory(max_depth=2)
        states = [new_state() for _ in range(3)]
        for state in states:
            history.push(state)

        assert len(history) == 2
        assert history.undo() is states[2]
        assert history.undo() is states[1]
        assert history.undo() is None

    def test_clear(self):
        history = GameHistory()
        history.push(new_state())
        history.clear()
        assert not history.can_undo
