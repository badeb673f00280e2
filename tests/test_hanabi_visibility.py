"""Visibility tests: a player's own cards never leak into their view."""

import pytest
from src.hanabi.errors import InvalidReferenceError
from src.hanabi.game import (
    complete_card_input,
    give_clue,
    initialize_game,
    update_settings,
)
from src.hanabi.models import COLORS, Card, ClueType, Color, GameSetup, GameState
from src.hanabi.visibility import knowledge_for_player, view_for_player, visible_cards

ME = "player-0"
BOB = "player-1"
CARA = "player-2"


def create_test_state() -> GameState:
    setup = GameSetup(player_names=["Alice", "Bob", "Cara"], my_player_index=0)
    state = initialize_game(setup)
    return complete_card_input(state, {
        BOB: [
            Card(id="b0", color="red", number=1),
            Card(id="b1", color="red", number=5),
            Card(id="b2", color="blue", number=2),
            Card(id="b3", color="green", number=3),
            Card(id="b4", color="white", number=4),
        ],
        CARA: [
            Card(id="c0", color="yellow", number=1),
            Card(id="c1", color="yellow", number=1),
            Card(id="c2", color="blue", number=2),
            Card(id="c3", color="green", number=1),
            Card(id="c4", color="white", number=5),
        ],
    })


class TestVisibleCards:
    def test_includes_opponents_and_discards(self):
        state = create_test_state()
        state = state.model_copy(update={"discard_pile": [Card(id="d0", color="red", number=3)]})

        ids = [c.id for c in visible_cards(state)]

        assert ids[0] == "d0"
        assert set(ids) == {"d0", "b0", "b1", "b2", "b3", "b4", "c0", "c1", "c2", "c3", "c4"}

    def test_excludes_own_hand(self):
        state = create_test_state()
        own_ids = {c.id for c in state.my_player.hand.cards}
        assert not own_ids & {c.id for c in visible_cards(state)}


class TestKnowledgeForPlayer:
    def test_own_knowledge_is_hidden_hand(self):
        state = give_clue(create_test_state(), ME, [1], ClueType.NUMBER, 4)
        knowledge = knowledge_for_player(state, ME)
        assert knowledge[1].possible_numbers == {4}

    def test_opponent_knowledge_comes_from_clues(self):
        state = give_clue(create_test_state(), BOB, [0, 1], ClueType.COLOR, "red")
        knowledge = knowledge_for_player(state, BOB)

        assert knowledge[0].possible_colors == {Color.RED}
        assert knowledge[1].possible_colors == {Color.RED}
        assert Color.RED not in knowledge[2].possible_colors
        # Bob's knowledge is not his actual cards
        assert knowledge[0].possible_numbers == {1, 2, 3, 4, 5}

    def test_unknown_player(self):
        with pytest.raises(InvalidReferenceError):
            knowledge_for_player(create_test_state(), "player-9")


class TestPlayerView:
    """Tests for the per-seat view."""

    def test_own_cards_never_visible(self):
        state = create_test_state()
        for player in state.players:
            view = view_for_player(state, player.id)
            assert player.id not in view["visible_hands"]

    def test_local_hand_hidden_from_every_seat(self):
        state = create_test_state()
        view = view_for_player(state, BOB)

        assert set(view["visible_hands"]) == {CARA}
        assert ME not in view["visible_hands"]

    def test_local_view_shows_opponents(self):
        view = view_for_player(create_test_state(), ME)

        assert set(view["visible_hands"]) == {BOB, CARA}
        assert view["visible_hands"][BOB][1] == {"id": "b1", "color": "red", "number": 5}

    def test_hand_knowledge_has_no_identities(self):
        view = view_for_player(create_test_state(), BOB)
        for card in view["hand_knowledge"]:
            assert "color" not in card
            assert "number" not in card
            assert card["possibility_count"] == 25

    def test_board_is_public(self):
        state = create_test_state()
        view = view_for_player(state, CARA)

        assert view["fireworks"] == {c.value: 0 for c in COLORS}
        assert view["hint_tokens"] == 8
        assert view["deck_count"] == 35
        assert view["phase"] == "active"
        assert not view["game_over"]

    def test_flags_follow_settings(self):
        state = create_test_state()
        plain = view_for_player(state, ME)["hand_knowledge"][0]
        assert "safe_to_play" not in plain
        assert "safe_to_discard" not in plain
        assert "final_colors" not in plain

        state = update_settings(
            state, show_safe_to_play=True, show_safe_to_discard=True, show_deductions=True
        )
        flagged = view_for_player(state, ME)["hand_knowledge"][0]
        assert flagged["safe_to_play"] is False
        assert flagged["safe_to_discard"] is False
        assert flagged["final_colors"] == [c.value for c in COLORS]

    def test_clue_history_in_view(self):
        state = give_clue(create_test_state(), CARA, [0, 1], ClueType.NUMBER, 1)
        view = view_for_player(state, CARA)

        assert len(view["clues_received"]) == 1
        assert view["clues_received"][0]["card_ids"] == ["c0", "c1"]
        assert view["clues_received"][0]["value"] == 1

    def test_unknown_player(self):
        with pytest.raises(InvalidReferenceError):
            view_for_player(create_test_state(), "nobody")
