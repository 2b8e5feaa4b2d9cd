import pytest

from games.common import IllegalMoveError, MalformedCoordinateError
from games.tictactoe.board import (
    GameStatus,
    Mark,
    TicTacToeMove,
    TicTacToeState,
    apply_move,
    check_winner,
    initial_state,
    legal_moves,
    undo_move,
)

X, O, _ = "X", "O", None


def play(*indices):
    state = initial_state()
    for index in indices:
        state = apply_move(state, index)
    return state


class TestBoard:
    def test_initial_state(self):
        state = initial_state()
        assert state.current_player is Mark.X
        assert state.status is GameStatus.PLAYING
        assert legal_moves(state) == list(range(9))

    def test_turns_alternate(self):
        state = play(4)
        assert state.cells[4] is Mark.X
        assert state.current_player is Mark.O
        assert legal_moves(state) == [0, 1, 2, 3, 5, 6, 7, 8]

    def test_top_row_win(self):
        state = TicTacToeState.from_cells([X, X, X, O, O, _, _, _, _])
        assert state.status is GameStatus.WON
        assert state.winner is Mark.X
        assert state.winning_line == (0, 1, 2)
        assert legal_moves(state) == []

    def test_win_detected_after_move(self):
        state = play(0, 3, 4, 5, 8)
        assert state.winner is Mark.X
        assert state.winning_line == (0, 4, 8)
        with pytest.raises(IllegalMoveError):
            apply_move(state, 1)

    def test_full_board_draw(self):
        state = TicTacToeState.from_cells([X, O, X, X, O, O, O, X, X])
        assert state.status is GameStatus.DRAW
        assert state.winner is None
        assert state.is_game_over

    def test_check_winner_on_empty_board(self):
        assert check_winner([None] * 9) == (None, None)

    def test_side_to_move_inferred(self):
        assert TicTacToeState.from_cells([X, _, _, _, _, _, _, _, _]).current_player is Mark.O
        assert TicTacToeState.from_cells([X, O, _, _, _, _, _, _, _]).current_player is Mark.X


class TestMoves:
    def test_apply_does_not_mutate(self):
        start = initial_state()
        apply_move(start, 4)
        assert start == initial_state()

    def test_occupied_cell_rejected(self):
        with pytest.raises(IllegalMoveError):
            apply_move(play(4), 4)

    @pytest.mark.parametrize("index", [-1, 9, "4", True])
    def test_bad_index_rejected(self, index):
        with pytest.raises(MalformedCoordinateError):
            apply_move(initial_state(), index)

    def test_move_object_for_wrong_player(self):
        with pytest.raises(IllegalMoveError):
            apply_move(initial_state(), TicTacToeMove(Mark.O, 0))

    def test_undo_round_trip(self):
        before = play(4, 0)
        assert undo_move(apply_move(before, 8)) == before

    def test_undo_reopens_won_game(self):
        won = play(0, 3, 1, 4, 2)
        assert won.winner is Mark.X
        reopened = undo_move(won)
        assert reopened.status is GameStatus.PLAYING
        assert reopened.current_player is Mark.X

    def test_undo_at_start(self):
        with pytest.raises(IllegalMoveError):
            undo_move(initial_state())

    def test_render(self):
        assert play(4).render_ascii().splitlines()[2] == "3 | X | 5"
