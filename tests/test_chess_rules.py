"""Tests for chess move generation, legality and terminal detection."""

import pytest

from games.chess.board import (
    ChessState,
    all_legal_moves,
    apply_move,
    initial_state,
    is_checkmate,
    is_in_check,
    is_square_attacked,
    is_stalemate,
    legal_moves,
    resign,
    undo_move,
)
from games.chess.pieces import Color, Piece, PieceType
from games.chess.rules import Square
from games.common import IllegalMoveError, MalformedCoordinateError


def moved(kind, color):
    return Piece(kind, color, has_moved=True)


def targets(state, origin):
    return {move.to_sq.algebraic for move in legal_moves(state, origin)}


def play(state, *moves):
    for origin, dest in moves:
        state = apply_move(state, (origin, dest))
    return state


class TestSquare:
    def test_parse_and_format(self):
        square = Square.parse("e4")
        assert square == Square(4, 3)
        assert square.algebraic == "e4"
        assert square.index == 28

    @pytest.mark.parametrize("text", ["i1", "a9", "e", "e44", ""])
    def test_malformed_algebraic(self, text):
        with pytest.raises(MalformedCoordinateError):
            Square.parse(text)

    def test_out_of_range_square(self):
        with pytest.raises(MalformedCoordinateError):
            Square(8, 0)

    def test_squares_are_hashable_and_ordered(self):
        assert len({Square(0, 0), Square.parse("a1")}) == 1
        assert Square(0, 0) < Square(1, 0)


class TestInitialPosition:
    def test_twenty_opening_moves(self):
        state = initial_state()
        assert state.turn is Color.WHITE
        assert len(all_legal_moves(state)) == 20

    def test_pawn_and_knight_targets(self):
        state = initial_state()
        assert targets(state, "e2") == {"e3", "e4"}
        assert targets(state, "b1") == {"a3", "c3"}
        assert targets(state, "e1") == set()

    def test_opponent_pieces_have_no_moves_off_turn(self):
        assert legal_moves(initial_state(), "e7") == []

    def test_empty_square_has_no_moves(self):
        assert legal_moves(initial_state(), "e4") == []

    def test_encode_state(self):
        planes = initial_state().encode_state()
        assert planes.shape == (12, 8, 8)
        assert planes.sum() == 32
        # White king plane, e1.
        assert planes[5, 0, 4] == 1.0


class TestMoveGeneration:
    def test_pawn_blocked(self):
        state = ChessState.from_pieces(
            {
                "a1": moved(PieceType.KING, Color.WHITE),
                "h8": moved(PieceType.KING, Color.BLACK),
                "d2": Piece(PieceType.PAWN, Color.WHITE),
                "d3": Piece(PieceType.KNIGHT, Color.BLACK),
                "f2": Piece(PieceType.PAWN, Color.WHITE),
                "f4": Piece(PieceType.KNIGHT, Color.BLACK),
            }
        )
        assert targets(state, "d2") == set()
        assert targets(state, "f2") == {"f3"}

    def test_pawn_captures_diagonally(self):
        state = ChessState.from_pieces(
            {
                "a1": moved(PieceType.KING, Color.WHITE),
                "h8": moved(PieceType.KING, Color.BLACK),
                "d4": moved(PieceType.PAWN, Color.WHITE),
                "c5": Piece(PieceType.KNIGHT, Color.BLACK),
                "e5": Piece(PieceType.KNIGHT, Color.WHITE),
            }
        )
        assert targets(state, "d4") == {"d5", "c5"}

    def test_sliding_pieces_stop_at_blockers(self):
        state = ChessState.from_pieces(
            {
                "a1": moved(PieceType.KING, Color.WHITE),
                "h8": moved(PieceType.KING, Color.BLACK),
                "d4": moved(PieceType.ROOK, Color.WHITE),
                "d6": Piece(PieceType.PAWN, Color.BLACK),
                "b4": Piece(PieceType.PAWN, Color.WHITE),
            }
        )
        assert targets(state, "d4") == {
            "d5", "d6",
            "d3", "d2", "d1",
            "c4",
            "e4", "f4", "g4", "h4",
        }

    def test_queen_combines_rook_and_bishop(self):
        state = ChessState.from_pieces(
            {
                "h1": moved(PieceType.KING, Color.WHITE),
                "h8": moved(PieceType.KING, Color.BLACK),
                "a1": moved(PieceType.QUEEN, Color.WHITE),
            }
        )
        # File, rank up to its own king on h1, diagonal up to the enemy king.
        assert len(legal_moves(state, "a1")) == 7 + 6 + 7

    def test_pinned_piece_stays_on_the_pin_line(self):
        state = ChessState.from_pieces(
            {
                "e1": moved(PieceType.KING, Color.WHITE),
                "e2": moved(PieceType.ROOK, Color.WHITE),
                "e8": moved(PieceType.ROOK, Color.BLACK),
                "a8": moved(PieceType.KING, Color.BLACK),
            }
        )
        assert targets(state, "e2") == {"e3", "e4", "e5", "e6", "e7", "e8"}

    def test_is_square_attacked(self):
        state = ChessState.from_pieces(
            {
                "e1": moved(PieceType.KING, Color.WHITE),
                "a1": moved(PieceType.ROOK, Color.WHITE),
                "h8": moved(PieceType.KING, Color.BLACK),
            }
        )
        assert is_square_attacked(state, "a8", Color.WHITE)
        assert is_square_attacked(state, Square.parse("d1"), Color.WHITE)
        assert not is_square_attacked(state, "b2", Color.WHITE)
        assert not is_square_attacked(state, "a8", Color.BLACK)


class TestCastling:
    def castle_position(self, **extra):
        placement = {
            "e1": Piece(PieceType.KING, Color.WHITE),
            "h1": Piece(PieceType.ROOK, Color.WHITE),
            "a1": Piece(PieceType.ROOK, Color.WHITE),
            "e8": moved(PieceType.KING, Color.BLACK),
        }
        placement.update(extra)
        return ChessState.from_pieces(placement)

    def test_both_sides_offered(self):
        assert {"g1", "c1"} <= targets(self.castle_position(), "e1")

    def test_kingside_castle_moves_rook_and_undo_restores(self):
        before = self.castle_position()
        after = apply_move(before, ("e1", "g1"))
        assert after.piece_at("g1") == moved(PieceType.KING, Color.WHITE)
        assert after.piece_at("f1") == moved(PieceType.ROOK, Color.WHITE)
        assert after.piece_at("h1") is None
        assert after.history[-1].is_castling
        assert undo_move(after) == before

    def test_queenside_castle(self):
        after = apply_move(self.castle_position(), ("e1", "c1"))
        assert after.piece_at("d1") == moved(PieceType.ROOK, Color.WHITE)
        assert after.piece_at("a1") is None

    def test_blocked_path(self):
        state = self.castle_position(f1=Piece(PieceType.BISHOP, Color.WHITE))
        assert "g1" not in targets(state, "e1")

    def test_moved_rook_cannot_castle(self):
        state = self.castle_position(h1=moved(PieceType.ROOK, Color.WHITE))
        assert "g1" not in targets(state, "e1")

    def test_unmoved_king_off_home_square_cannot_castle(self):
        state = ChessState.from_pieces(
            {
                "d1": Piece(PieceType.KING, Color.WHITE),
                "h1": Piece(PieceType.ROOK, Color.WHITE),
                "a8": moved(PieceType.KING, Color.BLACK),
            }
        )
        assert targets(state, "d1") == {"c1", "c2", "d2", "e1", "e2"}

    def test_unmoved_king_on_other_rank_cannot_castle(self):
        state = ChessState.from_pieces(
            {
                "e4": Piece(PieceType.KING, Color.WHITE),
                "h4": Piece(PieceType.ROOK, Color.WHITE),
                "a8": moved(PieceType.KING, Color.BLACK),
            }
        )
        assert "g4" not in targets(state, "e4")
        assert not any(move.is_castling for move in legal_moves(state, "e4"))

    def test_attacked_transit_square_is_not_checked(self):
        # f1 is covered by the black rook; castling is still offered.
        state = self.castle_position(f8=moved(PieceType.ROOK, Color.BLACK))
        assert "g1" in targets(state, "e1")


class TestTransitions:
    def test_apply_move_leaves_input_untouched(self):
        state = initial_state()
        snapshot = (state.cells, state.turn, state.history)
        after = apply_move(state, ("e2", "e4"))
        assert (state.cells, state.turn, state.history) == snapshot
        assert state == initial_state()
        assert after.turn is Color.BLACK
        assert after.piece_at("e4") == moved(PieceType.PAWN, Color.WHITE)
        assert after.piece_at("e2") is None

    def test_illegal_moves_rejected(self):
        state = initial_state()
        with pytest.raises(IllegalMoveError):
            apply_move(state, ("e2", "e5"))
        with pytest.raises(IllegalMoveError):
            apply_move(state, ("e7", "e5"))
        with pytest.raises(IllegalMoveError):
            apply_move(state, ("e4", "e5"))

    def test_malformed_coordinates_rejected(self):
        with pytest.raises(MalformedCoordinateError):
            apply_move(initial_state(), ("z9", "e4"))

    def test_apply_accepts_move_objects(self):
        state = initial_state()
        move = legal_moves(state, "g1")[0]
        assert apply_move(state, move).piece_at(move.to_sq).kind is PieceType.KNIGHT

    def test_capture_round_trip(self):
        before = play(initial_state(), ("e2", "e4"), ("d7", "d5"))
        after = apply_move(before, ("e4", "d5"))
        assert after.history[-1].captured == moved(PieceType.PAWN, Color.BLACK)
        assert undo_move(after) == before

    def test_has_moved_flag_restored_on_undo(self):
        start = initial_state()
        after = apply_move(start, ("g1", "f3"))
        restored = undo_move(after)
        assert restored == start
        assert restored.piece_at("g1").has_moved is False

    def test_promotion_to_queen_and_undo(self):
        before = ChessState.from_pieces(
            {
                "e1": moved(PieceType.KING, Color.WHITE),
                "a7": moved(PieceType.PAWN, Color.WHITE),
                "e8": moved(PieceType.KING, Color.BLACK),
            }
        )
        after = apply_move(before, ("a7", "a8"))
        assert after.piece_at("a8") == moved(PieceType.QUEEN, Color.WHITE)
        assert after.history[-1].promotion is PieceType.QUEEN
        assert is_in_check(after)
        assert undo_move(after) == before

    def test_undo_without_history(self):
        with pytest.raises(IllegalMoveError):
            undo_move(initial_state())


class TestTerminalStates:
    def test_fools_mate(self):
        state = play(initial_state(), ("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4"))
        assert state.turn is Color.WHITE
        assert is_in_check(state)
        assert is_checkmate(state)
        assert state.winner is Color.BLACK
        assert all_legal_moves(state) == []
        with pytest.raises(IllegalMoveError):
            apply_move(state, ("a2", "a3"))

    def test_check_is_not_mate(self):
        state = play(initial_state(), ("e2", "e4"), ("f7", "f6"), ("d1", "h5"))
        assert is_in_check(state)
        assert not is_checkmate(state)
        assert {m.to_sq.algebraic for m in all_legal_moves(state)} == {"g6"}

    def test_stalemate(self):
        state = ChessState.from_pieces(
            {
                "a8": moved(PieceType.KING, Color.BLACK),
                "b6": moved(PieceType.QUEEN, Color.WHITE),
                "e1": moved(PieceType.KING, Color.WHITE),
            },
            turn=Color.BLACK,
        )
        assert not is_in_check(state)
        assert is_stalemate(state)
        assert not is_checkmate(state)
        assert state.is_game_over
        assert state.winner is None

    def test_resignation(self):
        state = resign(initial_state())
        assert state.resigned_by is Color.WHITE
        assert state.winner is Color.BLACK
        assert state.is_game_over
        assert all_legal_moves(state) == []
        with pytest.raises(IllegalMoveError):
            apply_move(state, ("e2", "e4"))
        with pytest.raises(IllegalMoveError):
            resign(state)
