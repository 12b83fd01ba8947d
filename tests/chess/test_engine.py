"""Unit tests for chessroom/chess/engine.py"""

import pytest

from chessroom.chess.engine import ChessEngine, new_engine
from chessroom.core.models import MoveResult
from chessroom.core.shared_types import Seat

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
KINGS_ONLY_FEN = "8/8/8/4k3/8/8/8/4K3 w - - 0 1"
CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
PROMOTION_FEN = "8/P7/8/8/8/8/8/k6K w - - 0 1"
CAPTURE_PROMOTION_FEN = "1r6/P7/8/8/8/8/8/k6K w - - 0 1"


def play(engine: ChessEngine, *moves: str) -> list[MoveResult]:
    """Play moves written as 'e2e4'. Every one of them must be legal."""
    results = []
    for move in moves:
        result = engine.attempt_move(move[:2], move[2:4])
        assert result is not None, f"{move} was rejected"
        results.append(result)
    return results


# --- Starting position ---
def test_new_engine_starts_from_initial_position() -> None:
    engine = new_engine()
    assert engine.current_encoding() == STARTING_FEN
    assert engine.side_to_move() == Seat.FIRST
    assert not engine.is_in_check()
    assert not engine.is_in_checkmate()
    assert not engine.is_in_stalemate()
    assert not engine.is_in_draw()


def test_engines_do_not_share_positions() -> None:
    """Each room owns its own engine: playing in one must not affect another."""
    first, second = new_engine(), new_engine()
    play(first, "e2e4")
    assert second.current_encoding() == STARTING_FEN


# --- Move attempts ---
def test_accepted_move_is_described() -> None:
    engine = new_engine()
    result = engine.attempt_move("e2", "e4")

    assert result == MoveResult(
        color=Seat.FIRST,
        from_square="e2",
        to_square="e4",
        notation="e4",
        flags="b",
        captured=None,
    )
    assert engine.side_to_move() == Seat.SECOND
    assert engine.current_encoding() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


def test_quiet_move_has_normal_flag() -> None:
    engine = new_engine()
    [result] = play(engine, "g1f3")
    assert result.flags == "n"
    assert result.notation == "Nf3"


@pytest.mark.parametrize(
    "from_square, to_square",
    [
        ("e2", "e5"),  # pawn cannot move three squares
        ("e7", "e5"),  # not white's piece
        ("e3", "e4"),  # empty origin square
        ("z9", "e4"),  # not a square at all
        ("e2", ""),  # missing destination
    ],
)
def test_rejected_move_leaves_position_untouched(from_square: str, to_square: str) -> None:
    engine = new_engine()
    assert engine.attempt_move(from_square, to_square) is None
    assert engine.current_encoding() == STARTING_FEN
    assert engine.side_to_move() == Seat.FIRST


def test_capture_reports_captured_piece() -> None:
    engine = new_engine()
    *_, capture = play(engine, "e2e4", "d7d5", "e4d5")
    assert capture.captured == "p"
    assert capture.flags == "c"
    assert capture.notation == "exd5"
    assert capture.color == Seat.FIRST


def test_en_passant() -> None:
    engine = new_engine()
    *_, capture = play(engine, "e2e4", "a7a6", "e4e5", "d7d5", "e5d6")
    assert capture.captured == "p"
    assert capture.flags == "e"
    assert capture.notation == "exd6"


@pytest.mark.parametrize(
    "to_square, flags, notation",
    [
        ("g1", "k", "O-O"),
        ("c1", "q", "O-O-O"),
    ],
)
def test_castling_flags(to_square: str, flags: str, notation: str) -> None:
    engine = ChessEngine.from_fen(CASTLING_FEN)
    result = engine.attempt_move("e1", to_square)
    assert result is not None
    assert result.flags == flags
    assert result.notation == notation


# --- Promotion ---
def test_promotion_defaults_to_queen() -> None:
    engine = ChessEngine.from_fen(PROMOTION_FEN)
    result = engine.attempt_move("a7", "a8")
    assert result is not None
    assert result.notation.startswith("a8=Q")
    assert result.flags == "np"
    assert engine.current_encoding().startswith("Q7/")


def test_promotion_to_requested_piece() -> None:
    engine = ChessEngine.from_fen(PROMOTION_FEN)
    result = engine.attempt_move("a7", "a8", "n")
    assert result is not None
    assert result.notation.startswith("a8=N")
    assert engine.current_encoding().startswith("N7/")


def test_capture_with_promotion() -> None:
    engine = ChessEngine.from_fen(CAPTURE_PROMOTION_FEN)
    result = engine.attempt_move("a7", "b8", "r")
    assert result is not None
    assert result.captured == "r"
    assert result.flags == "cp"


def test_promotion_to_king_is_rejected() -> None:
    engine = ChessEngine.from_fen(PROMOTION_FEN)
    assert engine.attempt_move("a7", "a8", "k") is None
    assert engine.current_encoding() == PROMOTION_FEN


def test_promotion_choice_is_ignored_for_other_moves() -> None:
    engine = new_engine()
    result = engine.attempt_move("e2", "e4", "x")
    assert result is not None
    assert result.flags == "b"


# --- Terminal conditions ---
def test_check() -> None:
    engine = new_engine()
    play(engine, "e2e4", "f7f6", "d1h5")
    assert engine.is_in_check()
    assert not engine.is_in_checkmate()


def test_fools_mate() -> None:
    engine = new_engine()
    play(engine, "f2f3", "e7e5", "g2g4", "d8h4")
    assert engine.is_in_check()
    assert engine.is_in_checkmate()
    assert engine.side_to_move() == Seat.FIRST
    assert not engine.is_in_stalemate()


def test_stalemate_also_counts_as_draw() -> None:
    engine = ChessEngine.from_fen(STALEMATE_FEN)
    assert engine.is_in_stalemate()
    assert engine.is_in_draw()
    assert not engine.is_in_check()
    assert not engine.is_in_checkmate()


def test_insufficient_material_is_a_draw() -> None:
    engine = ChessEngine.from_fen(KINGS_ONLY_FEN)
    assert engine.is_in_draw()
    assert not engine.is_in_stalemate()


def test_threefold_repetition_is_a_draw() -> None:
    engine = new_engine()
    play(engine, *["g1f3", "g8f6", "f3g1", "f6g8"] * 2)
    assert engine.is_in_draw()


def test_invalid_fen() -> None:
    with pytest.raises(ValueError):
        ChessEngine.from_fen("definitely not a FEN")
