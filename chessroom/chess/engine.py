"""
The rules engine is the entrypoint into the chess rules for the session layer.

Move generation, legality and end-of-game detection are delegated to python-chess. This module only translates
between square names / seats used by the session layer and the python-chess objects.
"""

from typing import Optional, Protocol, Self

import chess

from chessroom.core.models import MoveResult
from chessroom.core.shared_types import PieceKind, Seat

DEFAULT_PROMOTION = PieceKind.QUEEN

COLOR_TO_SEAT = {chess.WHITE: Seat.FIRST, chess.BLACK: Seat.SECOND}


class RulesEngine(Protocol):
    """Contract the session layer relies on. One instance owns one game position."""

    def current_encoding(self) -> str:
        """FEN of the current position."""
        ...

    def side_to_move(self) -> Seat: ...

    def is_in_check(self) -> bool: ...

    def is_in_checkmate(self) -> bool: ...

    def is_in_stalemate(self) -> bool: ...

    def is_in_draw(self) -> bool: ...

    def attempt_move(
        self, from_square: str, to_square: str, promotion: Optional[str] = None
    ) -> MoveResult | None:
        """Play the move if legal and describe it. None if the move is rejected (position is untouched)."""
        ...


class ChessEngine:
    """RulesEngine implemented with python-chess."""

    def __init__(self, board: Optional[chess.Board] = None) -> None:
        self.board = board if board is not None else chess.Board()

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Start from an arbitrary position. Raises ValueError for a malformed FEN."""
        return cls(chess.Board(fen))

    # --- Position queries ---
    def current_encoding(self) -> str:
        return self.board.fen()

    def side_to_move(self) -> Seat:
        return COLOR_TO_SEAT[self.board.turn]

    def is_in_check(self) -> bool:
        return self.board.is_check()

    def is_in_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_in_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_in_draw(self) -> bool:
        """Stalemate, insufficient material, fifty-move rule or threefold repetition."""
        return (
            self.board.is_stalemate()
            or self.board.is_insufficient_material()
            or self.board.is_fifty_moves()
            or self.board.is_repetition(3)
        )

    # --- Moves ---
    def attempt_move(
        self, from_square: str, to_square: str, promotion: Optional[str] = None
    ) -> MoveResult | None:
        move = self._build_move(from_square, to_square, promotion)
        if move is None or move not in self.board.legal_moves:
            return None

        result = MoveResult(
            color=self.side_to_move(),
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            notation=self.board.san(move),
            flags=self._flags(move),
            captured=self._captured_piece(move),
        )
        self.board.push(move)
        return result

    def _build_move(
        self, from_square: str, to_square: str, promotion: Optional[str]
    ) -> chess.Move | None:
        """Parse the squares. Promotion is only attached to pawn moves onto the last rank."""
        try:
            origin = chess.parse_square(from_square)
            target = chess.parse_square(to_square)
        except (TypeError, ValueError):
            return None

        if not self._is_promotion_square(origin, target):
            return chess.Move(origin, target)

        letter = (promotion or DEFAULT_PROMOTION).lower()
        if letter not in set(PieceKind):
            return None
        return chess.Move(origin, target, promotion=chess.PIECE_SYMBOLS.index(letter))

    def _is_promotion_square(self, origin: chess.Square, target: chess.Square) -> bool:
        piece = self.board.piece_at(origin)
        if piece is None or piece.piece_type != chess.PAWN:
            return False
        last_rank = 7 if piece.color == chess.WHITE else 0
        return chess.square_rank(target) == last_rank

    def _captured_piece(self, move: chess.Move) -> Optional[str]:
        """Lower-case letter of the captured piece (if any)."""
        if self.board.is_en_passant(move):
            return chess.piece_symbol(chess.PAWN)
        captured = self.board.piece_at(move.to_square)
        if captured is None:
            return None
        return chess.piece_symbol(captured.piece_type)

    def _flags(self, move: chess.Move) -> str:
        """
        Single letter move flags, concatenated:
        n normal, c capture, b pawn double push, e en passant, p promotion, k / q king-/queenside castle.
        """
        is_en_passant = self.board.is_en_passant(move)
        is_capture = self.board.is_capture(move) and not is_en_passant
        piece = self.board.piece_at(move.from_square)
        is_double_push = (
            piece is not None
            and piece.piece_type == chess.PAWN
            and abs(chess.square_rank(move.to_square) - chess.square_rank(move.from_square)) == 2
        )
        is_kingside = self.board.is_kingside_castling(move)
        is_queenside = self.board.is_queenside_castling(move)

        flags = ""
        if not (is_capture or is_double_push or is_en_passant or is_kingside or is_queenside):
            flags += "n"
        if is_capture:
            flags += "c"
        if is_double_push:
            flags += "b"
        if is_en_passant:
            flags += "e"
        if move.promotion is not None:
            flags += "p"
        if is_kingside:
            flags += "k"
        if is_queenside:
            flags += "q"
        return flags


def new_engine() -> ChessEngine:
    """Fresh engine in the standard starting position."""
    return ChessEngine()
