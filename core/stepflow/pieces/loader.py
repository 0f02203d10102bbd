"""Piece resolution: piece name + version + action name -> definitions."""

import logging

from stepflow.errors import ResolutionError
from stepflow.pieces.piece import ActionDefinition, Piece

logger = logging.getLogger(__name__)


def _normalize_version(version: str) -> str:
    # Flows pin versions as "~1.2.0" or "^1.2.0"; the registry stores exact ones.
    return version.lstrip("~^")


class PieceLoader:
    """
    Registry of pieces available to the engine.

    Example:
        loader = PieceLoader()
        loader.register(mail_piece)
        piece, action = loader.get_piece_and_action("mail", "~0.1.0", "send")
    """

    def __init__(self, pieces: list[Piece] | None = None):
        self._pieces: dict[tuple[str, str], Piece] = {}
        for piece in pieces or []:
            self.register(piece)

    def register(self, piece: Piece) -> None:
        self._pieces[(piece.name, _normalize_version(piece.version))] = piece
        logger.debug(f"Registered piece {piece.name}@{piece.version}")

    def get_piece(self, piece_name: str, piece_version: str) -> Piece:
        piece = self._pieces.get((piece_name, _normalize_version(piece_version)))
        if piece is None:
            raise ResolutionError(f"Piece not found: {piece_name}@{piece_version}")
        return piece

    def get_piece_and_action(
        self,
        piece_name: str,
        piece_version: str,
        action_name: str,
    ) -> tuple[Piece, ActionDefinition]:
        piece = self.get_piece(piece_name, piece_version)
        action = piece.get_action(action_name)
        if action is None:
            raise ResolutionError(
                f"Action not found: {action_name} in {piece_name}@{piece_version}"
            )
        return piece, action
