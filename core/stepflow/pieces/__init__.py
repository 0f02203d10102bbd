"""Piece definitions and resolution."""

from stepflow.pieces.loader import PieceLoader
from stepflow.pieces.piece import (
    AUTHENTICATION_PROPERTY_NAME,
    ActionDefinition,
    BranchOutput,
    Piece,
    Property,
)

__all__ = [
    "AUTHENTICATION_PROPERTY_NAME",
    "ActionDefinition",
    "BranchOutput",
    "Piece",
    "PieceLoader",
    "Property",
]
