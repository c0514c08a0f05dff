"""Exception hierarchy for Dices-n-Spaces.

Rule violations are rejected without mutating the game and surface the
specific reason to the caller::

    try:
        controller.place(x, y)
    except IllegalPlacement as exc:
        print(exc.reason.value)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

__all__ = [
    "ConfigError",
    "DiceSpacesError",
    "IllegalAction",
    "IllegalPlacement",
    "PlacementRejection",
]


class PlacementRejection(str, Enum):
    """Why a rectangle cannot go where the player asked."""

    OUT_OF_BOUNDS = "out-of-bounds"
    OCCUPIED = "occupied"
    NOT_ADJACENT = "not-adjacent"
    MUST_COVER_START = "must-cover-start"
    OWN_CELLS = "own-cells"


class DiceSpacesError(Exception):
    """Base exception for all game errors.

    Attributes:
        code: Machine-readable error code
        context: Additional context for debugging
    """

    code: str = "DICESPACES_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": self.context}


class IllegalPlacement(DiceSpacesError, ValueError):
    """A placement was rejected by the placement rules."""

    code = "ILLEGAL_PLACEMENT"

    def __init__(self, reason: PlacementRejection, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"cannot place rectangle: {reason.value}", context=context)
        self.reason = reason


class IllegalAction(DiceSpacesError, ValueError):
    """An action was requested in a turn phase that does not allow it."""

    code = "ILLEGAL_ACTION"


class ConfigError(DiceSpacesError, ValueError):
    """Invalid game or AI configuration."""

    code = "CONFIG_ERROR"
