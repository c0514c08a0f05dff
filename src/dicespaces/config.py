"""Game setup configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import ConfigError
from .types import Corner, Player

MIN_SIDE = 5
MAX_SIDE = 120
DEFAULT_SIDE = 50


@dataclass(frozen=True)
class GameConfig:
    width: int = DEFAULT_SIDE
    height: int = DEFAULT_SIDE
    p1_corner: Corner = Corner.TL
    first_player: Player = Player.P1
    # Pre-own both start cells instead of starting from an empty board.
    seed_start_cells: bool = False

    @property
    def p2_corner(self) -> Corner:
        return self.p1_corner.opposite()

    def validate(self) -> "GameConfig":
        """Return ``self`` or raise :class:`ConfigError` for unusable settings."""

        for name, value in (("width", self.width), ("height", self.height)):
            if not MIN_SIDE <= value <= MAX_SIDE:
                raise ConfigError(
                    f"{name} must be between {MIN_SIDE} and {MAX_SIDE}",
                    context={name: value},
                )
        if not isinstance(self.p1_corner, Corner):
            raise ConfigError("p1_corner must be a Corner", context={"p1_corner": self.p1_corner})
        return self

    def clamped(self) -> "GameConfig":
        """Clamp the grid size into the supported range."""

        return replace(
            self,
            width=max(MIN_SIDE, min(MAX_SIDE, int(self.width))),
            height=max(MIN_SIDE, min(MAX_SIDE, int(self.height))),
        )


def parse_corner(raw: str) -> Corner:
    try:
        return Corner(raw.strip().upper())
    except ValueError as exc:
        raise ConfigError(f"Unknown corner '{raw}'", context={"choices": [c.value for c in Corner]}) from exc
