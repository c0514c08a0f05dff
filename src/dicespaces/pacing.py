"""Delays the AI waits through while taking a turn."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PacingConfig:
    """Seconds to wait before rolling (``thinking_delay``) and before placing (``move_delay``)."""

    thinking_delay: float = 0.4
    move_delay: float = 0.8
    preset: str = "default"

    def __post_init__(self) -> None:
        if self.thinking_delay < 0 or self.move_delay < 0:
            raise ValueError("pacing delays must be non-negative")


def preset_pacing(name: str) -> PacingConfig:
    preset = name.lower()
    if preset == "instant":
        return PacingConfig(thinking_delay=0.0, move_delay=0.0, preset="instant")
    if preset == "default":
        return PacingConfig()
    if preset == "slow":
        return PacingConfig(thinking_delay=1.0, move_delay=1.6, preset="slow")
    raise ValueError(f"Unknown pacing preset '{name}'")
