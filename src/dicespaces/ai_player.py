"""Asynchronous AI turn driver.

An :class:`AIAgent` plays one full turn against anything implementing
:class:`GameAPI`: wait, roll, wait, read the game, then place or skip. The
game may move on while the agent is suspended (an auto-skip after the
roll is the common case), so ownership of the turn is checked again after
every wait and a lost turn ends in a benign ``abort`` result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from .agents import Agent
from .game_controller import GameController
from .pacing import PacingConfig
from .record import MoveRecord
from .types import Dice, GameView, Player, TurnPhase

logger = logging.getLogger(__name__)


class GameAPI(Protocol):
    """What the AI needs from the surrounding game layer."""

    def get_game_state(self) -> GameView: ...

    async def roll_dice(self) -> Dice: ...

    async def place_piece(self, x: int, y: int, orientation: int) -> object: ...

    async def skip_turn(self) -> object: ...


class LocalGameAPI:
    """:class:`GameAPI` over an in-process :class:`GameController`."""

    def __init__(self, controller: GameController) -> None:
        self.controller = controller

    def get_game_state(self) -> GameView:
        return self.controller.snapshot()

    async def roll_dice(self) -> Dice:
        return self.controller.roll_dice()

    async def place_piece(self, x: int, y: int, orientation: int) -> MoveRecord:
        return self.controller.place(x, y, orientation)

    async def skip_turn(self) -> MoveRecord:
        return self.controller.skip()


@dataclass(frozen=True)
class TurnResult:
    """How an AI turn ended: ``place``, ``skip`` or ``abort``."""

    action: str
    x: Optional[int] = None
    y: Optional[int] = None
    orientation: Optional[int] = None
    score: Optional[float] = None
    reason: Optional[str] = None


class AIAgent:
    """Plays turns for ``player`` using a decision ``agent``."""

    def __init__(self, player: Player, agent: Agent, pacing: Optional[PacingConfig] = None) -> None:
        self.player = player
        self.agent = agent
        self.pacing = pacing or PacingConfig()

    def _lost_turn(self, view: GameView) -> bool:
        if view.current_player is not self.player:
            logger.info("P%d lost the turn to P%d, aborting", int(self.player), int(view.current_player))
            return True
        return False

    async def take_turn(self, api: GameAPI) -> TurnResult:
        try:
            await asyncio.sleep(self.pacing.thinking_delay)
            if self._lost_turn(api.get_game_state()):
                return TurnResult("abort", reason="player_switched")

            dice = await api.roll_dice()
            logger.debug("P%d rolled %d,%d", int(self.player), dice.a, dice.b)
            await asyncio.sleep(self.pacing.move_delay)

            view = api.get_game_state()
            if self._lost_turn(view):
                return TurnResult("abort", reason="player_switched")

            choice = self.agent.choose(view)
            if choice is None:
                logger.info("P%d has no legal placement, skipping", int(self.player))
                await api.skip_turn()
                return TurnResult("skip", reason="no-moves")

            move = choice.move
            logger.info(
                "P%d places %dx%d at (%d,%d) score=%.1f",
                int(self.player),
                move.width,
                move.height,
                move.x,
                move.y,
                choice.score,
            )
            await api.place_piece(move.x, move.y, move.orientation)
            return TurnResult("place", x=move.x, y=move.y, orientation=move.orientation, score=choice.score)
        except Exception:
            logger.exception("P%d turn failed, trying to skip", int(self.player))
            try:
                await api.skip_turn()
            except Exception as skip_error:
                logger.warning("P%d could not skip after failure: %s", int(self.player), skip_error)
            raise


async def play_turns(
    controller: GameController,
    agents: Dict[Player, AIAgent],
    max_turns: Optional[int] = None,
) -> int:
    """Drive AI agents against ``controller`` until the game ends; returns turns played."""

    api = LocalGameAPI(controller)
    played = 0
    while controller.phase is not TurnPhase.GAME_OVER:
        if max_turns is not None and played >= max_turns:
            break
        await agents[controller.current_player].take_turn(api)
        played += 1
    return played
