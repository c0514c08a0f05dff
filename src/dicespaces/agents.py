"""Agents for playing Dices-n-Spaces.

Agents are synchronous decision makers over a :class:`GameView`; pacing
and talking to a game live in :mod:`ai_player`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from . import engine
from .evaluator import HeuristicEvaluator, HeuristicWeights, preset_weights
from .types import GameState, GameView, Placement, TurnPhase

logger = logging.getLogger(__name__)

AGENT_NAMES = ("easy", "medium")


@dataclass(frozen=True)
class Choice:
    """A chosen placement and the score the agent gave it."""

    move: Placement
    score: float = 0.0


def legal_moves_for_view(view: GameView) -> List[Placement]:
    """Enumerate legal placements for the player to move in ``view``."""

    state = GameState(
        width=view.width,
        height=view.height,
        grid=view.grid,
        starts={view.current_player: view.mover_start()},
        current=view.current_player,
        dice=view.dice,
        phase=TurnPhase.DICE_ROLLED,
        turn_number=view.turn_number,
    )
    return engine.generate_legal_moves(state, view.dice)


class Agent:
    """Base class for agents."""

    name = "agent"

    def choose(self, view: GameView, moves: Optional[List[Placement]] = None) -> Optional[Choice]:
        """Return a placement for the roll in ``view``, or ``None`` when none exists."""

        raise NotImplementedError

    def _moves(self, view: GameView, moves: Optional[List[Placement]]) -> List[Placement]:
        return list(moves) if moves is not None else legal_moves_for_view(view)


class RandomAgent(Agent):
    """Easy AI: a uniformly random legal placement, reproducible with a seed."""

    name = "easy"

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def choose(self, view: GameView, moves: Optional[List[Placement]] = None) -> Optional[Choice]:
        candidates = self._moves(view, moves)
        if not candidates:
            return None
        move = self._rng.choice(candidates)
        logger.debug("random pick (%d,%d) o=%d of %d moves", move.x, move.y, move.orientation, len(candidates))
        return Choice(move, 0.0)


class HeuristicAgent(Agent):
    """Medium AI: the arg-max of :class:`HeuristicEvaluator`."""

    name = "medium"

    def __init__(self, weights: Optional[HeuristicWeights] = None):
        self.evaluator = HeuristicEvaluator(weights)

    def choose(self, view: GameView, moves: Optional[List[Placement]] = None) -> Optional[Choice]:
        candidates = self._moves(view, moves)
        decision = self.evaluator.choose(view, candidates)
        if decision is None:
            return None
        return Choice(decision.move, decision.total)


def build_agent(name: str, seed: Optional[int] = None, weights: Optional[str] = None) -> Agent:
    """Create an agent by difficulty name."""

    key = name.lower()
    if key in {"easy", "random"}:
        return RandomAgent(seed=seed)
    if key in {"medium", "heuristic"}:
        return HeuristicAgent(preset_weights(weights) if weights else None)
    raise ValueError(f"Unknown agent '{name}'")
