"""Dices-n-Spaces game package."""

from .types import Corner, Dice, GameState, GameView, Placement, Player, Rect, TurnPhase
from .config import GameConfig
from .errors import ConfigError, DiceSpacesError, IllegalAction, IllegalPlacement, PlacementRejection
from .engine import (
    can_place,
    check_placement,
    count_empty,
    count_owned,
    generate_legal_moves,
    is_terminal,
    new_game,
    place_rect,
    winner,
)
from .contour import capture_contours, count_capturable
from .game_controller import GameController
from .evaluator import HeuristicEvaluator, HeuristicWeights, MoveScore, preset_weights
from .agents import Agent, HeuristicAgent, RandomAgent, build_agent
from .ai_player import AIAgent, GameAPI, LocalGameAPI, TurnResult
from .pacing import PacingConfig, preset_pacing

__all__ = [
    "AIAgent",
    "Agent",
    "ConfigError",
    "Corner",
    "Dice",
    "DiceSpacesError",
    "GameAPI",
    "GameConfig",
    "GameController",
    "GameState",
    "GameView",
    "HeuristicAgent",
    "HeuristicEvaluator",
    "HeuristicWeights",
    "IllegalAction",
    "IllegalPlacement",
    "LocalGameAPI",
    "MoveScore",
    "PacingConfig",
    "Placement",
    "PlacementRejection",
    "Player",
    "RandomAgent",
    "Rect",
    "TurnPhase",
    "TurnResult",
    "build_agent",
    "can_place",
    "capture_contours",
    "check_placement",
    "count_capturable",
    "count_empty",
    "count_owned",
    "generate_legal_moves",
    "is_terminal",
    "new_game",
    "place_rect",
    "preset_pacing",
    "preset_weights",
    "winner",
]
