"""CLI runner for Dices-n-Spaces AI games.

Usage examples:
- Single game: ``python -m dicespaces.runner --p1 medium --p2 easy --width 20 --height 20 --seed 1``
- Paced async play with logs: ``python -m dicespaces.runner --pacing default --log-level INFO``
- Save the move log: ``python -m dicespaces.runner --save-log game.jsonl``
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from .agents import AGENT_NAMES, Agent, build_agent
from .ai_player import AIAgent, play_turns
from .config import DEFAULT_SIDE, GameConfig, parse_corner
from .errors import DiceSpacesError
from .game_controller import GameController
from .pacing import PacingConfig, preset_pacing
from .record import MoveRecord, dump_records
from .types import Player, TurnPhase

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 10_000


@dataclass
class GameSummary:
    winner: Optional[Player]
    turns: int
    scores: Dict[Player, int]
    skips: Dict[Player, int]
    finished: bool
    history: List[MoveRecord]


def _summarize(controller: GameController) -> GameSummary:
    skips = {Player.P1: 0, Player.P2: 0}
    for record in controller.history:
        if record.type == "skip" and record.player is not None:
            skips[record.player] += 1
    return GameSummary(
        winner=controller.winner() if controller.game_over else None,
        turns=controller.state.turn_number,
        scores=controller.scores(),
        skips=skips,
        finished=controller.game_over,
        history=list(controller.history),
    )


def play_game(
    p1_agent: Agent,
    p2_agent: Agent,
    config: Optional[GameConfig] = None,
    seed: Optional[int] = None,
    emit_moves: bool = False,
    show_board: bool = False,
    pacing: Optional[PacingConfig] = None,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> GameSummary:
    """Play one game between two agents and summarize it.

    Without ``pacing`` the turns run synchronously; with it every turn goes
    through :class:`AIAgent` on an event loop, delays included.
    """

    controller = GameController(config, rng=random.Random(seed))
    agents = {Player.P1: p1_agent, Player.P2: p2_agent}

    if pacing is not None:
        drivers = {player: AIAgent(player, agent, pacing) for player, agent in agents.items()}
        asyncio.run(play_turns(controller, drivers, max_turns=max_turns))
    else:
        while controller.phase is not TurnPhase.GAME_OVER and controller.state.turn_number <= max_turns:
            player = controller.current_player
            turn = controller.state.turn_number
            dice = controller.roll_dice()
            if controller.phase is not TurnPhase.DICE_ROLLED:
                if emit_moves:
                    print(f"Turn {turn}: P{int(player)} rolled {dice.a}x{dice.b} -> skip")
                continue
            choice = agents[player].choose(controller.snapshot(), controller.legal_moves())
            if choice is None:
                controller.skip()
                continue
            move = choice.move
            record = controller.place(move.x, move.y, move.orientation)
            if emit_moves:
                extra = " KUSH" if record.is_kush else ""
                print(
                    f"Turn {turn}: P{int(player)} rolled {dice.a}x{dice.b}{extra} -> "
                    f"({move.x},{move.y}) {move.width}x{move.height} "
                    f"stole={record.stolen_cells} captured={record.captured_by_contour}"
                )
            if show_board:
                print(controller.format_board())
                print()

    summary = _summarize(controller)
    if not summary.finished:
        logger.warning("game stopped after %d turns without filling the board", summary.turns)
    return summary


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dices-n-Spaces runner")
    parser.add_argument("--p1", choices=AGENT_NAMES, default="medium")
    parser.add_argument("--p2", choices=AGENT_NAMES, default="easy")
    parser.add_argument("--width", type=int, default=DEFAULT_SIDE)
    parser.add_argument("--height", type=int, default=DEFAULT_SIDE)
    parser.add_argument("--corner", type=str, default="TL", help="Player one's start corner: TL, TR, BL or BR")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--weights", type=str, default=None, help="Medium AI weight preset")
    parser.add_argument("--pacing", type=str, default=None, help="Run turns through the async AI with this pacing")
    parser.add_argument("--max-turns", type=int, default=DEFAULT_MAX_TURNS)
    parser.add_argument("--verbose", action="store_true", help="Print every move and the board after it")
    parser.add_argument("--log-level", type=str, default="WARNING")
    parser.add_argument("--save-log", type=str, default=None, help="Path to save the move log as JSON lines")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = GameConfig(width=args.width, height=args.height, p1_corner=parse_corner(args.corner)).validate()
        pacing = preset_pacing(args.pacing) if args.pacing else None
        p1 = build_agent(args.p1, seed=args.seed, weights=args.weights)
        p2 = build_agent(args.p2, seed=None if args.seed is None else args.seed + 1, weights=args.weights)
    except (DiceSpacesError, ValueError) as exc:
        print(f"Invalid configuration: {exc}")
        raise SystemExit(1)

    summary = play_game(
        p1,
        p2,
        config=config,
        seed=args.seed,
        emit_moves=args.verbose,
        show_board=args.verbose,
        pacing=pacing,
        max_turns=args.max_turns,
    )

    if args.save_log:
        with open(args.save_log, "w", encoding="utf-8") as f:
            dump_records(summary.history, f)

    print(f"Score: P1 {summary.scores[Player.P1]} - P2 {summary.scores[Player.P2]} after {summary.turns} turns")
    if summary.winner is None:
        print("Result: tie" if summary.finished else "Result: unfinished")
    else:
        print(f"Winner: P{int(summary.winner)}")


if __name__ == "__main__":
    main()
