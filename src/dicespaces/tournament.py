"""Tournament/benchmark runner for Dices-n-Spaces.

Usage example:
- python -m dicespaces.tournament --games 20 --p1 medium --p2 easy --width 15 --height 15 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .agents import AGENT_NAMES, Agent, build_agent
from .config import GameConfig, parse_corner
from .errors import DiceSpacesError
from .runner import play_game
from .types import Player

logger = logging.getLogger(__name__)


@dataclass
class TournamentResult:
    games: int
    p1_wins: int
    p2_wins: int
    draws: int
    unfinished: int
    avg_turns: float
    avg_margin: float
    avg_captured: Dict[Player, float]
    avg_game_seconds: float

    def win_rate(self, player: Player) -> float:
        wins = self.p1_wins if player is Player.P1 else self.p2_wins
        return 0.0 if self.games == 0 else wins / self.games


def _average(values):
    return 0.0 if not values else sum(values) / len(values)


def run_tournament(
    p1_agent: Agent,
    p2_agent: Agent,
    games: int = 20,
    seed: int = 0,
    config: Optional[GameConfig] = None,
    alternate_first: bool = True,
    max_turns: Optional[int] = None,
) -> TournamentResult:
    """Play ``games`` games between the same two agents.

    With ``alternate_first`` the opening move swaps sides every game.
    """

    base = (config or GameConfig()).validate()
    rng = random.Random(seed)
    p1_wins = p2_wins = draws = unfinished = 0
    turns: List[int] = []
    margins: List[int] = []
    durations: List[float] = []
    captured: Dict[Player, List[int]] = {Player.P1: [], Player.P2: []}

    for index in range(games):
        first = Player.P2 if alternate_first and index % 2 else Player.P1
        game_config = replace(base, first_player=first)
        game_seed = rng.randint(0, 2**31 - 1)
        started = time.monotonic()
        kwargs = {} if max_turns is None else {"max_turns": max_turns}
        summary = play_game(p1_agent, p2_agent, config=game_config, seed=game_seed, **kwargs)
        durations.append(time.monotonic() - started)

        if not summary.finished:
            unfinished += 1
        elif summary.winner is Player.P1:
            p1_wins += 1
        elif summary.winner is Player.P2:
            p2_wins += 1
        else:
            draws += 1
        turns.append(summary.turns)
        margins.append(summary.scores[Player.P1] - summary.scores[Player.P2])
        for player in Player:
            captured[player].append(
                sum(r.captured_by_contour for r in summary.history if r.type == "place" and r.player is player)
            )
        logger.info(
            "game %d/%d: %s (%d-%d, %d turns)",
            index + 1,
            games,
            "tie" if summary.winner is None else f"P{int(summary.winner)}",
            summary.scores[Player.P1],
            summary.scores[Player.P2],
            summary.turns,
        )

    return TournamentResult(
        games=games,
        p1_wins=p1_wins,
        p2_wins=p2_wins,
        draws=draws,
        unfinished=unfinished,
        avg_turns=_average(turns),
        avg_margin=_average(margins),
        avg_captured={player: _average(values) for player, values in captured.items()},
        avg_game_seconds=_average(durations),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dices-n-Spaces tournament runner")
    parser.add_argument("--games", type=int, default=20)
    parser.add_argument("--p1", choices=AGENT_NAMES, default="medium")
    parser.add_argument("--p2", choices=AGENT_NAMES, default="easy")
    parser.add_argument("--width", type=int, default=20)
    parser.add_argument("--height", type=int, default=20)
    parser.add_argument("--corner", type=str, default="TL")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--weights", type=str, default=None, help="Medium AI weight preset")
    parser.add_argument("--no-alternate", action="store_true", help="Player one always moves first")
    parser.add_argument("--log-level", type=str, default="WARNING")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = GameConfig(width=args.width, height=args.height, p1_corner=parse_corner(args.corner)).validate()
        p1 = build_agent(args.p1, seed=args.seed, weights=args.weights)
        p2 = build_agent(args.p2, seed=args.seed + 1, weights=args.weights)
    except (DiceSpacesError, ValueError) as exc:
        print(f"Invalid configuration: {exc}")
        raise SystemExit(1)

    result = run_tournament(
        p1,
        p2,
        games=args.games,
        seed=args.seed,
        config=config,
        alternate_first=not args.no_alternate,
    )

    print(f"P1 ({args.p1}) wins: {result.p1_wins}, P2 ({args.p2}) wins: {result.p2_wins}, draws: {result.draws}")
    if result.unfinished:
        print(f"Unfinished games: {result.unfinished}")
    print(f"Win rate (P1): {result.win_rate(Player.P1):.3f}")
    print(f"Average turns: {result.avg_turns:.2f}")
    print(f"Average margin (P1 - P2): {result.avg_margin:.1f}")
    print(
        f"Average contour captures - P1: {result.avg_captured[Player.P1]:.1f}, "
        f"P2: {result.avg_captured[Player.P2]:.1f}"
    )
    print(f"Average game time: {result.avg_game_seconds:.2f}s")


if __name__ == "__main__":
    main()
