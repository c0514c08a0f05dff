import random

import pytest

from dicespaces import engine
from dicespaces.agents import RandomAgent
from dicespaces.ai_player import AIAgent, LocalGameAPI, play_turns
from dicespaces.config import GameConfig
from dicespaces.game_controller import GameController
from dicespaces.pacing import PacingConfig, preset_pacing
from dicespaces.types import Player, TurnPhase

INSTANT = preset_pacing("instant")


class ScriptedRng:
    def __init__(self, values):
        self.values = list(values)

    def randint(self, low, high):
        return self.values.pop(0)


class FailingPlaceAPI(LocalGameAPI):
    def __init__(self, controller):
        super().__init__(controller)
        self.skips = 0

    async def place_piece(self, x, y, orientation):
        raise RuntimeError("connection lost")

    async def skip_turn(self):
        self.skips += 1


def test_pacing_presets():
    assert preset_pacing("instant").thinking_delay == 0.0
    assert preset_pacing("slow").move_delay > PacingConfig().move_delay
    with pytest.raises(ValueError):
        preset_pacing("warp")
    with pytest.raises(ValueError):
        PacingConfig(thinking_delay=-1.0)


@pytest.mark.asyncio
async def test_take_turn_places_a_piece():
    controller = GameController(GameConfig(width=8, height=8), rng=ScriptedRng([2, 3]))
    ai = AIAgent(Player.P1, RandomAgent(seed=1), INSTANT)

    result = await ai.take_turn(LocalGameAPI(controller))

    assert result.action == "place"
    assert controller.history[-1].type == "place"
    assert controller.state.grid[0][0] == 1
    assert controller.current_player is Player.P2


@pytest.mark.asyncio
async def test_take_turn_aborts_after_auto_skip():
    controller = GameController(GameConfig(width=5, height=5), rng=ScriptedRng([6, 5]))
    ai = AIAgent(Player.P1, RandomAgent(seed=1), INSTANT)

    result = await ai.take_turn(LocalGameAPI(controller))

    assert result.action == "abort"
    assert result.reason == "player_switched"
    assert controller.history[-1].reason == "auto-no-moves"
    assert controller.current_player is Player.P2
    assert controller.phase is TurnPhase.AWAITING_ROLL


@pytest.mark.asyncio
async def test_take_turn_aborts_before_rolling_for_the_wrong_player():
    controller = GameController(GameConfig(width=5, height=5))
    ai = AIAgent(Player.P2, RandomAgent(seed=1), INSTANT)

    result = await ai.take_turn(LocalGameAPI(controller))

    assert result.action == "abort"
    assert controller.phase is TurnPhase.AWAITING_ROLL
    assert len(controller.history) == 1


@pytest.mark.asyncio
async def test_failed_placement_skips_and_reraises():
    controller = GameController(GameConfig(width=8, height=8), rng=ScriptedRng([1, 2]))
    api = FailingPlaceAPI(controller)
    ai = AIAgent(Player.P1, RandomAgent(seed=1), INSTANT)

    with pytest.raises(RuntimeError):
        await ai.take_turn(api)

    assert api.skips == 1


@pytest.mark.asyncio
async def test_play_turns_keeps_cell_accounting():
    controller = GameController(GameConfig(width=6, height=6), rng=random.Random(5))
    agents = {
        Player.P1: AIAgent(Player.P1, RandomAgent(seed=1), INSTANT),
        Player.P2: AIAgent(Player.P2, RandomAgent(seed=2), INSTANT),
    }

    played = await play_turns(controller, agents, max_turns=300)

    assert 0 < played <= 300
    state = controller.state
    total = engine.count_owned(state, Player.P1) + engine.count_owned(state, Player.P2) + engine.count_empty(state)
    assert total == 36
    if controller.game_over:
        assert engine.count_empty(state) == 0
