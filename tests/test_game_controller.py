import pytest

from dicespaces import engine
from dicespaces.config import GameConfig
from dicespaces.errors import IllegalAction, IllegalPlacement, PlacementRejection
from dicespaces.game_controller import GameController
from dicespaces.types import Corner, Dice, Player, TurnPhase


class ScriptedRng:
    """Stands in for ``random.Random`` and returns queued dice values."""

    def __init__(self, values):
        self.values = list(values)

    def randint(self, low, high):
        value = self.values.pop(0)
        assert low <= value <= high
        return value


def load_grid(controller, rows):
    controller.state.grid = [[0 if ch == "." else int(ch) for ch in row] for row in rows]


def test_new_controller_starts_awaiting_roll_with_init_record():
    controller = GameController(GameConfig(width=8, height=6))

    assert controller.phase is TurnPhase.AWAITING_ROLL
    assert controller.current_player is Player.P1
    assert controller.state.turn_number == 1
    assert [r.type for r in controller.history] == ["init"]
    assert controller.history[0].grid_snapshot == "0" * 48


def test_wrong_phase_calls_raise():
    controller = GameController(GameConfig(width=6, height=6))

    with pytest.raises(IllegalAction):
        controller.place(0, 0)
    with pytest.raises(IllegalAction):
        controller.skip()
    with pytest.raises(IllegalAction):
        controller.legal_moves()

    controller.set_dice(2, 3)
    with pytest.raises(IllegalAction):
        controller.roll_dice()
    with pytest.raises(IllegalAction):
        controller.set_dice(1, 2)


def test_set_dice_validates_values():
    controller = GameController(GameConfig(width=6, height=6))

    with pytest.raises(ValueError):
        controller.set_dice(0, 3)
    with pytest.raises(ValueError):
        controller.set_dice(2, 7)
    assert controller.phase is TurnPhase.AWAITING_ROLL


def test_roll_uses_rng_and_first_turn_flow():
    controller = GameController(GameConfig(width=6, height=6), rng=ScriptedRng([2, 3, 1, 2]))

    assert controller.roll_dice() == Dice(2, 3)
    record = controller.place(0, 0)

    assert record.type == "place"
    assert record.player is Player.P1
    assert record.rect.width == 2 and record.rect.height == 3
    assert engine.count_owned(controller.state, Player.P1) == 6
    assert controller.current_player is Player.P2
    assert controller.state.turn_number == 2
    assert controller.phase is TurnPhase.AWAITING_ROLL

    assert controller.roll_dice() == Dice(1, 2)
    assert controller.current_player is Player.P2


def test_rejected_placement_changes_nothing():
    controller = GameController(GameConfig(width=6, height=6))
    controller.set_dice(1, 2)
    before = [row[:] for row in controller.state.grid]

    with pytest.raises(IllegalPlacement) as excinfo:
        controller.place(2, 2)

    assert excinfo.value.reason is PlacementRejection.MUST_COVER_START
    assert excinfo.value.code == "ILLEGAL_PLACEMENT"
    assert controller.state.grid == before
    assert controller.phase is TurnPhase.DICE_ROLLED
    assert controller.current_player is Player.P1
    assert len(controller.history) == 1


def test_orientation_controls_rectangle_shape():
    controller = GameController(GameConfig(width=5, height=5, p1_corner=Corner.BR))
    controller.set_dice(1, 3)

    assert controller.swap_orientation() == 1
    record = controller.place(2, 4)

    assert (record.rect.width, record.rect.height) == (3, 1)
    assert controller.state.grid[4][2:] == [1, 1, 1]


def test_orientation_is_fixed_for_kush():
    controller = GameController(GameConfig(width=5, height=5))
    controller.set_dice(2, 2)

    controller.set_orientation(1)
    assert controller.swap_orientation() == 0


def test_unplaceable_roll_is_skipped_automatically():
    controller = GameController(GameConfig(width=5, height=5))

    controller.set_dice(6, 5)

    last = controller.history[-1]
    assert last.type == "skip"
    assert last.reason == "auto-no-moves"
    assert last.player is Player.P1
    assert controller.current_player is Player.P2
    assert controller.phase is TurnPhase.AWAITING_ROLL


def test_skip_rules():
    controller = GameController(GameConfig(width=5, height=5))
    controller.set_dice(1, 2)
    with pytest.raises(IllegalAction):
        controller.skip()

    # Take the start corner away so the roll has nowhere to go.
    load_grid(controller, ["2....", ".....", ".....", ".....", "....2"])
    record = controller.skip()

    assert record.reason == "manual"
    assert controller.current_player is Player.P2


def test_kush_cannot_be_skipped():
    controller = GameController(GameConfig(width=5, height=5))
    controller.set_dice(3, 3)

    with pytest.raises(IllegalAction):
        controller.skip()


def test_filling_the_board_ends_the_game():
    controller = GameController(GameConfig(width=5, height=5))
    load_grid(controller, [
        "1..22",
        "11222",
        "11222",
        "11222",
        "11222",
    ])

    controller.set_dice(1, 2)
    controller.place(1, 0, orientation=1)

    assert controller.phase is TurnPhase.GAME_OVER
    assert controller.game_over
    assert controller.winner() is Player.P2
    assert controller.history[-1].free_after == 0
    with pytest.raises(IllegalAction):
        controller.roll_dice()


def test_snapshot_is_a_private_copy():
    controller = GameController(GameConfig(width=6, height=6, p1_corner=Corner.BL))
    controller.set_dice(4, 4)

    view = controller.snapshot()
    view.grid[0][0] = 2

    assert controller.state.grid[0][0] == 0
    assert view.dice_values == (4, 4)
    assert view.is_kush
    assert view.current_player is Player.P1
    assert view.start_cell == (0, 5)
    assert view.turn_number == 1


def test_history_records_serialize():
    controller = GameController(GameConfig(width=5, height=5))
    controller.set_dice(2, 1)
    controller.place(0, 0)

    data = controller.history[-1].to_dict()

    assert data["type"] == "place"
    assert data["player"] == 1
    assert data["dice"] == {"a": 2, "b": 1}
    assert data["rect"] == {"x": 0, "y": 0, "w": 2, "h": 1}
    assert data["isKush"] is False
    assert data["stolenCells"] == 0
    assert data["capturedByContour"] == 0
    assert data["gridSnapshot"] == "11000" + "0" * 20
