import pytest

from dicespaces import evaluator as evaluator_module
from dicespaces.agents import legal_moves_for_view
from dicespaces.evaluator import OVERRIDE_SCORE, HeuristicEvaluator, HeuristicWeights, MoveScore, preset_weights
from dicespaces.types import GameView, Placement, Player


def build_view(rows, player=Player.P1, dice=(1, 2), turn=20) -> GameView:
    grid = [[0 if ch == "." else int(ch) for ch in row] for row in rows]
    return GameView(
        grid=grid,
        width=len(grid[0]),
        height=len(grid),
        dice_values=dice,
        is_kush=dice[0] == dice[1],
        current_player=player,
        turn_number=turn,
    )


def empty_view(size, player, dice=(1, 2), turn=20, cells=()) -> GameView:
    rows = [["."] * size for _ in range(size)]
    for x, y, owner in cells:
        rows[y][x] = str(owner)
    return build_view(["".join(r) for r in rows], player=player, dice=dice, turn=turn)


def move(x, y, w, h, orientation=0) -> Placement:
    return Placement(x, y, orientation, w, h)


def test_presets():
    assert preset_weights("balanced") == HeuristicWeights()
    assert preset_weights("Aggressive").lockdown > HeuristicWeights().lockdown
    assert preset_weights("defensive").risk > 1.0
    with pytest.raises(ValueError):
        preset_weights("reckless")


def test_cell_gain_and_position():
    view = empty_view(6, Player.P1)
    ev = HeuristicEvaluator()

    assert ev.score_cell_gain(move(0, 0, 2, 3)) == 60
    assert ev.score_position(view, move(0, 0, 2, 3)) == 20
    assert ev.score_position(view, move(0, 0, 6, 1)) == 40
    assert ev.score_position(view, move(2, 0, 2, 1)) == 10
    assert ev.score_position(view, move(2, 2, 2, 2)) == 0


def test_connection_counts_abutting_sides():
    rows = [
        "......",
        ".1111.",
        ".1..1.",
        ".1111.",
        "......",
    ]
    ev = HeuristicEvaluator()

    normal = build_view(rows)
    assert ev.connected_sides(normal, move(2, 2, 2, 1)) == 4
    assert ev.score_connection(normal, move(2, 2, 2, 1)) == 60
    assert ev.score_connection(normal, move(0, 0, 1, 1)) == 0

    kush = build_view(rows, dice=(1, 1))
    assert ev.score_connection(kush, move(2, 2, 1, 1)) == 3 * 5


def test_surround_penalty_grades_by_opponent_fraction():
    ev = HeuristicEvaluator()

    assert ev.surround_penalty(build_view(["222", "2.2", "222"]), move(1, 1, 1, 1)) == -200
    assert ev.surround_penalty(build_view(["222", "2.2", "1.1"]), move(1, 1, 1, 1)) == -100
    assert ev.surround_penalty(build_view(["22.", "1.2", "1.1"]), move(1, 1, 1, 1)) == -30
    assert ev.surround_penalty(build_view(["2..", "1.1", "1.1"]), move(1, 1, 1, 1)) == 0


def test_isolation_only_applies_under_kush():
    ev = HeuristicEvaluator()
    cells = [(0, 0, 1)]

    far = empty_view(20, Player.P1, dice=(1, 1), cells=cells)
    assert ev.isolation_penalty(far, move(15, 15, 1, 1)) == -150
    assert ev.isolation_penalty(far, move(4, 4, 1, 1)) == -80
    assert ev.isolation_penalty(far, move(2, 1, 1, 1)) == -30
    assert ev.isolation_penalty(far, move(1, 1, 1, 1)) == 0
    assert ev.isolation_penalty(far, move(1, 0, 1, 1)) == 0

    nothing_owned = empty_view(20, Player.P1, dice=(1, 1))
    assert ev.isolation_penalty(nothing_owned, move(0, 0, 1, 1)) == -150

    normal = empty_view(20, Player.P1, dice=(1, 2), cells=cells)
    assert ev.score_risk(normal, move(15, 15, 1, 2)) == 0


def test_threat_level_needs_density_and_border():
    ev = HeuristicEvaluator()
    rows = ["2" * 10 for _ in range(6)] + ["." * 10 for _ in range(4)]
    view = build_view(rows, player=Player.P1)

    assert ev.threat_level(view, move(1, 1, 2, 2)) == "immediate"
    assert ev.threat_level(view, move(4, 1, 2, 2)) == "high"
    assert ev.threat_level(view, move(4, 4, 2, 2)) == "medium"
    assert ev.threat_level(view, move(4, 8, 2, 2)) == "low"
    assert ev.score_risk(view, move(1, 1, 2, 2)) == -500


def test_contour_rewards_closing_a_pocket():
    view = build_view([
        "1..1..",
        "1.11..",
        "......",
        "......",
    ])
    ev = HeuristicEvaluator()
    baseline = ev.baseline(view)

    assert (baseline.mover, baseline.opponent) == (0, 0)
    assert ev.score_contour(view, move(1, 1, 1, 1), baseline) == 2 * 10
    assert ev.score_contour(view, move(4, 2, 1, 1), baseline) == 0


def test_contour_credits_breaking_opponent_pocket():
    view = build_view([
        "2..2..",
        "2222..",
        "......",
        "......",
    ], player=Player.P1, dice=(1, 1))
    ev = HeuristicEvaluator()
    baseline = ev.baseline(view)

    assert baseline.opponent == 2
    # Taking a wall cell reopens the pocket; filling it does not.
    assert ev.score_contour(view, move(3, 0, 1, 1), baseline) == 2 * 10
    assert ev.score_contour(view, move(1, 0, 1, 1), baseline) == 0


def test_lockdown_large_piece_next_to_opponent():
    view = empty_view(20, Player.P2, dice=(4, 4), turn=1, cells=[(0, 0, 1), (19, 19, 2)])
    ev = HeuristicEvaluator()

    assert ev.opponent_expansion(view) == 1
    assert ev.blocking_value(view, move(1, 1, 4, 4), 1) == 1.0
    # KUSH doubles, the opening turns triple
    assert ev.score_lockdown(view, move(1, 1, 4, 4)) == pytest.approx(600)


def test_lockdown_small_piece_safe_band_and_mirroring():
    ev = HeuristicEvaluator()

    p2_moves = empty_view(20, Player.P2, turn=7, cells=[(0, 0, 1), (19, 19, 2)])
    assert ev.blocking_value(p2_moves, move(11, 11, 1, 1), 1) == pytest.approx(1.0)
    assert ev.score_lockdown(p2_moves, move(11, 11, 1, 1)) == pytest.approx(150)
    assert ev.blocking_value(p2_moves, move(3, 3, 1, 1), 1) == 0.0

    p1_moves = empty_view(20, Player.P1, turn=7, cells=[(0, 0, 1), (19, 19, 2)])
    assert ev.score_lockdown(p1_moves, move(8, 8, 1, 1)) == pytest.approx(150)
    assert ev.score_lockdown(p1_moves, move(15, 15, 1, 1)) == 0.0


def test_lockdown_switches_off_late_or_after_expansion():
    ev = HeuristicEvaluator()
    late = empty_view(20, Player.P2, turn=16, cells=[(0, 0, 1)])
    assert ev.score_lockdown(late, move(1, 1, 4, 4)) == 0.0

    spread = [(x, y, 1) for x in range(4) for y in range(4)]
    expanded = empty_view(20, Player.P2, turn=3, cells=spread)
    assert ev.opponent_expansion(expanded) == 16
    assert ev.score_lockdown(expanded, move(5, 5, 4, 4)) == 0.0


def test_kush_override_covers_cornered_opponent():
    view = empty_view(10, Player.P2, dice=(3, 3), turn=2, cells=[(0, 0, 1), (1, 0, 1), (1, 1, 1), (9, 9, 2)])
    ev = HeuristicEvaluator()
    moves = legal_moves_for_view(view)

    decision = ev.choose(view, moves)

    assert decision.move.x == 0 and decision.move.y == 0
    assert decision.score.override
    assert decision.total == OVERRIDE_SCORE


def test_override_for_opponent_in_bottom_right():
    view = empty_view(10, Player.P1, dice=(2, 2), turn=2, cells=[(0, 0, 1), (9, 9, 2), (8, 9, 2)])
    ev = HeuristicEvaluator()

    override = ev.override_move(view, legal_moves_for_view(view))

    assert override is not None
    assert (override.x, override.y) == (8, 8)


def test_override_needs_the_square_to_fit():
    view = empty_view(10, Player.P2, dice=(2, 2), turn=2, cells=[(0, 0, 1), (2, 0, 1), (9, 9, 2)])
    ev = HeuristicEvaluator()

    assert ev.override_move(view, legal_moves_for_view(view)) is None


def test_choose_keeps_first_move_on_ties():
    zero = HeuristicWeights(
        cell_gain=0, corner=0, edge=0, connection=0, kush_connection=0, contour=0, lockdown=0, risk=0
    )
    ev = HeuristicEvaluator(zero)
    view = empty_view(8, Player.P1, cells=[(0, 0, 1)])
    moves = legal_moves_for_view(view)

    assert ev.choose(view, moves).move == moves[0]
    assert ev.choose(view, []) is None


def test_capture_baseline_is_computed_once_per_decision(monkeypatch):
    grids = []
    real = evaluator_module.find_enclosed

    def counting(grid, player):
        grids.append(grid)
        return real(grid, player)

    monkeypatch.setattr(evaluator_module, "find_enclosed", counting)
    view = empty_view(6, Player.P1, cells=[(0, 0, 1), (5, 5, 2)])

    HeuristicEvaluator().choose(view, legal_moves_for_view(view))

    assert sum(1 for grid in grids if grid is view.grid) == 2


def test_kush_decision_on_default_board_simulates_few_candidates(monkeypatch):
    calls = []
    real = evaluator_module.find_enclosed

    def counting(grid, player):
        calls.append(player)
        return real(grid, player)

    monkeypatch.setattr(evaluator_module, "find_enclosed", counting)
    cells = [(x, 0, 1) for x in range(8)] + [(49, 49, 2)]
    view = empty_view(50, Player.P2, dice=(6, 6), turn=30, cells=cells)
    moves = legal_moves_for_view(view)

    decision = HeuristicEvaluator().choose(view, moves)

    assert len(moves) == 2024
    assert decision is not None
    # Only border squares, squares next to P2's cell and squares stealing P1 cells are re-simulated.
    assert len(calls) < len(moves) // 10


def test_move_score_total_and_dict():
    score = MoveScore(cell_gain=20, position=10, connection=15, contour=-10, risk=-30, lockdown=5)
    assert score.total == 10
    assert score.as_dict()["total"] == 10
    assert MoveScore(override=True).total == OVERRIDE_SCORE
