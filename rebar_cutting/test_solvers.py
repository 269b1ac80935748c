# rebar_cutting/test_solvers.py
# Behaviour shared by every packing strategy, plus the worked scenarios.

from __future__ import annotations

import pytest

from rebar_cutting.config import make_engine_config
from rebar_cutting.errors import DecompositionInvariantViolation, InvalidArgument
from rebar_cutting.logger import Logger
from rebar_cutting.preprocess import RequestPreprocessor
from rebar_cutting.progress import ProgressContext
from rebar_cutting.sample_data import RandomRequirementsConfig, generate_random_requirements
from rebar_cutting.solver_adaptive import make_strategy
from rebar_cutting.solver_improved_greedy import _search
from rebar_cutting.types import ALGORITHM_ORDER, Algorithm, CuttingRequirement
from rebar_cutting.validate import raise_on_errors, validate_result

QUIET = Logger(enabled=False)
CONFIG = make_engine_config(exact_time_limit_s=5.0)


def _requests(*lengths: float, dia: int = 12, lap: float = 0.0):
    rows = [
        CuttingRequirement(str(i + 1), f"B{i + 1}", dia=dia, quantity=1, cutting_length=x, lap_length=lap)
        for i, x in enumerate(lengths)
    ]
    return RequestPreprocessor(12.0).convert_to_cutting_requests(rows)


def _solve(algorithm: Algorithm, requests, dia: int = 12, **kwargs):
    return make_strategy(algorithm, CONFIG, QUIET).solve(requests, dia, **kwargs)


@pytest.mark.parametrize("algorithm", [a for a in ALGORITHM_ORDER if a is not Algorithm.GREEDY])
def test_exact_fit_of_three_pieces(algorithm: Algorithm) -> None:
    res = _solve(algorithm, _requests(6.0, 4.0, 2.0))
    assert res.total_bars_used == 1
    assert res.total_waste == 0.0
    assert res.patterns[0].utilization == pytest.approx(100.0)


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_two_long_pieces_need_two_bars(algorithm: Algorithm) -> None:
    res = _solve(algorithm, _requests(7.0, 7.0))
    assert res.total_bars_used == 2
    assert res.total_waste == pytest.approx(10.0)


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_single_piece_waste_and_utilization(algorithm: Algorithm) -> None:
    res = _solve(algorithm, _requests(10.0))
    assert res.total_bars_used == 1
    assert res.patterns[0].waste == 2.0
    assert round(res.average_utilization, 2) == 83.33
    assert res.detailed_cuts[0].reusable_offcut


def test_greedy_packs_equal_pieces_together() -> None:
    res = _solve(Algorithm.GREEDY, _requests(4.0, 4.0, 4.0))
    assert res.total_bars_used == 1
    assert res.patterns[0].piece_count() == 3
    assert res.total_waste == 0.0
    assert res.summary.total_cuts_produced == 3


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_unmatched_diameter_gives_empty_result(algorithm: Algorithm) -> None:
    res = _solve(algorithm, _requests(6.0, 4.0), dia=25)
    assert res.total_bars_used == 0
    assert res.patterns == ()
    assert res.detailed_cuts == ()
    assert res.total_waste == 0
    assert res.average_utilization == 0
    assert res.algorithm is algorithm


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_non_positive_bar_length_is_rejected(algorithm: Algorithm) -> None:
    with pytest.raises(InvalidArgument):
        _solve(algorithm, _requests(6.0), standard_bar_length=0.0)


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_segment_longer_than_bar_is_rejected(algorithm: Algorithm) -> None:
    with pytest.raises(DecompositionInvariantViolation):
        _solve(algorithm, _requests(11.0), standard_bar_length=10.0)


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_spliced_request_is_cut_completely(algorithm: Algorithm) -> None:
    reqs = _requests(20.0, 3.5, lap=0.5)
    res = _solve(algorithm, reqs)
    raise_on_errors(validate_result(res, reqs))
    cut_ids = sorted(c.segment_id for p in res.patterns for c in p.cuts)
    assert cut_ids == ["1/B1/12_seg_0", "1/B1/12_seg_1", "2/B2/12_seg_0"]


def test_detailed_cut_positions_accumulate() -> None:
    reqs = _requests(20.0, lap=0.5)
    res = _solve(Algorithm.GREEDY, _requests(5.0, 4.0, 2.5))
    positions = [c.position for c in res.detailed_cuts[0].cuts]
    assert positions == [0.0, 5.0, 9.0]
    assert res.detailed_cuts[0].bar_number == 1
    assert res.detailed_cuts[0].waste == 0.5
    assert not res.detailed_cuts[0].reusable_offcut

    spliced = _solve(Algorithm.GREEDY, reqs)
    laps = {c.segment_id: (c.has_lap, c.lap_length) for d in spliced.detailed_cuts for c in d.cuts}
    assert laps["1/B1/12_seg_0"] == (True, 0.5)
    assert laps["1/B1/12_seg_1"] == (False, 0.0)


def test_first_fit_decreasing_is_beaten_by_the_others() -> None:
    # FFD: 6+6 | 4.8+4.8 | 3.6*3 | 3.6 ; best: 6+6 | 4.8+3.6+3.6 | 4.8+3.6+3.6
    reqs = _requests(6.0, 6.0, 4.8, 4.8, 3.6, 3.6, 3.6, 3.6)
    bars = {a: _solve(a, reqs).total_bars_used for a in ALGORITHM_ORDER}
    assert bars[Algorithm.GREEDY] == 4
    for a in ALGORITHM_ORDER[1:]:
        assert bars[a] == 3, a


def test_combination_search_respects_piece_counts() -> None:
    assert _search([4000], {4000: 2}, 0, 3, 12000, 12000, [], {}) is None
    assert _search([4000], {4000: 3}, 0, 3, 12000, 12000, [], {}) == [4000, 4000, 4000]
    assert _search([5000, 3500], {5000: 1, 3500: 2}, 0, 3, 12000, 12000, [], {}) == [5000, 3500, 3500]
    assert _search([5000, 3500], {5000: 2, 3500: 1}, 0, 3, 12000, 12000, [], {}) is None


@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_results_are_deterministic(algorithm: Algorithm) -> None:
    reqs = _requests(5.1, 4.3, 3.3, 2.9, 2.2, 7.7, 6.4, 1.1, 0.9)
    a = _solve(algorithm, reqs)
    b = _solve(algorithm, reqs)
    assert a.patterns == b.patterns
    assert a.detailed_cuts == b.detailed_cuts


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
@pytest.mark.parametrize("algorithm", ALGORITHM_ORDER)
def test_invariants_on_random_schedules(algorithm: Algorithm, seed: int) -> None:
    rows = generate_random_requirements(RandomRequirementsConfig(seed=seed, n_rows=6, dias=(12,)))
    pre = RequestPreprocessor(12.0)
    reqs = pre.convert_to_cutting_requests(rows)

    res = _solve(algorithm, reqs)
    raise_on_errors(validate_result(res, reqs))
    assert res.total_bars_used >= pre.estimate_minimum_bars(reqs)

    greedy = _solve(Algorithm.GREEDY, reqs)
    if algorithm is Algorithm.WASTE_OPTIMIZED:
        assert res.total_bars_used <= greedy.total_bars_used


def test_progress_is_reported() -> None:
    seen = []
    ctx = ProgressContext("t")
    unsubscribe = ctx.subscribe(seen.append)
    _solve(Algorithm.IMPROVED_GREEDY, _requests(6.0, 4.0, 2.0, 7.0), progress=ctx)
    unsubscribe()

    assert seen
    assert seen[-1].percent == 100.0
    assert ctx.counters["segments"] == 4
    assert "improved-greedy.pack" in ctx.phases
