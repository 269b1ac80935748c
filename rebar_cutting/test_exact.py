# rebar_cutting/test_exact.py
# Remaining-multiset arena and the two exact strategies.

from __future__ import annotations

import itertools

import pytest

from rebar_cutting.config import make_engine_config
from rebar_cutting.errors import ComputeBudgetExceeded
from rebar_cutting.logger import Logger
from rebar_cutting.multiset import LengthMultiset, SearchBudget, materialize_bins, takes_from_bins
from rebar_cutting.preprocess import RequestPreprocessor
from rebar_cutting.sample_data import RandomRequirementsConfig, generate_random_requirements
from rebar_cutting.solver_branch_bound import BranchAndBoundCuttingStock
from rebar_cutting.solver_exact_dp import TrueDynamicCuttingStock
from rebar_cutting.solver_greedy import first_fit_decreasing
from rebar_cutting.types import CuttingRequirement

QUIET = Logger(enabled=False)


def _requests(*lengths: float):
    rows = [
        CuttingRequirement(str(i + 1), f"B{i + 1}", dia=12, quantity=1, cutting_length=x)
        for i, x in enumerate(lengths)
    ]
    return RequestPreprocessor(12.0).convert_to_cutting_requests(rows)


def test_multiset_key_and_bounds() -> None:
    ms = LengthMultiset.from_units([4000, 7000, 4000, 1000])
    assert ms.lengths == (7000, 4000, 1000)
    assert ms.key == (1, 2, 1)
    assert ms.total == 16000
    assert ms.size == 4
    assert ms.lower_bound(12000) == 2
    assert not ms.is_empty()

    rest = ms.remove((1, 1, 1))
    assert rest.key == (0, 1, 0)
    assert rest.lengths == ms.lengths
    assert rest.remove((0, 1, 0)).is_empty()


def test_fills_are_maximal_and_contain_the_largest() -> None:
    ms = LengthMultiset.from_units([7000, 5000, 4000, 4000, 3000])
    fills = ms.fills(12000)

    assert fills[0] == (1, 1, 0, 0)        # 7 + 5 = 12, fullest first
    for take in fills:
        assert take[0] == 1
        assert ms.used(take) <= 12000
        free = 12000 - ms.used(take)
        left = ms.remove(take)
        assert all(u > free for u, c in zip(left.lengths, left.counts) if c > 0)


def test_fills_of_empty_multiset() -> None:
    assert LengthMultiset.from_units([]).fills(12000) == []


def _brute_force_fills(ms: LengthMultiset, capacity: int):
    out = set()
    for take in itertools.product(*(range(c + 1) for c in ms.counts)):
        if take[0] < 1 or ms.used(take) > capacity:
            continue
        free = capacity - ms.used(take)
        if all(u > free for u, c, k in zip(ms.lengths, ms.counts, take) if c - k > 0):
            out.add(take)
    return out


@pytest.mark.parametrize(
    "units",
    [
        [7000, 5000, 4000, 4000, 3000],
        [6000, 4800, 4800, 3600, 3600, 3600, 3600],
        [5500, 3300, 2900, 2900, 2200, 1100, 1100, 900],
        [11000, 700, 600, 600, 500, 400],
    ],
)
def test_pruned_fills_match_exhaustive_enumeration(units) -> None:
    ms = LengthMultiset.from_units(units)
    assert set(ms.fills(12000)) == _brute_force_fills(ms, 12000)


def test_fills_tick_the_budget() -> None:
    ms = LengthMultiset.from_units(range(1000, 3000, 37))
    with pytest.raises(ComputeBudgetExceeded):
        ms.fills(12000, SearchBudget(max_steps=5, time_limit_s=60.0))


def test_search_budget_step_limit() -> None:
    budget = SearchBudget(max_steps=3, time_limit_s=60.0)
    for _ in range(3):
        budget.tick()
    with pytest.raises(ComputeBudgetExceeded):
        budget.tick()


def test_takes_round_trip_through_bins() -> None:
    reqs = _requests(6.0, 4.0, 5.0, 3.0, 2.0)
    segs = RequestPreprocessor.sort_segments_by_length(RequestPreprocessor.extract_all_segments(reqs))
    arena = LengthMultiset.from_segments(segs)

    bins = first_fit_decreasing(segs, 12000, 12.0)
    takes = takes_from_bins(arena, bins)
    rebuilt = materialize_bins(arena, takes, segs, 12000, 12.0)

    assert [b.used_units for b in rebuilt] == [b.used_units for b in bins]


def test_dynamic_and_branch_and_bound_agree_on_random_inputs() -> None:
    cfg = make_engine_config(exact_time_limit_s=5.0)
    pre = RequestPreprocessor(12.0)
    for seed in range(5):
        rows = generate_random_requirements(
            RandomRequirementsConfig(seed=seed, n_rows=5, dias=(16,), qty_range=(1, 3), p_long=0.0)
        )
        reqs = pre.convert_to_cutting_requests(rows)
        dp = TrueDynamicCuttingStock(cfg, QUIET).solve(reqs, 16)
        bb = BranchAndBoundCuttingStock(cfg, QUIET).solve(reqs, 16)
        if dp.is_exact and bb.is_exact:
            assert dp.total_bars_used == bb.total_bars_used
        assert dp.total_bars_used >= pre.estimate_minimum_bars(reqs)


def test_exact_results_are_flagged() -> None:
    reqs = _requests(6.0, 6.0, 4.8, 4.8, 3.6, 3.6, 3.6, 3.6)
    for cls in (TrueDynamicCuttingStock, BranchAndBoundCuttingStock):
        res = cls(make_engine_config(), QUIET).solve(reqs, 12)
        assert res.total_bars_used == 3
        assert res.is_exact
        assert not res.budget_exhausted


@pytest.mark.parametrize("cls", [TrueDynamicCuttingStock, BranchAndBoundCuttingStock])
def test_exhausted_budget_falls_back_to_first_fit(cls) -> None:
    # ceil(21 / 12) = 2 but three bars are needed, so the search must run
    reqs = _requests(7.0, 7.0, 7.0)
    cfg = make_engine_config(exact_max_steps=1)
    res = cls(cfg, QUIET).solve(reqs, 12)

    assert res.budget_exhausted
    assert not res.is_exact
    assert res.total_bars_used == 3


def test_dynamic_skips_search_above_size_guard() -> None:
    reqs = _requests(*([1.5] * 9))
    cfg = make_engine_config(dp_max_segments=5)
    res = TrueDynamicCuttingStock(cfg, QUIET).solve(reqs, 12)

    assert not res.is_exact
    assert not res.budget_exhausted
    assert res.total_bars_used == 2


def test_branch_and_bound_large_inputs_use_first_fit() -> None:
    reqs = _requests(6.0, 6.0, 4.8, 4.8, 3.6, 3.6, 3.6, 3.6)
    cfg = make_engine_config(branch_and_bound_threshold=8)
    res = BranchAndBoundCuttingStock(cfg, QUIET).solve(reqs, 12)

    assert res.total_bars_used == 4
    assert not res.is_exact


def _distinct(n: int, start: float, step: float):
    return _requests(*(round(start + step * i, 3) for i in range(n)))


def test_many_distinct_short_lengths_fill_one_bar_quickly() -> None:
    # 24 stirrup-like lengths, 10.236 m in total
    reqs = _distinct(24, 0.300, 0.011)
    cfg = make_engine_config(exact_time_limit_s=1.0)
    for cls in (TrueDynamicCuttingStock, BranchAndBoundCuttingStock):
        res = cls(cfg, QUIET).solve(reqs, 12)
        assert res.total_bars_used == 1
        assert res.is_exact
        assert res.execution_time < 1.0


def test_time_limit_stops_the_dynamic_search() -> None:
    reqs = _distinct(36, 1.0, 0.07)
    cfg = make_engine_config(exact_time_limit_s=1e-9)
    res = TrueDynamicCuttingStock(cfg, QUIET).solve(reqs, 12)

    assert res.budget_exhausted
    assert not res.is_exact
    assert res.total_bars_used >= RequestPreprocessor(12.0).estimate_minimum_bars(reqs)


@pytest.mark.parametrize("cls", [TrueDynamicCuttingStock, BranchAndBoundCuttingStock])
def test_wide_arena_respects_the_time_limit(cls) -> None:
    reqs = _distinct(30, 0.300, 0.011)
    cfg = make_engine_config(exact_time_limit_s=0.5)
    res = cls(cfg, QUIET).solve(reqs, 12)

    assert res.execution_time < 5.0
    assert res.total_bars_used == 2
    assert res.is_exact or res.budget_exhausted
