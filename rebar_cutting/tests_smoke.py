# rebar_cutting/tests_smoke.py
# Very small smoke tests you can run with:
#   python -m rebar_cutting.tests_smoke
#
# These are not full unit tests, but they quickly tell you if
# preprocessing, the strategies, validation and exports are wired correctly.

from __future__ import annotations

from rebar_cutting.config import make_engine_config
from rebar_cutting.logger import get_logger
from rebar_cutting.run import run_adaptive
from rebar_cutting.types import CuttingRequirement
from rebar_cutting.validate import raise_on_errors, validate_result


def test_basic_schedule() -> None:
    get_logger().enabled = False
    rows = [
        CuttingRequirement("1", "B1", dia=12, quantity=4, cutting_length=5.5),
        CuttingRequirement("2", "B2", dia=12, quantity=2, cutting_length=18.0, lap_length=0.6),
        CuttingRequirement("3", "S1", dia=10, quantity=6, cutting_length=1.75),
    ]

    res = run_adaptive(rows, config=make_engine_config(standard_bar_length=12.0))

    assert sorted(res.results) == [10, 12]
    for dia, ranked in res.results.items():
        raise_on_errors(validate_result(ranked[0], res.requests))
        assert ranked[0].total_bars_used >= 1
    assert res.total_bars() >= 1


def test_spliced_bar_is_fully_cut() -> None:
    get_logger().enabled = False
    rows = [CuttingRequirement("1", "L1", dia=16, quantity=1, cutting_length=20.0, lap_length=0.5)]

    res = run_adaptive(rows)
    best = res.best[16]

    # 12.0 + 8.5 m cut from two stock bars
    assert best.total_bars_used == 2
    assert round(best.total_cut_length(), 3) == 20.5


def main() -> None:
    print("Running smoke tests...")
    test_basic_schedule()
    test_spliced_bar_is_fully_cut()
    print("OK")


if __name__ == "__main__":
    main()
