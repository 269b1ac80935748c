# rebar_cutting/debug.py
# Debug / inspection helpers:
# - pretty-print cutting plans bar by bar
# - quick ASCII comparison of strategies

from __future__ import annotations

from typing import Iterable

from .solver_adaptive import AlgorithmComparison
from .types import CuttingStockResult, DetailedCut


def print_bar(d: DetailedCut) -> None:
    flag = " reusable" if d.reusable_offcut else ""
    print(f"--- Bar {d.bar_number} ({d.pattern_id}) util={d.utilization:.2f}% waste={d.waste:.3f} m{flag}")
    for c in d.cuts:
        lap = f" lap={c.lap_length:.3f}" if c.has_lap else ""
        print(f"  @{c.position:7.3f}  {c.length:7.3f} m  {c.segment_id}{lap}")


def print_result(result: CuttingStockResult, bars: bool = True) -> None:
    s = result.summary
    print(f"=== dia {result.dia} / {result.algorithm.value} ===")
    print(
        f"Bars: {result.total_bars_used}  Waste: {result.total_waste:.3f} m ({s.total_waste_percentage:.2f}%)  "
        f"Util: {result.average_utilization:.2f}%  Time: {result.execution_time:.3f} s"
    )
    print(f"Cuts: {s.total_cuts_produced}  Reusable offcuts: {s.reusable_offcut_count} ({s.reusable_offcut_length:.3f} m)")
    if result.budget_exhausted:
        print("Search budget exhausted; best found so far.")
    if bars:
        for d in result.detailed_cuts:
            print_bar(d)


def print_results(results: Iterable[CuttingStockResult]) -> None:
    for r in results:
        print_result(r, bars=False)


def print_comparison(comparison: AlgorithmComparison) -> None:
    print(f"{'algorithm':18s} {'bars':>5s} {'waste':>9s} {'util%':>7s} {'time s':>8s} {'+bars':>6s}  quality")
    for row in comparison.comparison:
        print(
            f"{row.algorithm.value:18s} {row.bars_used:5d} {row.waste:9.3f} {row.utilization:7.2f} "
            f"{row.execution_time:8.3f} {row.extra_bars:6d}  {row.quality}"
        )
    print(comparison.recommendation)
