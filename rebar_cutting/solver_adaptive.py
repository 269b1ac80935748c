# rebar_cutting/solver_adaptive.py
# Runs several strategies on one diameter group and ranks their results.
#
# Size class (expanded segment count vs large_problem_threshold):
#   small -> all five strategies
#   large -> greedy, improved-greedy, waste-optimized, branch-and-bound
#            (branch-and-bound itself returns first-fit-decreasing when large)
# Results are ordered by (bars, waste, registration order).

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import InvalidArgument
from .logger import LOGGER, Logger
from .preprocess import RequestPreprocessor
from .progress import ProgressContext, ensure_context
from .solver_base import PackingStrategy
from .solver_branch_bound import BranchAndBoundCuttingStock
from .solver_exact_dp import TrueDynamicCuttingStock
from .solver_greedy import GreedyCuttingStock
from .solver_improved_greedy import ImprovedGreedyCuttingStock
from .solver_waste_optimized import WasteOptimizedCuttingStock
from .types import (
    ALGORITHM_ORDER,
    Algorithm,
    BarSegment,
    CuttingRequest,
    CuttingStockResult,
    empty_result,
)


STRATEGIES: Dict[Algorithm, Type[PackingStrategy]] = {
    Algorithm.GREEDY: GreedyCuttingStock,
    Algorithm.IMPROVED_GREEDY: ImprovedGreedyCuttingStock,
    Algorithm.WASTE_OPTIMIZED: WasteOptimizedCuttingStock,
    Algorithm.TRUE_DYNAMIC: TrueDynamicCuttingStock,
    Algorithm.BRANCH_AND_BOUND: BranchAndBoundCuttingStock,
}

LARGE_PROBLEM_STRATEGIES: Tuple[Algorithm, ...] = (
    Algorithm.GREEDY,
    Algorithm.IMPROVED_GREEDY,
    Algorithm.WASTE_OPTIMIZED,
    Algorithm.BRANCH_AND_BOUND,
)


def make_strategy(
    algorithm: Algorithm,
    config: Optional[EngineConfig] = None,
    logger: Optional[Logger] = None,
) -> PackingStrategy:
    return STRATEGIES[Algorithm(algorithm)](config=config, logger=logger)


@dataclass(frozen=True)
class DatasetCharacteristics:
    total_segments: int
    unique_lengths: int
    average_segment_length: float
    length_variance: float
    max_demand_per_segment: int
    complexity_score: float   # 0..1, higher = harder


@dataclass(frozen=True)
class AlgorithmSummary:
    algorithm: Algorithm
    bars_used: int
    waste: float
    utilization: float
    execution_time: float
    extra_bars: int          # vs best
    extra_waste: float       # vs best
    quality: str             # Optimal / Excellent / Good / Fair
    is_exact: bool = False
    budget_exhausted: bool = False


@dataclass(frozen=True)
class AlgorithmComparison:
    best: CuttingStockResult
    comparison: Tuple[AlgorithmSummary, ...]
    recommendation: str


def analyze_dataset(segments: Sequence[BarSegment]) -> DatasetCharacteristics:
    n = len(segments)
    if n == 0:
        return DatasetCharacteristics(0, 0, 0.0, 0.0, 0, 0.0)
    lengths = [s.length for s in segments]
    mean = sum(lengths) / n
    variance = sum((x - mean) ** 2 for x in lengths) / n
    demand: Dict[str, int] = {}
    for s in segments:
        demand[s.segment_id] = demand.get(s.segment_id, 0) + 1
    unique = len({round(x, 3) for x in lengths})
    max_demand = max(demand.values())

    score = (
        0.3 * min(n / 100, 1.0)
        + 0.3 * min(unique / 20, 1.0)
        + 0.2 * min(variance / 10, 1.0)
        + 0.2 * min(max_demand / 50, 1.0)
    )
    return DatasetCharacteristics(
        total_segments=n,
        unique_lengths=unique,
        average_segment_length=round(mean, 3),
        length_variance=round(variance, 3),
        max_demand_per_segment=max_demand,
        complexity_score=round(score, 2),
    )


def _rank_key(result: CuttingStockResult) -> Tuple[int, float, int]:
    return (result.total_bars_used, result.total_waste, ALGORITHM_ORDER.index(result.algorithm))


def _quality(bars: int, min_bars: int) -> str:
    if bars == min_bars:
        return "Optimal"
    if bars <= min_bars + 1:
        return "Excellent"
    if bars <= min_bars + 2:
        return "Good"
    return "Fair"


class AdaptiveSelector:
    def __init__(self, config: Optional[EngineConfig] = None, logger: Optional[Logger] = None) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.log = logger if logger is not None else LOGGER

    def select_algorithms(self, segment_count: int) -> Tuple[Algorithm, ...]:
        if segment_count < self.config.large_problem_threshold:
            return ALGORITHM_ORDER
        return LARGE_PROBLEM_STRATEGIES

    def solve(
        self,
        requests: Iterable[CuttingRequest],
        dia: int,
        standard_bar_length: Optional[float] = None,
        *,
        progress: Optional[ProgressContext] = None,
    ) -> List[CuttingStockResult]:
        requests = list(requests)
        ctx = ensure_context(progress, f"adaptive dia {dia}")
        cfg = self.config.with_bar_length(standard_bar_length)
        log = self.log.child(f"dia {dia}")

        segments = RequestPreprocessor.extract_all_segments(RequestPreprocessor.filter_by_dia(requests, dia))
        if not segments:
            log.info("no segments, nothing to cut")
            return [empty_result(Algorithm.GREEDY, dia)]

        chars = analyze_dataset(segments)
        chosen = self.select_algorithms(chars.total_segments)
        log.info(
            f"{chars.total_segments} segments, {chars.unique_lengths} lengths, "
            f"complexity {chars.complexity_score:.2f} -> {', '.join(a.value for a in chosen)}"
        )

        results: List[CuttingStockResult] = []
        for k, algorithm in enumerate(chosen):
            strategy = make_strategy(algorithm, cfg, log)
            res = strategy.solve(requests, dia, progress=ctx.scoped(algorithm.value))
            log.info(
                f"  {algorithm.value:18s}: {res.total_bars_used} bars, waste {res.total_waste:.3f} m, "
                f"{res.execution_time:.3f} s"
            )
            results.append(res)
            ctx.set_progress(100.0 * (k + 1) / len(chosen))

        results.sort(key=_rank_key)
        return results

    def get_algorithm_comparison(self, results: Sequence[CuttingStockResult]) -> AlgorithmComparison:
        if not results:
            raise InvalidArgument("No results to compare")
        best = results[0]
        min_bars = min(r.total_bars_used for r in results)
        rows = tuple(
            AlgorithmSummary(
                algorithm=r.algorithm,
                bars_used=r.total_bars_used,
                waste=round(r.total_waste, 3),
                utilization=round(r.average_utilization, 2),
                execution_time=r.execution_time,
                extra_bars=r.total_bars_used - best.total_bars_used,
                extra_waste=round(r.total_waste - best.total_waste, 3),
                quality=_quality(r.total_bars_used, min_bars),
                is_exact=r.is_exact,
                budget_exhausted=r.budget_exhausted,
            )
            for r in results
        )
        return AlgorithmComparison(best=best, comparison=rows, recommendation=self._recommend(results))

    @staticmethod
    def _recommend(results: Sequence[CuttingStockResult]) -> str:
        best = results[0]
        fastest = min(results, key=lambda r: r.execution_time)
        if best.algorithm == fastest.algorithm:
            return (
                f"{best.algorithm.value} provides the best solution ({best.total_bars_used} bars) "
                f"with good performance ({best.execution_time * 1000:.0f} ms)."
            )
        time_diff = best.execution_time - fastest.execution_time
        bar_diff = fastest.total_bars_used - best.total_bars_used
        if bar_diff <= 1 and time_diff > 1.0:
            return (
                f"{fastest.algorithm.value} is recommended for its speed "
                f"({fastest.execution_time * 1000:.0f} ms) with minimal quality loss ({bar_diff} extra bars)."
            )
        return (
            f"{best.algorithm.value} is recommended for optimal quality ({best.total_bars_used} bars, "
            f"{best.total_waste:.3f} m waste) despite longer execution time."
        )
