# rebar_cutting/solver_exact_dp.py
# "True dynamic" strategy: memoized recursion over the remaining-pieces multiset.
#
#   bars(S) = 0                                   if S is empty
#   bars(S) = 1 + min over fills F of bars(S - F)  otherwise
#
# Fills are the maximal bars containing the largest remaining piece, which is
# enough to reach the optimal bar count. Every bar has the same stock length,
# so equal bar counts also mean equal total waste.
#
# Large inputs (over dp_max_segments) and exhausted budgets fall back to
# first-fit-decreasing.

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .config import EngineConfig
from .errors import ComputeBudgetExceeded
from .multiset import LengthMultiset, SearchBudget, Take, materialize_bins
from .progress import ProgressContext
from .solver_base import PackingStrategy, PackOutcome
from .solver_greedy import first_fit_decreasing
from .types import Algorithm, BarSegment

Memo = Dict[Tuple[int, ...], Tuple[int, Optional[Take]]]


class TrueDynamicCuttingStock(PackingStrategy):
    algorithm = Algorithm.TRUE_DYNAMIC

    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        L = config.standard_bar_length
        if len(pieces) > config.dp_max_segments:
            self.log.info(
                f"{self.algorithm.value}: {len(pieces)} segments > {config.dp_max_segments}, "
                f"using first-fit-decreasing"
            )
            return PackOutcome(bins=first_fit_decreasing(pieces, capacity, L))

        root = LengthMultiset.from_segments(pieces)
        budget = SearchBudget(config.exact_max_steps, config.exact_time_limit_s)
        memo: Memo = {}
        try:
            self._best(root, capacity, memo, budget, progress)
        except ComputeBudgetExceeded as exc:
            self.log.warn(f"{self.algorithm.value}: {exc}; using first-fit-decreasing")
            return PackOutcome(
                bins=first_fit_decreasing(pieces, capacity, L),
                budget_exhausted=True,
            )

        takes: List[Take] = []
        state = root
        while not state.is_empty():
            _, take = memo[state.key]
            takes.append(take)
            state = state.remove(take)
        return PackOutcome(bins=materialize_bins(root, takes, pieces, capacity, L), is_exact=True)

    def _best(
        self,
        state: LengthMultiset,
        capacity: int,
        memo: Memo,
        budget: SearchBudget,
        progress: ProgressContext,
    ) -> int:
        if state.is_empty():
            return 0
        hit = memo.get(state.key)
        if hit is not None:
            return hit[0]

        budget.tick()
        progress.incr("states")
        floor = max(1, state.lower_bound(capacity))

        best: Optional[int] = None
        best_take: Optional[Take] = None
        for take in state.fills(capacity, budget):
            n = 1 + self._best(state.remove(take), capacity, memo, budget, progress)
            if best is None or n < best:
                best, best_take = n, take
                if best == floor:
                    break

        memo[state.key] = (best, best_take)
        return best
