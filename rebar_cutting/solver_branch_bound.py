# rebar_cutting/solver_branch_bound.py
# Depth-first branch and bound, committing one stock bar per level.
#
# - incumbent: first-fit-decreasing
# - bound: bars so far + ceil(remaining length / capacity); prune when >= best
# - a remaining multiset already reached with no more bars is not expanded again
# - stops as soon as the global lower bound is met
#
# At or above branch_and_bound_threshold segments the search is skipped and
# first-fit-decreasing is returned.

from __future__ import annotations

from typing import Dict, List, Tuple

from .config import EngineConfig
from .errors import ComputeBudgetExceeded
from .multiset import LengthMultiset, SearchBudget, Take, materialize_bins, takes_from_bins
from .progress import ProgressContext
from .solver_base import PackingStrategy, PackOutcome
from .solver_greedy import first_fit_decreasing
from .types import Algorithm, BarSegment


class _Search:
    def __init__(
        self,
        capacity: int,
        incumbent: List[Take],
        budget: SearchBudget,
        progress: ProgressContext,
        global_lb: int,
    ) -> None:
        self.capacity = capacity
        self.best: List[Take] = list(incumbent)
        self.budget = budget
        self.progress = progress
        self.global_lb = global_lb
        self.path: List[Take] = []
        self.seen: Dict[Tuple[int, ...], int] = {}

    def done(self) -> bool:
        return len(self.best) <= self.global_lb

    def run(self, state: LengthMultiset) -> None:
        self.budget.tick()
        self.progress.incr("nodes")

        depth = len(self.path)
        if state.is_empty():
            if depth < len(self.best):
                self.best = list(self.path)
                self.progress.incr("improvements")
            return
        if depth + state.lower_bound(self.capacity) >= len(self.best):
            self.progress.incr("pruned")
            return
        prev = self.seen.get(state.key)
        if prev is not None and prev <= depth:
            return
        self.seen[state.key] = depth

        for take in state.fills(self.capacity, self.budget):
            self.path.append(take)
            self.run(state.remove(take))
            self.path.pop()
            if self.done():
                return


class BranchAndBoundCuttingStock(PackingStrategy):
    algorithm = Algorithm.BRANCH_AND_BOUND

    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        L = config.standard_bar_length
        ffd = first_fit_decreasing(pieces, capacity, L)
        if len(pieces) >= config.branch_and_bound_threshold:
            self.log.info(
                f"{self.algorithm.value}: {len(pieces)} segments >= "
                f"{config.branch_and_bound_threshold}, using first-fit-decreasing"
            )
            return PackOutcome(bins=ffd)

        root = LengthMultiset.from_segments(pieces)
        global_lb = root.lower_bound(capacity)
        if len(ffd) <= global_lb:
            return PackOutcome(bins=ffd, is_exact=True)

        search = _Search(
            capacity,
            takes_from_bins(root, ffd),
            SearchBudget(config.exact_max_steps, config.exact_time_limit_s),
            progress,
            global_lb,
        )
        exhausted = False
        try:
            search.run(root)
        except ComputeBudgetExceeded as exc:
            self.log.warn(f"{self.algorithm.value}: {exc}; keeping best found ({len(search.best)} bars)")
            exhausted = True

        if len(search.best) >= len(ffd):
            return PackOutcome(bins=ffd, is_exact=not exhausted, budget_exhausted=exhausted)
        bins = materialize_bins(root, search.best, pieces, capacity, L)
        return PackOutcome(bins=bins, is_exact=not exhausted, budget_exhausted=exhausted)
