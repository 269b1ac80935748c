# rebar_cutting/solver_waste_optimized.py
# CP-SAT (OR-Tools) strategy: fill one stock bar at a time as tightly as possible.
#
# For each new bar a small integer model picks how many pieces of each
# remaining length go on it:
#   - take[j] in [0, min(remaining_j, capacity // len_j)]
#   - sum(len_j * take[j]) <= capacity
#   - maximize used length; among equally full bars prefer fewer pieces
# then the chosen pieces are removed and we repeat (pack best subset, remove,
# repeat until everything is cut).
#
# Sequential local optimization can lose to plain first-fit-decreasing on some
# inputs, so the final packing is compared against it and the better one wins.

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from ortools.sat.python import cp_model

from .config import EngineConfig
from .progress import ProgressContext
from .solver_base import PackingStrategy, PackOutcome
from .solver_greedy import first_fit_decreasing
from .types import Algorithm, BarSegment, CuttingBin, to_units


@dataclass(frozen=True)
class BarModelParams:
    time_limit_s: float = 2.0
    deterministic_time: float = 1.0
    num_workers: int = 1

    @classmethod
    def from_config(cls, config: EngineConfig) -> "BarModelParams":
        return cls(
            time_limit_s=config.cp_time_limit_s_per_bar,
            deterministic_time=config.cp_deterministic_time_per_bar,
            num_workers=config.cp_num_workers,
        )


def _solve_one_bar(
    lengths: List[int],
    counts: List[int],
    capacity: int,
    params: BarModelParams,
) -> Optional[List[int]]:
    """
    Choose counts per length for ONE bar.
    Returns None when the solver finds nothing usable.
    """
    n_pieces = sum(counts)
    m = cp_model.CpModel()

    take = []
    for j, (u, c) in enumerate(zip(lengths, counts)):
        take.append(m.NewIntVar(0, min(c, capacity // u), f"take[{j}]"))

    used = m.NewIntVar(0, capacity, "used")
    m.Add(used == sum(u * t for u, t in zip(lengths, take)))

    pieces = m.NewIntVar(0, n_pieces, "pieces")
    m.Add(pieces == sum(take))

    # Any extra millimeter outweighs every possible piece-count difference
    m.Maximize(used * (n_pieces + 1) - pieces)

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = float(params.time_limit_s)
    solver.parameters.max_deterministic_time = float(params.deterministic_time)
    solver.parameters.num_workers = int(params.num_workers)

    status = solver.Solve(m)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        return None
    chosen = [int(solver.Value(t)) for t in take]
    if sum(chosen) == 0:
        return None
    return chosen


class WasteOptimizedCuttingStock(PackingStrategy):
    algorithm = Algorithm.WASTE_OPTIMIZED

    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        params = BarModelParams.from_config(config)

        groups: Dict[int, List[BarSegment]] = {}
        for seg in pieces:
            groups.setdefault(to_units(seg.length), []).append(seg)

        bins: List[CuttingBin] = []
        total = len(pieces)
        placed = 0
        while groups:
            lengths = sorted(groups, reverse=True)
            counts = [len(groups[u]) for u in lengths]
            b = self._new_bin(bins, capacity, config)

            if sum(u * c for u, c in zip(lengths, counts)) <= capacity:
                chosen: Optional[List[int]] = counts
            else:
                chosen = _solve_one_bar(lengths, counts, capacity, params)
                progress.incr("cp_models")
                if chosen is None:
                    self.log.debug(f"{self.algorithm.value}: no CP-SAT fill, cutting largest piece alone")
                    chosen = [1] + [0] * (len(lengths) - 1)

            for u, k in zip(lengths, chosen):
                for _ in range(k):
                    b.add(groups[u].pop(0), u)
                if not groups[u]:
                    del groups[u]
            placed += len(b.pieces)
            progress.set_progress(100.0 * placed / total)

        ffd = first_fit_decreasing(pieces, capacity, config.standard_bar_length)
        if len(ffd) < len(bins):
            self.log.debug(
                f"{self.algorithm.value}: first-fit-decreasing uses {len(ffd)} bars vs {len(bins)}, keeping it"
            )
            progress.incr("ffd_fallbacks")
            return PackOutcome(bins=ffd)
        return PackOutcome(bins=bins)
