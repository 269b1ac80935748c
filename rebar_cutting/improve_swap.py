# rebar_cutting/improve_swap.py
# Local-search improvement pass over already packed stock bars.
#
# One pass runs three neighbourhoods in turn:
#   1) moves: shift a single piece to another bar with room
#   2) consolidation: empty a whole bar when all its pieces fit elsewhere
#   3) exchanges: swap one piece each between two bars
# Moves and exchanges are accepted only when sum(used^2) over the bars grows,
# i.e. full bars get fuller and light bars get lighter until one empties.
# No step ever opens a bar, so bar count and total waste never grow.

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .config import EngineConfig
from .logger import LOGGER, Logger
from .progress import ProgressContext, ensure_context
from .types import BarSegment, CuttingBin, to_units


def best_fit_decreasing(
    pieces: Sequence[BarSegment],
    capacity: int,
    standard_bar_length: float,
) -> List[CuttingBin]:
    """
    Place each piece (already sorted longest first) into the open bar it
    leaves the least room in; open a new bar when none has room.
    """
    bins: List[CuttingBin] = []
    for seg in pieces:
        u = to_units(seg.length)
        target: Optional[CuttingBin] = None
        for b in bins:
            if b.fits(u) and (target is None or b.remaining_units < target.remaining_units):
                target = b
        if target is None:
            target = CuttingBin(
                id=f"bin_{len(bins) + 1}",
                capacity_units=capacity,
                standard_bar_length=standard_bar_length,
            )
            bins.append(target)
        target.add(seg, u)
    return bins


@dataclass(frozen=True)
class SwapParams:
    max_passes: int = 3
    max_iterations: int = 100   # per neighbourhood, per pass

    @classmethod
    def from_config(cls, config: EngineConfig) -> "SwapParams":
        return cls(max_passes=config.swap_max_passes, max_iterations=config.swap_max_iterations)


class SwapImprover:
    def __init__(
        self,
        params: Optional[SwapParams] = None,
        progress: Optional[ProgressContext] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.params = params if params is not None else SwapParams()
        self.progress = ensure_context(progress, "swap")
        self.log = logger if logger is not None else LOGGER

    def improve(self, bins: Sequence[CuttingBin]) -> List[CuttingBin]:
        """
        Return an improved copy of `bins`; the input bins are left untouched.
        Emptied bars are dropped and the rest renumbered bin_1, bin_2, ...
        """
        work = [b.copy() for b in bins if b.pieces]
        for n in range(self.params.max_passes):
            changed = self._moves(work)
            changed += self._consolidate(work)
            changed += self._exchanges(work)
            work = [b for b in work if b.pieces]
            self.log.debug(f"swap pass {n + 1}: {changed} changes, {len(work)} bars")
            if not changed:
                break
        for i, b in enumerate(work):
            b.id = f"bin_{i + 1}"
        return work

    def _moves(self, bins: List[CuttingBin]) -> int:
        count = 0
        for _ in range(self.params.max_iterations):
            moved = False
            # Lightly loaded bars first.
            for src in sorted((b for b in bins if b.pieces), key=lambda b: (len(b.pieces), b.used_units)):
                idx = 0
                while idx < len(src.pieces):
                    u = to_units(src.pieces[idx].length)
                    target = self._best_target(bins, src, u, src.used_units)
                    if target is None:
                        idx += 1
                        continue
                    target.add(src.remove(idx), u)
                    moved = True
                    count += 1
            if not moved:
                break
        self.progress.incr("swap_moves", count)
        return count

    @staticmethod
    def _best_target(
        bins: Sequence[CuttingBin],
        src: CuttingBin,
        u: int,
        floor: int,
    ) -> Optional[CuttingBin]:
        """Tightest other non-empty bar that takes `u` and ends fuller than `floor`."""
        best: Optional[CuttingBin] = None
        for b in bins:
            if b is src or not b.pieces or not b.fits(u):
                continue
            if b.used_units + u <= floor:
                continue
            if best is None or b.remaining_units < best.remaining_units:
                best = b
        return best

    def _consolidate(self, bins: List[CuttingBin]) -> int:
        emptied = 0
        for src in sorted((b for b in bins if b.pieces), key=lambda b: (b.used_units, len(b.pieces))):
            if not src.pieces:
                continue
            others = [b for b in bins if b is not src and b.pieces]
            free = {id(b): b.remaining_units for b in others}
            plan = []
            for idx in sorted(range(len(src.pieces)), key=lambda i: -to_units(src.pieces[i].length)):
                u = to_units(src.pieces[idx].length)
                fitting = [b for b in others if free[id(b)] >= u]
                if not fitting:
                    plan = None
                    break
                target = min(fitting, key=lambda b: free[id(b)])
                free[id(target)] -= u
                plan.append((idx, target, u))
            if plan is None:
                continue
            # Pop from the back so earlier indices stay valid.
            for idx, target, u in sorted(plan, key=lambda p: -p[0]):
                target.add(src.remove(idx), u)
            emptied += 1
        self.progress.incr("bars_emptied", emptied)
        return emptied

    def _exchanges(self, bins: List[CuttingBin]) -> int:
        count = 0
        for _ in range(self.params.max_iterations):
            swapped = False
            live = [b for b in bins if b.pieces]
            for i in range(len(live)):
                for j in range(i + 1, len(live)):
                    if self._exchange_pair(live[i], live[j]):
                        swapped = True
                        count += 1
            if not swapped:
                break
        self.progress.incr("swap_exchanges", count)
        return count

    @staticmethod
    def _exchange_pair(a: CuttingBin, b: CuttingBin) -> bool:
        """Apply the best improving one-for-one exchange between two bars, if any."""
        if a.remaining_units == 0 and b.remaining_units == 0:
            return False
        before = a.used_units ** 2 + b.used_units ** 2
        best_gain = 0
        best = None
        for ia, sa in enumerate(a.pieces):
            ua = to_units(sa.length)
            for ib, sb in enumerate(b.pieces):
                ub = to_units(sb.length)
                if ua == ub:
                    continue
                new_a = a.used_units - ua + ub
                new_b = b.used_units - ub + ua
                if new_a > a.capacity_units or new_b > b.capacity_units:
                    continue
                gain = new_a ** 2 + new_b ** 2 - before
                if gain > best_gain:
                    best_gain = gain
                    best = (ia, ib, ua, ub)
        if best is None:
            return False
        ia, ib, ua, ub = best
        seg_a = a.remove(ia)
        seg_b = b.remove(ib)
        a.add(seg_b, ub)
        b.add(seg_a, ua)
        return True
