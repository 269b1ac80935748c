# rebar_cutting/solver_improved_greedy.py
# Greedy with exact-fit lookahead.
#
# For every new stock bar we first look for a combination of pieces that fills
# it exactly (capacity - epsilon <= sum <= capacity), trying:
#   1) three pieces
#   2) two pieces
#   3) four pieces, only among pieces no longer than half a bar
# Lengths are tried largest first; the same length may repeat when enough
# pieces of it remain. The last piece of a combination is found by lookup.
#
# Without an exact fit: largest remaining piece, then keep adding the largest
# piece that still fits.

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .config import EngineConfig
from .progress import ProgressContext
from .solver_base import PackingStrategy, PackOutcome
from .types import Algorithm, BarSegment, CuttingBin, to_units


class ImprovedGreedyCuttingStock(PackingStrategy):
    algorithm = Algorithm.IMPROVED_GREEDY

    COMBO_SIZES = (3, 2, 4)

    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        eps = max(0, to_units(config.epsilon))

        # Length groups, longest first; pieces inside a group keep input order.
        groups: Dict[int, List[BarSegment]] = {}
        for seg in pieces:
            groups.setdefault(to_units(seg.length), []).append(seg)

        bins: List[CuttingBin] = []
        total = len(pieces)
        placed = 0
        while placed < total:
            b = self._new_bin(bins, capacity, config)
            combo = self._find_exact_combo(groups, capacity, eps)
            if combo is not None:
                progress.incr("exact_fits")
                for u in combo:
                    b.add(groups[u].pop(0), u)
            else:
                self._fill_largest_first(b, groups)
            for u in [u for u, g in groups.items() if not g]:
                del groups[u]
            placed += len(b.pieces)
            progress.set_progress(100.0 * placed / total)

        return PackOutcome(bins=bins)

    def _find_exact_combo(
        self,
        groups: Dict[int, List[BarSegment]],
        capacity: int,
        eps: int,
    ) -> Optional[List[int]]:
        lengths = sorted((u for u, g in groups.items() if g), reverse=True)
        avail = {u: len(groups[u]) for u in lengths}
        for size in self.COMBO_SIZES:
            pool = lengths if size != 4 else [u for u in lengths if 2 * u <= capacity]
            if not pool:
                continue
            found = _search(pool, avail, 0, size, capacity - eps, capacity, [], {})
            if found is not None:
                return found
        return None

    @staticmethod
    def _fill_largest_first(b: CuttingBin, groups: Dict[int, List[BarSegment]]) -> None:
        for u in sorted(groups, reverse=True):
            while groups[u] and b.fits(u):
                b.add(groups[u].pop(0), u)


def _search(
    pool: Sequence[int],
    avail: Dict[int, int],
    start: int,
    picks: int,
    lo: int,
    hi: int,
    chosen: List[int],
    used: Dict[int, int],
) -> Optional[List[int]]:
    """
    Non-increasing sequence of `picks` lengths from pool[start:] summing into [lo, hi].
    `used` tallies how many of each length `chosen` already holds.
    """
    if hi < 0:
        return None
    if picks == 1:
        members = set(pool[start:])
        for target in range(hi, max(lo, 1) - 1, -1):
            if target in members and avail[target] > used.get(target, 0):
                return chosen + [target]
        return None
    for i in range(start, len(pool)):
        u = pool[i]
        if avail[u] <= used.get(u, 0):
            continue
        if u * picks < lo:
            break
        if u > hi:
            continue
        chosen.append(u)
        used[u] = used.get(u, 0) + 1
        found = _search(pool, avail, i, picks - 1, lo - u, hi - u, chosen, used)
        used[u] -= 1
        chosen.pop()
        if found is not None:
            return found
    return None
