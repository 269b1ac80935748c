# rebar_cutting/multiset.py
# Remaining-pieces state shared by the exact strategies.
#
# A search node is "which pieces are still uncut". Pieces of equal length are
# interchangeable for bar count, so the node is a count vector over a fixed
# arena of distinct lengths (descending). The count tuple is the memo key.
#
# Transition = commit one stock bar: choose how many of each length go on it.
# Only maximal fills containing the largest remaining piece are generated;
# that restriction keeps every optimal bar count reachable.

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ComputeBudgetExceeded
from .types import BarSegment, CuttingBin, to_units

Take = Tuple[int, ...]


@dataclass(frozen=True)
class LengthMultiset:
    lengths: Tuple[int, ...]   # distinct unit lengths, descending
    counts: Tuple[int, ...]

    @classmethod
    def from_units(cls, units: Iterable[int]) -> "LengthMultiset":
        tally: Dict[int, int] = {}
        for u in units:
            tally[int(u)] = tally.get(int(u), 0) + 1
        lengths = tuple(sorted(tally, reverse=True))
        return cls(lengths=lengths, counts=tuple(tally[u] for u in lengths))

    @classmethod
    def from_segments(cls, segments: Iterable[BarSegment]) -> "LengthMultiset":
        return cls.from_units(to_units(s.length) for s in segments)

    @property
    def key(self) -> Tuple[int, ...]:
        return self.counts

    @property
    def total(self) -> int:
        return sum(u * c for u, c in zip(self.lengths, self.counts))

    @property
    def size(self) -> int:
        return sum(self.counts)

    def is_empty(self) -> bool:
        return not any(self.counts)

    def lower_bound(self, capacity: int) -> int:
        """Bars still needed at least: ceil(remaining length / capacity)."""
        total = self.total
        return int(math.ceil(total / capacity)) if total > 0 else 0

    def used(self, take: Take) -> int:
        return sum(u * k for u, k in zip(self.lengths, take))

    def remove(self, take: Take) -> "LengthMultiset":
        counts = tuple(c - k for c, k in zip(self.counts, take))
        if any(c < 0 for c in counts):
            raise ValueError(f"cannot remove {take} from {self.counts}")
        return LengthMultiset(self.lengths, counts)

    def fills(self, capacity: int, budget: Optional["SearchBudget"] = None) -> List[Take]:
        """
        Maximal single-bar fills that include the largest remaining piece.
        Sorted by used length descending, then lexicographically descending,
        so the order is deterministic and the fullest bar is tried first.

        Every enumeration node ticks `budget`, so a wide arena of distinct
        lengths cannot outrun the caller's step/time limit.
        """
        n = len(self.lengths)
        first = next((i for i, c in enumerate(self.counts) if c > 0), None)
        if first is None:
            return []
        if self.lengths[first] > capacity:
            raise ValueError(f"piece of {self.lengths[first]} units exceeds capacity {capacity}")

        # suffix[i] = total length of all pieces at index >= i
        suffix = [0] * (n + 1)
        for i in range(n - 1, -1, -1):
            suffix[i] = suffix[i + 1] + self.lengths[i] * self.counts[i]

        out: List[Take] = []
        take = [0] * n
        take[first] = 1

        def is_maximal(free: int) -> bool:
            # Lengths are descending, so checking the shortest leftover is enough.
            for i in range(n - 1, -1, -1):
                if self.counts[i] - take[i] > 0:
                    return self.lengths[i] > free
            return True

        def rec(i: int, free: int) -> None:
            if budget is not None:
                budget.tick()
            if i == n:
                if is_maximal(free):
                    out.append(tuple(take))
                return
            u = self.lengths[i]
            avail = self.counts[i] - take[i]
            base = take[i]
            k_max = min(avail, free // u)
            for k in range(k_max, -1, -1):
                rest = free - k * u
                # A piece of length u stays uncut, so the bar must end with
                # less than u free even if every shorter piece is added.
                if k < avail and rest - suffix[i + 1] >= u:
                    break
                take[i] = base + k
                rec(i + 1, rest)
            take[i] = base

        rec(first, capacity - self.lengths[first])
        out.sort(key=lambda t: (self.used(t), t), reverse=True)
        return out


@dataclass
class SearchBudget:
    """Step and wall-clock budget for one exact search."""
    max_steps: int
    time_limit_s: float
    steps: int = 0
    start: float = field(default_factory=time.perf_counter)

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.start

    def tick(self) -> None:
        self.steps += 1
        if self.steps > self.max_steps or (self.steps % 64 == 0 and self.elapsed > self.time_limit_s):
            raise ComputeBudgetExceeded(self.steps, self.elapsed)


def takes_from_bins(arena: LengthMultiset, bins: Sequence[CuttingBin]) -> List[Take]:
    """Express already packed bins as count vectors over the arena."""
    index = {u: i for i, u in enumerate(arena.lengths)}
    out: List[Take] = []
    for b in bins:
        take = [0] * len(arena.lengths)
        for seg in b.pieces:
            take[index[to_units(seg.length)]] += 1
        out.append(tuple(take))
    return out


def materialize_bins(
    arena: LengthMultiset,
    takes: Sequence[Take],
    pieces: Sequence[BarSegment],
    capacity: int,
    standard_bar_length: float,
) -> List[CuttingBin]:
    """
    Turn count vectors back into bins holding concrete segments.
    Pieces of one length are handed out in input order.
    """
    pools: Dict[int, List[BarSegment]] = {}
    for seg in pieces:
        pools.setdefault(to_units(seg.length), []).append(seg)
    cursor = {u: 0 for u in pools}

    bins: List[CuttingBin] = []
    for t in takes:
        b = CuttingBin(
            id=f"bin_{len(bins) + 1}",
            capacity_units=capacity,
            standard_bar_length=standard_bar_length,
        )
        for u, k in zip(arena.lengths, t):
            for _ in range(k):
                b.add(pools[u][cursor[u]], u)
                cursor[u] += 1
        bins.append(b)

    leftover = sum(len(pools[u]) - cursor[u] for u in pools)
    if leftover:
        raise ValueError(f"{leftover} pieces were not assigned to any bar")
    return bins
