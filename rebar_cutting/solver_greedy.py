# rebar_cutting/solver_greedy.py
# Baseline strategy: first-fit-decreasing.
# Also the incumbent / fallback packing for the exact strategies.

from __future__ import annotations

from typing import List, Sequence

from .config import EngineConfig
from .progress import ProgressContext
from .solver_base import PackingStrategy, PackOutcome
from .types import Algorithm, BarSegment, CuttingBin, to_units


def first_fit_decreasing(
    pieces: Sequence[BarSegment],
    capacity: int,
    standard_bar_length: float,
) -> List[CuttingBin]:
    """
    Place each piece (already sorted longest first) into the first open bar
    with room; open a new bar when none has room.
    """
    bins: List[CuttingBin] = []
    for seg in pieces:
        u = to_units(seg.length)
        target = next((b for b in bins if b.fits(u)), None)
        if target is None:
            target = CuttingBin(
                id=f"bin_{len(bins) + 1}",
                capacity_units=capacity,
                standard_bar_length=standard_bar_length,
            )
            bins.append(target)
        target.add(seg, u)
    return bins


class GreedyCuttingStock(PackingStrategy):
    algorithm = Algorithm.GREEDY

    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        bins = first_fit_decreasing(pieces, capacity, config.standard_bar_length)
        progress.incr("bars_opened", len(bins))
        return PackOutcome(bins=bins)
