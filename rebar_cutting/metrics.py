# rebar_cutting/metrics.py
# Metrics for rebar cutting:
# - per-bar waste and utilization (from the packed bins)
# - saw instructions with positions along each stock bar
# - run summary (totals, waste percentage, reusable offcuts)
#
# These are strategy-agnostic: every strategy hands its bins to build_result.

from __future__ import annotations

from typing import List, Sequence, Tuple

from .config import EngineConfig
from .types import (
    Algorithm,
    CutInstruction,
    CuttingBin,
    CuttingPattern,
    CuttingStockResult,
    CuttingSummary,
    DetailedCut,
)


def bins_to_patterns(bins: Sequence[CuttingBin]) -> List[CuttingPattern]:
    """One pattern per non-empty bin, numbered in packing order."""
    used = [b for b in bins if b.pieces]
    return [b.to_pattern(f"pattern_{i + 1}") for i, b in enumerate(used)]


def generate_detailed_cuts(
    patterns: Sequence[CuttingPattern],
    min_waste_length: float,
) -> List[DetailedCut]:
    out: List[DetailedCut] = []
    for i, pattern in enumerate(patterns):
        position = 0.0
        cuts: List[CutInstruction] = []
        for cut in pattern.cuts:
            for _ in range(cut.count):
                has_lap = cut.lap_length > 0
                cuts.append(
                    CutInstruction(
                        bar_code=cut.parent_bar_code,
                        segment_id=cut.segment_id,
                        length=cut.length,
                        quantity=1,
                        position=round(position, 3),
                        segment_index=cut.segment_index,
                        has_lap=has_lap,
                        lap_length=cut.lap_length if has_lap else 0.0,
                    )
                )
                position += cut.length
        out.append(
            DetailedCut(
                pattern_id=pattern.id,
                bar_number=i + 1,
                cuts=tuple(cuts),
                waste=pattern.waste,
                utilization=pattern.utilization,
                reusable_offcut=pattern.waste >= min_waste_length,
            )
        )
    return out


def compute_summary(
    patterns: Sequence[CuttingPattern],
    detailed: Sequence[DetailedCut],
) -> CuttingSummary:
    bars = len(patterns)
    if bars == 0:
        return CuttingSummary()
    total_waste = sum(p.waste for p in patterns)
    stock = sum(p.standard_bar_length for p in patterns)
    reusable = [d.waste for d in detailed if d.reusable_offcut]
    return CuttingSummary(
        total_standard_bars=bars,
        total_waste_length=round(total_waste, 3),
        total_waste_percentage=round(100.0 * total_waste / stock, 2) if stock > 0 else 0.0,
        average_utilization=round(sum(p.utilization for p in patterns) / bars, 2),
        pattern_count=bars,
        total_cuts_produced=sum(p.piece_count() for p in patterns),
        reusable_offcut_count=len(reusable),
        reusable_offcut_length=round(sum(reusable), 3),
    )


def build_result(
    algorithm: Algorithm,
    dia: int,
    bins: Sequence[CuttingBin],
    config: EngineConfig,
    execution_time: float,
    *,
    is_exact: bool = False,
    budget_exhausted: bool = False,
) -> CuttingStockResult:
    patterns: Tuple[CuttingPattern, ...] = tuple(bins_to_patterns(bins))
    detailed = tuple(generate_detailed_cuts(patterns, config.min_waste_length))
    summary = compute_summary(patterns, detailed)
    bars = len(patterns)
    return CuttingStockResult(
        algorithm=algorithm,
        dia=dia,
        patterns=patterns,
        total_bars_used=bars,
        total_waste=round(sum(p.waste for p in patterns), 3),
        average_utilization=(sum(p.utilization for p in patterns) / bars) if bars else 0.0,
        execution_time=execution_time,
        summary=summary,
        detailed_cuts=detailed,
        is_exact=is_exact,
        budget_exhausted=budget_exhausted,
    )
