# rebar_cutting/solver_base.py
# Shared driver for all packing strategies.
#
# solve() does the common work (diameter filter, segment expansion, capacity
# checks, timing, result building); subclasses only implement _pack(), which
# receives the pieces longest first and returns the filled bins.

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import DecompositionInvariantViolation
from .improve_swap import SwapImprover, SwapParams, best_fit_decreasing
from .logger import LOGGER, Logger
from .metrics import build_result
from .preprocess import RequestPreprocessor
from .progress import ProgressContext, ensure_context
from .types import (
    Algorithm,
    BarSegment,
    CuttingBin,
    CuttingRequest,
    CuttingStockResult,
    capacity_units,
    empty_result,
    to_units,
)


@dataclass
class PackOutcome:
    bins: List[CuttingBin] = field(default_factory=list)
    is_exact: bool = False
    budget_exhausted: bool = False


class PackingStrategy(ABC):
    algorithm: Algorithm

    def __init__(self, config: Optional[EngineConfig] = None, logger: Optional[Logger] = None) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.log = logger if logger is not None else LOGGER

    def solve(
        self,
        requests: Iterable[CuttingRequest],
        dia: int,
        standard_bar_length: Optional[float] = None,
        *,
        progress: Optional[ProgressContext] = None,
    ) -> CuttingStockResult:
        t0 = time.perf_counter()
        cfg = self.config.with_bar_length(standard_bar_length)
        ctx = ensure_context(progress, f"{self.algorithm.value} dia {dia}")

        matching = RequestPreprocessor.filter_by_dia(requests, dia)
        segments = RequestPreprocessor.extract_all_segments(matching)
        if not segments:
            self.log.debug(f"{self.algorithm.value}: no segments for dia {dia}")
            ctx.set_progress(100)
            return empty_result(self.algorithm, dia, time.perf_counter() - t0)

        cap = capacity_units(cfg.standard_bar_length)
        for seg in segments:
            if to_units(seg.length) > cap:
                raise DecompositionInvariantViolation(
                    f"{seg.segment_id} is {seg.length} m, longer than the "
                    f"{cfg.standard_bar_length} m stock bar"
                )

        pieces = RequestPreprocessor.sort_segments_by_length(segments)
        self.log.debug(f"{self.algorithm.value}: dia {dia}, {len(pieces)} segments")
        ctx.incr("segments", len(pieces))

        with ctx.phase(f"{self.algorithm.value}.pack"):
            outcome = self._pack(pieces, cap, cfg, ctx)

        if cfg.swap_improvement and not outcome.is_exact:
            with ctx.phase(f"{self.algorithm.value}.swap"):
                outcome = self._swap_pass(pieces, cap, cfg, ctx, outcome)

        result = build_result(
            self.algorithm,
            dia,
            outcome.bins,
            cfg,
            time.perf_counter() - t0,
            is_exact=outcome.is_exact,
            budget_exhausted=outcome.budget_exhausted,
        )
        ctx.set_progress(100)
        self.log.debug(
            f"{self.algorithm.value}: dia {dia} -> {result.total_bars_used} bars, "
            f"waste {result.total_waste:.3f} m"
        )
        return result

    @abstractmethod
    def _pack(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
    ) -> PackOutcome:
        """Pack every piece (longest first) into bins of `capacity` units."""
        raise NotImplementedError

    def _swap_pass(
        self,
        pieces: List[BarSegment],
        capacity: int,
        config: EngineConfig,
        progress: ProgressContext,
        outcome: PackOutcome,
    ) -> PackOutcome:
        """
        Run the swap local search from this strategy's bins and from a
        best-fit-decreasing start; adopt the result only if it saves bars.
        """
        improver = SwapImprover(SwapParams.from_config(config), progress, self.log)
        candidates = [
            improver.improve(outcome.bins),
            improver.improve(best_fit_decreasing(pieces, capacity, config.standard_bar_length)),
        ]
        best = min(candidates, key=len)
        if len(best) >= len(outcome.bins):
            return outcome
        self.log.debug(f"{self.algorithm.value}: swap pass {len(outcome.bins)} -> {len(best)} bars")
        return PackOutcome(bins=best, is_exact=False, budget_exhausted=outcome.budget_exhausted)

    @staticmethod
    def _new_bin(bins: List[CuttingBin], capacity: int, config: EngineConfig) -> CuttingBin:
        b = CuttingBin(
            id=f"bin_{len(bins) + 1}",
            capacity_units=capacity,
            standard_bar_length=config.standard_bar_length,
        )
        bins.append(b)
        return b
