# rebar_cutting/preprocess.py
# Turns requirement rows into typed cutting requests and flat segment lists.

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DEFAULTS
from .decompose import SegmentDecomposer, round_length
from .errors import InvalidArgument
from .types import (
    BarSegment,
    CuttingRequest,
    CuttingRequirement,
    capacity_units,
    to_units,
)


class RequestPreprocessor:
    def __init__(
        self,
        standard_bar_length: float = DEFAULTS.default_standard_bar_length,
        epsilon: float = DEFAULTS.default_epsilon,
    ) -> None:
        self.decomposer = SegmentDecomposer(standard_bar_length, epsilon)

    @property
    def standard_bar_length(self) -> float:
        return self.decomposer.standard_bar_length

    def convert_to_cutting_requests(self, rows: Iterable[CuttingRequirement]) -> List[CuttingRequest]:
        out: List[CuttingRequest] = []
        for row in rows:
            info = self.decomposer.decompose(row.cutting_length, row.lap_length)
            segments = self.decomposer.create_segments(row.bar_code, info, row.quantity, row.lap_length)
            out.append(
                CuttingRequest(
                    bar_code=row.bar_code,
                    original_length=round_length(row.cutting_length),
                    quantity=int(row.quantity),
                    dia=int(row.dia),
                    element=row.element,
                    lap_length=round_length(row.lap_length),
                    is_multi_bar=row.cutting_length > self.standard_bar_length,
                    sub_bar_info=info,
                    segments=segments,
                )
            )
        return out

    @staticmethod
    def filter_by_dia(requests: Iterable[CuttingRequest], dia: int) -> List[CuttingRequest]:
        return [r for r in requests if r.dia == dia]

    @staticmethod
    def unique_dias(requests: Iterable[CuttingRequest]) -> List[int]:
        return sorted({r.dia for r in requests if r.dia > 0})

    @staticmethod
    def extract_all_segments(requests: Iterable[CuttingRequest]) -> List[BarSegment]:
        """Expand quantity x segments into the discrete pieces a strategy packs."""
        out: List[BarSegment] = []
        for req in requests:
            for _ in range(req.quantity):
                out.extend(req.segments)
        return out

    @staticmethod
    def sort_segments_by_length(segments: Sequence[BarSegment]) -> List[BarSegment]:
        """Longest first; stable, so equal lengths keep input order."""
        return sorted(segments, key=lambda s: -to_units(s.length))

    @staticmethod
    def group_segments_by_length(segments: Iterable[BarSegment]) -> Dict[float, List[BarSegment]]:
        """Group by 3-decimal length, longest group first."""
        groups: Dict[float, List[BarSegment]] = {}
        for seg in segments:
            groups.setdefault(round_length(seg.length), []).append(seg)
        return dict(sorted(groups.items(), key=lambda kv: -kv[0]))

    @staticmethod
    def calculate_total_material(requests: Iterable[CuttingRequest]) -> float:
        return round_length(sum(r.sub_bar_info.total_material_length * r.quantity for r in requests))

    def estimate_minimum_bars(
        self,
        requests: Iterable[CuttingRequest],
        standard_bar_length: Optional[float] = None,
    ) -> int:
        """Lower bound on stock bars: ceil(total material / bar length)."""
        L = float(standard_bar_length) if standard_bar_length is not None else self.standard_bar_length
        cap = capacity_units(L)
        if cap <= 0:
            raise InvalidArgument(f"standard_bar_length must be > 0, got {L}")
        total = sum(to_units(seg.length) * r.quantity for r in requests for seg in r.segments)
        return int(math.ceil(total / cap)) if total > 0 else 0
