# rebar_cutting/types.py
# Core data structures for rebar cutting (1D cutting stock with lap splices).
# Keep this file dependency-light so it can be imported everywhere.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from .errors import DecompositionInvariantViolation, InvalidArgument


# Packing works on integer millimeters so exact fits are exact.
UNITS_PER_METER = 1000


def to_units(length: float) -> int:
    return int(round(float(length) * UNITS_PER_METER))


def from_units(units: int) -> float:
    return round(units / UNITS_PER_METER, 3)


def capacity_units(standard_bar_length: float) -> int:
    """Stock bar capacity in units, never rounded up past the real bar."""
    return int(math.floor(float(standard_bar_length) * UNITS_PER_METER + 1e-6))


class Algorithm(str, Enum):
    """Strategy tags, in registration order."""
    GREEDY = "greedy"
    IMPROVED_GREEDY = "improved-greedy"
    WASTE_OPTIMIZED = "waste-optimized"
    TRUE_DYNAMIC = "true-dynamic"
    BRANCH_AND_BOUND = "branch-and-bound"


ALGORITHM_ORDER: Tuple[Algorithm, ...] = tuple(Algorithm)


# ----------------------------
# Inputs
# ----------------------------

@dataclass(frozen=True)
class CuttingRequirement:
    """One row of the bar bending schedule, as delivered by ingestion."""
    serial: str
    label: str
    dia: int
    quantity: int
    cutting_length: float
    lap_length: float = 0.0
    lap_count: int = 0
    element: str = ""

    def __post_init__(self):
        if self.dia <= 0:
            raise InvalidArgument(f"dia must be > 0 for {self.bar_code}")
        if self.quantity <= 0:
            raise InvalidArgument(f"quantity must be >= 1 for {self.bar_code}")
        if self.cutting_length <= 0:
            raise InvalidArgument(f"cutting_length must be > 0 for {self.bar_code}")
        if self.lap_length < 0:
            raise InvalidArgument(f"lap_length must be >= 0 for {self.bar_code}")

    @property
    def bar_code(self) -> str:
        return f"{str(self.serial).strip()}/{str(self.label).strip()}/{self.dia}"


@dataclass(frozen=True)
class SubBarInfo:
    """How one instance of a requirement is realized from physical bars."""
    sub_bars_required: int
    laps_required: int
    total_material_length: float          # sum of segment lengths, overlaps included
    segment_lengths: Tuple[float, ...]
    lap_positions: Tuple[float, ...]      # start of each overlap zone, from chain start


@dataclass(frozen=True)
class BarSegment:
    """One physical, cuttable piece (<= stock length), possibly part of a spliced chain."""
    segment_id: str
    parent_bar_code: str
    segment_index: int
    length: float
    quantity: int
    has_lap_start: bool
    has_lap_end: bool
    effective_length: float
    lap_length: float = 0.0               # trailing overlap into the next segment


@dataclass(frozen=True)
class CuttingRequest:
    bar_code: str
    original_length: float
    quantity: int
    dia: int
    element: str
    lap_length: float
    is_multi_bar: bool
    sub_bar_info: SubBarInfo
    segments: Tuple[BarSegment, ...]


# ----------------------------
# Outputs / solution objects
# ----------------------------

@dataclass(frozen=True)
class PatternCut:
    segment_id: str
    parent_bar_code: str
    length: float
    count: int
    segment_index: int
    lap_length: float = 0.0


@dataclass(frozen=True)
class CuttingPattern:
    """The cuts sawn from exactly one stock bar."""
    id: str
    cuts: Tuple[PatternCut, ...]
    waste: float
    utilization: float
    standard_bar_length: float

    def used_length(self) -> float:
        return sum(c.length * c.count for c in self.cuts)

    def piece_count(self) -> int:
        return sum(c.count for c in self.cuts)


@dataclass
class CuttingBin:
    """Working representation of one stock bar during packing."""
    id: str
    capacity_units: int
    standard_bar_length: float
    pieces: List[BarSegment] = field(default_factory=list)
    used_units: int = 0

    @property
    def remaining_units(self) -> int:
        return self.capacity_units - self.used_units

    @property
    def used_length(self) -> float:
        return from_units(self.used_units)

    @property
    def remaining_length(self) -> float:
        return round(self.standard_bar_length - self.used_length, 3)

    @property
    def utilization(self) -> float:
        return 100.0 * self.used_length / self.standard_bar_length

    def fits(self, units: int) -> bool:
        return units <= self.remaining_units

    def add(self, segment: BarSegment, units: int) -> None:
        if not self.fits(units):
            raise DecompositionInvariantViolation(
                f"{segment.segment_id} ({segment.length} m) does not fit in {self.id} "
                f"(remaining {from_units(self.remaining_units)} m)"
            )
        self.pieces.append(segment)
        self.used_units += units

    def remove(self, index: int) -> BarSegment:
        seg = self.pieces.pop(index)
        self.used_units -= to_units(seg.length)
        return seg

    def copy(self) -> "CuttingBin":
        return CuttingBin(
            id=self.id,
            capacity_units=self.capacity_units,
            standard_bar_length=self.standard_bar_length,
            pieces=list(self.pieces),
            used_units=self.used_units,
        )

    @property
    def cuts(self) -> List[PatternCut]:
        """Pieces grouped by segment id, in order of first placement."""
        counts: Dict[str, int] = {}
        first: Dict[str, BarSegment] = {}
        for seg in self.pieces:
            if seg.segment_id not in counts:
                counts[seg.segment_id] = 0
                first[seg.segment_id] = seg
            counts[seg.segment_id] += 1
        return [
            PatternCut(
                segment_id=sid,
                parent_bar_code=first[sid].parent_bar_code,
                length=first[sid].length,
                count=n,
                segment_index=first[sid].segment_index,
                lap_length=first[sid].lap_length,
            )
            for sid, n in counts.items()
        ]

    def to_pattern(self, pattern_id: str) -> CuttingPattern:
        cuts = tuple(self.cuts)
        used = sum(c.length * c.count for c in cuts)
        waste = round(self.standard_bar_length - used, 3)
        if waste < 0:
            raise DecompositionInvariantViolation(
                f"Pattern {pattern_id} exceeds bar capacity by {-waste} m"
            )
        return CuttingPattern(
            id=pattern_id,
            cuts=cuts,
            waste=waste,
            utilization=100.0 * (self.standard_bar_length - waste) / self.standard_bar_length,
            standard_bar_length=self.standard_bar_length,
        )


@dataclass(frozen=True)
class CutInstruction:
    bar_code: str
    segment_id: str
    length: float
    quantity: int
    position: float       # offset from the start of the stock bar
    segment_index: int
    has_lap: bool
    lap_length: float


@dataclass(frozen=True)
class DetailedCut:
    pattern_id: str
    bar_number: int
    cuts: Tuple[CutInstruction, ...]
    waste: float
    utilization: float
    reusable_offcut: bool = False


@dataclass(frozen=True)
class CuttingSummary:
    total_standard_bars: int = 0
    total_waste_length: float = 0.0
    total_waste_percentage: float = 0.0
    average_utilization: float = 0.0
    pattern_count: int = 0
    total_cuts_produced: int = 0
    reusable_offcut_count: int = 0
    reusable_offcut_length: float = 0.0


@dataclass(frozen=True)
class CuttingStockResult:
    """Terminal result of one strategy run on one diameter group."""
    algorithm: Algorithm
    dia: int
    patterns: Tuple[CuttingPattern, ...] = ()
    total_bars_used: int = 0
    total_waste: float = 0.0
    average_utilization: float = 0.0
    execution_time: float = 0.0   # seconds
    summary: CuttingSummary = field(default_factory=CuttingSummary)
    detailed_cuts: Tuple[DetailedCut, ...] = ()

    # Execution metadata: False when a heuristic path or an exhausted budget produced it
    is_exact: bool = False
    budget_exhausted: bool = False

    def total_cut_length(self) -> float:
        return round(sum(p.used_length() for p in self.patterns), 3)


def empty_result(algorithm: Algorithm, dia: int, execution_time: float = 0.0) -> CuttingStockResult:
    """Canonical zero-result for empty or non-matching input."""
    return CuttingStockResult(algorithm=algorithm, dia=dia, execution_time=execution_time, is_exact=True)
