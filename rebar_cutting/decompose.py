# rebar_cutting/decompose.py
# Splits an over-length requirement into physical bar segments joined by laps.
#
# Segment formula (fixed):
#   - segment 0 is a full stock bar
#   - every further segment is min(L, uncovered + lap): the overlap with the
#     previous segment is re-established at its start
#   - the last segment carries the remainder plus its overlap
# So every segment except the last is a full stock bar (no offcut), and
#   original_length == sum(segment_lengths) - laps_required * lap_length

from __future__ import annotations

from typing import List, Sequence, Tuple

from .config import DEFAULTS
from .errors import DecompositionInvariantViolation, InvalidArgument
from .types import BarSegment, SubBarInfo


def round_length(x: float) -> float:
    return round(float(x), 3)


class SegmentDecomposer:
    def __init__(
        self,
        standard_bar_length: float = DEFAULTS.default_standard_bar_length,
        epsilon: float = DEFAULTS.default_epsilon,
    ) -> None:
        if standard_bar_length <= 0:
            raise InvalidArgument(f"standard_bar_length must be > 0, got {standard_bar_length}")
        self.standard_bar_length = float(standard_bar_length)
        self.epsilon = float(epsilon)

    def decompose(self, length: float, lap_length: float) -> SubBarInfo:
        """
        Work out how many physical bars one instance of `length` needs and
        how long each of them is cut.
        """
        L = self.standard_bar_length
        if length <= 0:
            raise InvalidArgument(f"length must be > 0, got {length}")
        if lap_length < 0:
            raise InvalidArgument(f"lap_length must be >= 0, got {lap_length}")

        length = round_length(length)
        lap_length = round_length(lap_length)

        if length <= L:
            return SubBarInfo(
                sub_bars_required=1,
                laps_required=0,
                total_material_length=length,
                segment_lengths=(length,),
                lap_positions=(),
            )

        if lap_length >= L:
            raise InvalidArgument(
                f"lap_length {lap_length} m leaves no usable length on a {L} m bar"
            )

        segments: List[float] = [round_length(L)]
        remaining = round_length(length - L)
        while remaining > 0:
            seg = round_length(min(L, remaining + lap_length))
            segments.append(seg)
            remaining = round_length(remaining - (seg - lap_length))

        laps = len(segments) - 1
        return SubBarInfo(
            sub_bars_required=len(segments),
            laps_required=laps,
            total_material_length=round_length(sum(segments)),
            segment_lengths=tuple(segments),
            lap_positions=self._lap_positions(segments, lap_length),
        )

    @staticmethod
    def _lap_positions(segments: Sequence[float], lap_length: float) -> Tuple[float, ...]:
        out: List[float] = []
        acc = 0.0
        for j, seg in enumerate(segments[:-1]):
            acc += seg
            out.append(round_length(acc - (j + 1) * lap_length))
        return tuple(out)

    def create_segments(
        self,
        bar_code: str,
        sub_bar_info: SubBarInfo,
        quantity: int,
        lap_length: float,
    ) -> Tuple[BarSegment, ...]:
        n = len(sub_bar_info.segment_lengths)
        out: List[BarSegment] = []
        for i, length in enumerate(sub_bar_info.segment_lengths):
            if length > self.standard_bar_length + self.epsilon:
                raise DecompositionInvariantViolation(
                    f"{bar_code}: segment {i} is {length} m, longer than the "
                    f"{self.standard_bar_length} m stock bar"
                )
            has_lap_end = i < n - 1
            out.append(
                BarSegment(
                    segment_id=f"{bar_code}_seg_{i}",
                    parent_bar_code=bar_code,
                    segment_index=i,
                    length=length,
                    quantity=quantity,
                    has_lap_start=i > 0,
                    has_lap_end=has_lap_end,
                    effective_length=length,
                    lap_length=round_length(lap_length) if has_lap_end else 0.0,
                )
            )
        return tuple(out)


def reconstruct_length(segments: Sequence[BarSegment]) -> float:
    """Assembled chain length: segment lengths minus the overlap at each joint."""
    return round_length(sum(s.effective_length for s in segments) - sum(s.lap_length for s in segments))
