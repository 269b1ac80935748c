# rebar_cutting/test_decompose.py
# Decomposition of over-length bars into lapped segments.

from __future__ import annotations

import pytest

from rebar_cutting.decompose import SegmentDecomposer, reconstruct_length
from rebar_cutting.errors import DecompositionInvariantViolation, InvalidArgument
from rebar_cutting.types import SubBarInfo


def test_short_bar_is_one_segment() -> None:
    info = SegmentDecomposer(12.0).decompose(7.25, 0.6)
    assert info.sub_bars_required == 1
    assert info.laps_required == 0
    assert info.segment_lengths == (7.25,)
    assert info.lap_positions == ()
    assert info.total_material_length == 7.25


def test_exactly_stock_length_is_one_segment() -> None:
    info = SegmentDecomposer(12.0).decompose(12.0, 0.5)
    assert info.sub_bars_required == 1


def test_twenty_meters_with_half_meter_lap() -> None:
    info = SegmentDecomposer(12.0).decompose(20.0, 0.5)
    assert info.sub_bars_required == 2
    assert info.laps_required == 1
    assert info.segment_lengths == (12.0, 8.5)
    assert info.lap_positions == (11.5,)
    assert info.total_material_length == 20.5


def test_fifteen_meters_without_lap() -> None:
    info = SegmentDecomposer(12.0).decompose(15.0, 0.0)
    assert info.sub_bars_required == 2
    assert info.laps_required == 1
    assert info.segment_lengths == (12.0, 3.0)


def test_three_segment_chain() -> None:
    info = SegmentDecomposer(12.0).decompose(26.0, 0.6)
    assert info.segment_lengths == (12.0, 12.0, 3.2)
    assert info.laps_required == 2
    assert info.lap_positions == (11.4, 22.8)


def test_segments_carry_trailing_lap_except_last() -> None:
    d = SegmentDecomposer(12.0)
    info = d.decompose(26.0, 0.6)
    segs = d.create_segments("1/B1/16", info, quantity=3, lap_length=0.6)

    assert [s.segment_id for s in segs] == ["1/B1/16_seg_0", "1/B1/16_seg_1", "1/B1/16_seg_2"]
    assert [s.lap_length for s in segs] == [0.6, 0.6, 0.0]
    assert [s.has_lap_start for s in segs] == [False, True, True]
    assert [s.has_lap_end for s in segs] == [True, True, False]
    assert all(s.quantity == 3 for s in segs)
    assert all(s.length <= 12.0 for s in segs)


@pytest.mark.parametrize(
    "length,lap",
    [(12.001, 0.3), (20.0, 0.5), (23.999, 0.0), (36.0, 1.2), (50.75, 0.9), (13.5, 11.0)],
)
def test_chain_reconstructs_original_length(length: float, lap: float) -> None:
    d = SegmentDecomposer(12.0)
    info = d.decompose(length, lap)
    segs = d.create_segments("x", info, 1, lap)

    assert info.laps_required == info.sub_bars_required - 1
    assert abs(reconstruct_length(segs) - length) <= 0.001
    assert abs(info.total_material_length - (length + info.laps_required * lap)) <= 0.001


@pytest.mark.parametrize("length,lap", [(0.0, 0.0), (-1.0, 0.0), (5.0, -0.1)])
def test_bad_input_is_rejected(length: float, lap: float) -> None:
    with pytest.raises(InvalidArgument):
        SegmentDecomposer(12.0).decompose(length, lap)


def test_lap_as_long_as_the_bar_cannot_progress() -> None:
    with pytest.raises(InvalidArgument):
        SegmentDecomposer(12.0).decompose(30.0, 12.0)


def test_oversized_segment_is_an_invariant_violation() -> None:
    info = SubBarInfo(
        sub_bars_required=1,
        laps_required=0,
        total_material_length=13.0,
        segment_lengths=(13.0,),
        lap_positions=(),
    )
    with pytest.raises(DecompositionInvariantViolation):
        SegmentDecomposer(12.0).create_segments("x", info, 1, 0.0)


def test_non_positive_bar_length() -> None:
    with pytest.raises(InvalidArgument):
        SegmentDecomposer(0.0)
