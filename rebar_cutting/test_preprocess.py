# rebar_cutting/test_preprocess.py

from __future__ import annotations

import pytest

from rebar_cutting.errors import InvalidArgument
from rebar_cutting.preprocess import RequestPreprocessor
from rebar_cutting.types import CuttingRequirement


def _rows():
    return [
        CuttingRequirement("1", "B1", dia=12, quantity=2, cutting_length=6.0),
        CuttingRequirement("2", "B2", dia=12, quantity=1, cutting_length=20.0, lap_length=0.5),
        CuttingRequirement("3", "S1", dia=10, quantity=3, cutting_length=1.2),
    ]


def test_bar_code_and_multi_bar_flag() -> None:
    reqs = RequestPreprocessor(12.0).convert_to_cutting_requests(_rows())
    assert [r.bar_code for r in reqs] == ["1/B1/12", "2/B2/12", "3/S1/10"]
    assert [r.is_multi_bar for r in reqs] == [False, True, False]
    assert reqs[1].sub_bar_info.segment_lengths == (12.0, 8.5)
    assert len(reqs[1].segments) == 2


def test_filter_and_unique_dias() -> None:
    pre = RequestPreprocessor(12.0)
    reqs = pre.convert_to_cutting_requests(_rows())
    assert [r.bar_code for r in pre.filter_by_dia(reqs, 12)] == ["1/B1/12", "2/B2/12"]
    assert pre.filter_by_dia(reqs, 16) == []
    assert pre.unique_dias(reqs) == [10, 12]


def test_extract_all_segments_expands_quantity() -> None:
    pre = RequestPreprocessor(12.0)
    reqs = pre.filter_by_dia(pre.convert_to_cutting_requests(_rows()), 12)
    segs = pre.extract_all_segments(reqs)
    assert [s.length for s in segs] == [6.0, 6.0, 12.0, 8.5]


def test_group_and_sort_segments() -> None:
    pre = RequestPreprocessor(12.0)
    segs = pre.extract_all_segments(pre.convert_to_cutting_requests(_rows()))

    groups = pre.group_segments_by_length(segs)
    assert list(groups) == [12.0, 8.5, 6.0, 1.2]
    assert len(groups[6.0]) == 2
    assert len(groups[1.2]) == 3

    ordered = pre.sort_segments_by_length(segs)
    assert [s.length for s in ordered][:3] == [12.0, 8.5, 6.0]
    assert ordered[-1].length == 1.2


def test_total_material_and_minimum_bars() -> None:
    pre = RequestPreprocessor(12.0)
    reqs = pre.filter_by_dia(pre.convert_to_cutting_requests(_rows()), 12)

    # 2 x 6.0 + (12.0 + 8.5)
    assert pre.calculate_total_material(reqs) == 32.5
    assert pre.estimate_minimum_bars(reqs) == 3
    assert pre.estimate_minimum_bars(reqs, 20.0) == 2
    assert pre.estimate_minimum_bars([]) == 0


def test_minimum_bars_exact_multiple() -> None:
    pre = RequestPreprocessor(12.0)
    reqs = pre.convert_to_cutting_requests(
        [CuttingRequirement("1", "A", dia=8, quantity=3, cutting_length=4.0)]
    )
    assert pre.estimate_minimum_bars(reqs) == 1


def test_minimum_bars_needs_positive_length() -> None:
    with pytest.raises(InvalidArgument):
        RequestPreprocessor(12.0).estimate_minimum_bars([], 0.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(dia=0, quantity=1, cutting_length=1.0),
        dict(dia=12, quantity=0, cutting_length=1.0),
        dict(dia=12, quantity=1, cutting_length=0.0),
        dict(dia=12, quantity=1, cutting_length=1.0, lap_length=-0.5),
    ],
)
def test_requirement_rejects_non_positive_dimensions(kwargs) -> None:
    with pytest.raises(InvalidArgument):
        CuttingRequirement("1", "X", **kwargs)
