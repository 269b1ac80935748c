# rebar_cutting/validate.py
# Validation utilities:
# - per-pattern waste / capacity / utilization consistency
# - result totals vs patterns
# - demand coverage (every requested segment cut exactly once)
# - splice chain reconstruction for multi-bar requests
#
# Useful both during development and to sanity-check strategy output.

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .decompose import reconstruct_length
from .preprocess import RequestPreprocessor
from .types import CuttingRequest, CuttingStockResult


@dataclass(frozen=True)
class ValidationIssue:
    level: str   # "ERROR" or "WARN"
    message: str
    pattern_id: Optional[str] = None
    bar_code: Optional[str] = None


def validate_patterns(result: CuttingStockResult, epsilon: float = 0.001) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for p in result.patterns:
        used = p.used_length()
        if used > p.standard_bar_length + epsilon:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=f"Cuts total {used:.3f} m on a {p.standard_bar_length} m bar",
                    pattern_id=p.id,
                )
            )
        if p.waste < 0:
            issues.append(ValidationIssue(level="ERROR", message=f"Negative waste {p.waste}", pattern_id=p.id))
        if abs(p.waste - (p.standard_bar_length - used)) > epsilon:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=f"Waste {p.waste} != bar - cuts ({p.standard_bar_length - used:.3f})",
                    pattern_id=p.id,
                )
            )
        if not (0.0 < p.utilization <= 100.0 + 1e-9):
            issues.append(
                ValidationIssue(level="ERROR", message=f"Utilization {p.utilization} outside (0, 100]", pattern_id=p.id)
            )
    return issues


def validate_totals(result: CuttingStockResult, epsilon: float = 0.001) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if result.total_bars_used != len(result.patterns):
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"total_bars_used={result.total_bars_used} but {len(result.patterns)} patterns",
            )
        )
    stock = sum(p.standard_bar_length for p in result.patterns)
    expected = stock - sum(p.used_length() for p in result.patterns)
    # Per-pattern rounding may accumulate
    tol = epsilon * max(1, len(result.patterns))
    if abs(result.total_waste - expected) > tol:
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"total_waste={result.total_waste} but bars - cuts = {expected:.3f}",
            )
        )
    return issues


def validate_coverage(result: CuttingStockResult, requests: Iterable[CuttingRequest]) -> List[ValidationIssue]:
    """Every segment of every matching request is cut exactly `quantity` times."""
    matching = RequestPreprocessor.filter_by_dia(requests, result.dia)
    demand: Dict[str, int] = {}
    owner: Dict[str, str] = {}
    for seg in RequestPreprocessor.extract_all_segments(matching):
        demand[seg.segment_id] = demand.get(seg.segment_id, 0) + 1
        owner[seg.segment_id] = seg.parent_bar_code

    cut: Dict[str, int] = {}
    for p in result.patterns:
        for c in p.cuts:
            cut[c.segment_id] = cut.get(c.segment_id, 0) + c.count

    issues: List[ValidationIssue] = []
    for sid in sorted(set(demand) | set(cut)):
        want, got = demand.get(sid, 0), cut.get(sid, 0)
        if want != got:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=f"Segment {sid}: demanded {want}, cut {got}",
                    bar_code=owner.get(sid),
                )
            )
    return issues


def validate_decomposition(request: CuttingRequest, epsilon: float = 0.001) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    info = request.sub_bar_info
    if info.laps_required != info.sub_bars_required - 1:
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"laps_required={info.laps_required} for {info.sub_bars_required} bars",
                bar_code=request.bar_code,
            )
        )
    if len(request.segments) != info.sub_bars_required:
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"{len(request.segments)} segments for {info.sub_bars_required} bars",
                bar_code=request.bar_code,
            )
        )
    rebuilt = reconstruct_length(request.segments)
    if abs(rebuilt - request.original_length) > epsilon:
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"Chain rebuilds to {rebuilt} m, expected {request.original_length} m",
                bar_code=request.bar_code,
            )
        )
    return issues


def validate_result(
    result: CuttingStockResult,
    requests: Optional[Iterable[CuttingRequest]] = None,
    epsilon: float = 0.001,
) -> List[ValidationIssue]:
    """
    Validate one strategy result.
    Returns a list of issues (empty if OK).
    """
    issues: List[ValidationIssue] = []
    issues.extend(validate_patterns(result, epsilon))
    issues.extend(validate_totals(result, epsilon))

    if requests is not None:
        requests = list(requests)
        issues.extend(validate_coverage(result, requests))
        matching = RequestPreprocessor.filter_by_dia(requests, result.dia)
        if result.patterns:
            L = result.patterns[0].standard_bar_length
            floor = RequestPreprocessor().estimate_minimum_bars(matching, L)
            if result.total_bars_used < floor:
                issues.append(
                    ValidationIssue(
                        level="ERROR",
                        message=f"{result.total_bars_used} bars is below the lower bound {floor}",
                    )
                )
        for req in matching:
            issues.extend(validate_decomposition(req, epsilon))

    if result.total_bars_used == 0:
        issues.append(ValidationIssue(level="WARN", message=f"dia {result.dia}: result has 0 bars."))

    return issues


def raise_on_errors(issues: List[ValidationIssue]) -> None:
    errs = [i for i in issues if i.level.upper() == "ERROR"]
    if errs:
        msg = "\n".join(
            f"[{e.level}] pattern={e.pattern_id} bar={e.bar_code} :: {e.message}" for e in errs
        )
        raise ValueError("Validation failed:\n" + msg)
