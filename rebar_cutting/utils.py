# rebar_cutting/utils.py
# Small utilities used across the project:
# - timing context manager
# - JSON export for results and strategy comparisons
#
# Keeps dependencies minimal (stdlib only).

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .decompose import round_length
from .solver_adaptive import AlgorithmComparison
from .types import CuttingStockResult

__all__ = [
    "timer",
    "round_length",
    "result_to_dict",
    "comparison_to_dict",
    "save_results_json",
]


@contextmanager
def timer(label: str = "timer") -> Iterator[Dict[str, float]]:
    """
    Usage:
      with timer("solve") as t:
          ...
      print(t["seconds"])
    """
    t0 = time.perf_counter()
    payload: Dict[str, float] = {}
    try:
        yield payload
    finally:
        payload["seconds"] = time.perf_counter() - t0


def _to_jsonable(obj: Any) -> Any:
    """Convert dataclasses, enums and other objects to JSON-serializable structures."""
    if is_dataclass(obj):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(_to_jsonable(k)): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(x) for x in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def result_to_dict(result: CuttingStockResult) -> Dict[str, Any]:
    """
    Convert a result to a JSON-friendly dict.
    Patterns keep their cuts; detailed cuts carry the saw positions.
    """
    out: Dict[str, Any] = _to_jsonable(result)
    out["totals"] = {
        "bars": result.total_bars_used,
        "cut_length_m": result.total_cut_length(),
        "waste_m": result.total_waste,
    }
    return out


def comparison_to_dict(comparison: AlgorithmComparison) -> Dict[str, Any]:
    return {
        "best": comparison.best.algorithm.value,
        "recommendation": comparison.recommendation,
        "comparison": [_to_jsonable(row) for row in comparison.comparison],
    }


def save_results_json(
    results: Mapping[int, List[CuttingStockResult]],
    path: str | Path,
    *,
    comparisons: Optional[Mapping[int, AlgorithmComparison]] = None,
    indent: int = 2,
) -> None:
    """Save every diameter's ranked results (and comparisons, if given) into one JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload: Dict[str, Any] = {"diameters": {}}
    for dia in sorted(results):
        entry: Dict[str, Any] = {"results": [result_to_dict(r) for r in results[dia]]}
        if comparisons is not None and dia in comparisons:
            entry["comparison"] = comparison_to_dict(comparisons[dia])
        payload["diameters"][str(dia)] = entry
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=indent)
