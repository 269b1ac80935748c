# rebar_cutting/io_json.py
# Load a cutting job from JSON into requirement rows + engine config.
#
# Expected JSON shape:
# {
#   "settings": {"standard_bar_length": 12.0, "min_waste_length": 1.0},
#   "requirements": [
#     {"serial": "1", "label": "B1", "dia": 12, "quantity": 4,
#      "cutting_length": 7.25, "lap_length": 0.6, "element": "Beam"},
#     ...
#   ]
# }

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from .config import EngineConfig, config_from_mapping
from .errors import InvalidArgument
from .types import CuttingRequirement


@dataclass(frozen=True)
class JsonLoadResult:
    requirements: List[CuttingRequirement]
    config: EngineConfig


def _requirement_from_item(it: Dict[str, Any]) -> CuttingRequirement:
    label = str(it.get("label") or "").strip()
    if not label:
        raise InvalidArgument(f"Requirement missing label: {it}")
    try:
        return CuttingRequirement(
            serial=str(it.get("serial", it.get("si_no", ""))).strip(),
            label=label,
            dia=int(it["dia"]),
            quantity=int(it.get("quantity", it.get("total_bars", 1))),
            cutting_length=round(float(it["cutting_length"]), 3),
            lap_length=round(float(it.get("lap_length", 0.0)), 3),
            lap_count=int(it.get("lap_count", 0)),
            element=str(it.get("element", "")).strip(),
        )
    except KeyError as e:
        raise InvalidArgument(f"Requirement {label} missing field {e}") from e


def load_job_json(path: str | Path) -> JsonLoadResult:
    """
    Load job definition from JSON.
    - "settings" keys are EngineConfig field names (unknown keys are rejected)
    - "requirements" must be a non-empty list
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    config = config_from_mapping(data.get("settings") or {})

    items = data.get("requirements") or []
    if not items:
        raise InvalidArgument("JSON missing 'requirements'.")

    return JsonLoadResult(requirements=[_requirement_from_item(it) for it in items], config=config)
