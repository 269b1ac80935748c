# rebar_cutting/io_csv.py
# CSV import/export helpers:
# - read a bar bending schedule (requirements) from CSV
# - export saw instructions per stock bar
# - export a one-row-per-result summary (for comparing strategies / diameters)
#
# (No spreadsheet export; plotting is handled in plotting.py.)

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .errors import InvalidArgument
from .types import CuttingRequirement, CuttingStockResult

# Spreadsheet header -> field name
_HEADER_ALIASES: Dict[str, str] = {
    "si no": "serial",
    "sl no": "serial",
    "serial": "serial",
    "label": "label",
    "dia": "dia",
    "total bars": "quantity",
    "quantity": "quantity",
    "qty": "quantity",
    "cutting length": "cutting_length",
    "cutting_length": "cutting_length",
    "lap length": "lap_length",
    "lap_length": "lap_length",
    "no of lap": "lap_count",
    "lap_count": "lap_count",
    "element": "element",
}

_REQUIRED = {"serial", "label", "dia", "quantity", "cutting_length"}


def _normalize_header(name: str) -> str:
    key = " ".join(str(name).strip().lower().replace(".", " ").split())
    return _HEADER_ALIASES.get(key, _HEADER_ALIASES.get(key.replace(" ", "_"), key))


def _num(row: Dict[str, str], key: str, default: str = "0") -> float:
    raw = (row.get(key) or "").strip()
    return float(raw) if raw else float(default)


def read_requirements_csv(path: str | Path) -> List[CuttingRequirement]:
    """
    Read requirement rows. Accepts either snake_case headers
      serial,label,dia,quantity,cutting_length,lap_length,lap_count,element
    or the spreadsheet headers
      SI no,Label,Dia,Total Bars,Cutting Length,Lap Length,No of lap,Element
    Lengths are rounded to 3 decimals; rows without a label are skipped.
    """
    path = Path(path)
    rows: List[CuttingRequirement] = []
    with path.open("r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        mapping = {h: _normalize_header(h) for h in (reader.fieldnames or [])}
        missing = _REQUIRED - set(mapping.values())
        if missing:
            raise InvalidArgument(f"CSV {path} is missing columns: {sorted(missing)}")

        for raw in reader:
            row = {mapping[k]: (v or "") for k, v in raw.items() if k in mapping}
            label = row.get("label", "").strip()
            if not label:
                continue
            rows.append(
                CuttingRequirement(
                    serial=row.get("serial", "").strip(),
                    label=label,
                    dia=int(_num(row, "dia")),
                    quantity=int(_num(row, "quantity", "1")),
                    cutting_length=round(_num(row, "cutting_length"), 3),
                    lap_length=round(_num(row, "lap_length"), 3),
                    lap_count=int(_num(row, "lap_count")),
                    element=row.get("element", "").strip(),
                )
            )
    return rows


def write_requirements_csv(requirements: Iterable[CuttingRequirement], path: str | Path) -> None:
    """Write requirements in the snake_case format read_requirements_csv accepts."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ["serial", "label", "dia", "quantity", "cutting_length", "lap_length", "lap_count", "element"]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in requirements:
            w.writerow({k: getattr(r, k) for k in fieldnames})


def export_instructions_csv(result: CuttingStockResult, path: str | Path) -> None:
    """
    One row per cut piece, in sawing order along each stock bar.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "dia",
        "bar_number",
        "pattern_id",
        "bar_code",
        "segment_id",
        "segment_index",
        "length_m",
        "position_m",
        "has_lap",
        "lap_length_m",
        "bar_waste_m",
        "bar_utilization_pct",
        "reusable_offcut",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for d in result.detailed_cuts:
            for c in d.cuts:
                w.writerow(
                    {
                        "dia": result.dia,
                        "bar_number": d.bar_number,
                        "pattern_id": d.pattern_id,
                        "bar_code": c.bar_code,
                        "segment_id": c.segment_id,
                        "segment_index": c.segment_index,
                        "length_m": f"{c.length:.3f}",
                        "position_m": f"{c.position:.3f}",
                        "has_lap": int(bool(c.has_lap)),
                        "lap_length_m": f"{c.lap_length:.3f}",
                        "bar_waste_m": f"{d.waste:.3f}",
                        "bar_utilization_pct": f"{d.utilization:.2f}",
                        "reusable_offcut": int(bool(d.reusable_offcut)),
                    }
                )


def export_summary_csv(results: Iterable[CuttingStockResult], path: str | Path) -> None:
    """
    One row per result (useful for comparing strategies or diameters).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "dia",
        "algorithm",
        "bars_used",
        "total_waste_m",
        "waste_pct",
        "avg_utilization_pct",
        "cuts_produced",
        "reusable_offcuts",
        "reusable_offcut_m",
        "execution_time_s",
        "is_exact",
        "budget_exhausted",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in results:
            s = r.summary
            w.writerow(
                {
                    "dia": r.dia,
                    "algorithm": r.algorithm.value,
                    "bars_used": r.total_bars_used,
                    "total_waste_m": f"{r.total_waste:.3f}",
                    "waste_pct": f"{s.total_waste_percentage:.2f}",
                    "avg_utilization_pct": f"{r.average_utilization:.2f}",
                    "cuts_produced": s.total_cuts_produced,
                    "reusable_offcuts": s.reusable_offcut_count,
                    "reusable_offcut_m": f"{s.reusable_offcut_length:.3f}",
                    "execution_time_s": f"{r.execution_time:.4f}",
                    "is_exact": int(bool(r.is_exact)),
                    "budget_exhausted": int(bool(r.budget_exhausted)),
                }
            )


def export_all(
    best: Dict[int, CuttingStockResult],
    out_dir: str | Path,
    prefix: str = "cutting",
    all_results: Optional[Iterable[CuttingStockResult]] = None,
) -> None:
    """
    Export per-diameter instructions for the chosen results plus a summary into out_dir.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    for dia, res in sorted(best.items()):
        export_instructions_csv(res, out_dir / f"{prefix}_dia{dia}_instructions.csv")
    summary_rows = list(all_results) if all_results is not None else [best[d] for d in sorted(best)]
    export_summary_csv(summary_rows, out_dir / f"{prefix}_summary.csv")
