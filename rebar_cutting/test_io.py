# rebar_cutting/test_io.py
# CSV / JSON round trips, exports and plotting (Agg backend, no window).

from __future__ import annotations

import csv
import json

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from rebar_cutting.config import config_from_mapping, make_engine_config, parse_dia_list
from rebar_cutting.errors import InvalidArgument
from rebar_cutting.io_csv import (
    export_instructions_csv,
    export_summary_csv,
    read_requirements_csv,
    write_requirements_csv,
)
from rebar_cutting.io_json import load_job_json
from rebar_cutting.logger import Logger
from rebar_cutting.plotting import plot_result, save_result_png
from rebar_cutting.preprocess import RequestPreprocessor
from rebar_cutting.run import run_adaptive
from rebar_cutting.solver_greedy import GreedyCuttingStock
from rebar_cutting.types import CuttingRequirement
from rebar_cutting.utils import result_to_dict, save_results_json, timer

QUIET = Logger(enabled=False)

SPREADSHEET = """SI no,Label,Dia,Total Bars,Cutting Length,Lap Length,No of lap,Element
1,B1,12,4,5.5,0,0,Beam
2,C1,16,2,18.25,0.6,1,Column
3,,12,9,1.0,0,0,
"""


def _greedy_result():
    rows = [
        CuttingRequirement("1", "B1", dia=12, quantity=2, cutting_length=5.0),
        CuttingRequirement("2", "L1", dia=12, quantity=1, cutting_length=20.0, lap_length=0.5),
    ]
    reqs = RequestPreprocessor(12.0).convert_to_cutting_requests(rows)
    return GreedyCuttingStock(make_engine_config(), QUIET).solve(reqs, 12)


def test_read_spreadsheet_headers(tmp_path) -> None:
    path = tmp_path / "schedule.csv"
    path.write_text(SPREADSHEET, encoding="utf-8")
    rows = read_requirements_csv(path)

    assert len(rows) == 2      # row without label is skipped
    assert rows[0].bar_code == "1/B1/12"
    assert rows[0].quantity == 4
    assert rows[1].cutting_length == 18.25
    assert rows[1].lap_length == 0.6
    assert rows[1].lap_count == 1
    assert rows[1].element == "Column"


def test_snake_case_round_trip(tmp_path) -> None:
    rows = [
        CuttingRequirement("7", "S2", dia=10, quantity=3, cutting_length=2.345, element="Slab"),
        CuttingRequirement("8", "M1", dia=20, quantity=1, cutting_length=14.0, lap_length=0.8, lap_count=1),
    ]
    path = tmp_path / "rows.csv"
    write_requirements_csv(rows, path)
    assert read_requirements_csv(path) == rows


def test_missing_columns_are_rejected(tmp_path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("label,dia\nB1,12\n", encoding="utf-8")
    with pytest.raises(InvalidArgument):
        read_requirements_csv(path)


def test_instruction_and_summary_exports(tmp_path) -> None:
    res = _greedy_result()
    instr = tmp_path / "out" / "instructions.csv"
    summary = tmp_path / "out" / "summary.csv"
    export_instructions_csv(res, instr)
    export_summary_csv([res], summary)

    with instr.open(encoding="utf-8") as f:
        lines = list(csv.DictReader(f))
    assert len(lines) == res.summary.total_cuts_produced == 4
    assert {l["segment_id"] for l in lines} == {"1/B1/12_seg_0", "2/L1/12_seg_0", "2/L1/12_seg_1"}

    with summary.open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["algorithm"] == "greedy"
    assert int(rows[0]["bars_used"]) == res.total_bars_used


def test_load_job_json(tmp_path) -> None:
    path = tmp_path / "job.json"
    path.write_text(
        json.dumps(
            {
                "settings": {"standard_bar_length": 6.0, "min_waste_length": 0.5},
                "requirements": [
                    {"serial": "1", "label": "B1", "dia": 12, "quantity": 2, "cutting_length": 2.5},
                    {"label": "B2", "dia": 12, "cutting_length": 8.0, "lap_length": 0.4},
                ],
            }
        ),
        encoding="utf-8",
    )
    loaded = load_job_json(path)
    assert loaded.config.standard_bar_length == 6.0
    assert loaded.config.min_waste_length == 0.5
    assert [r.label for r in loaded.requirements] == ["B1", "B2"]
    assert loaded.requirements[1].quantity == 1


def test_job_json_rejects_unknown_settings(tmp_path) -> None:
    path = tmp_path / "job.json"
    path.write_text(json.dumps({"settings": {"bar": 12}, "requirements": [{}]}), encoding="utf-8")
    with pytest.raises(InvalidArgument):
        load_job_json(path)


def test_config_helpers() -> None:
    assert parse_dia_list("10, 12,16") == [10, 12, 16]
    with pytest.raises(InvalidArgument):
        parse_dia_list(" , ")
    cfg = config_from_mapping({"large_problem_threshold": "25"})
    assert cfg.large_problem_threshold == 25
    with pytest.raises(InvalidArgument):
        make_engine_config(standard_bar_length=-1.0)


def test_result_json(tmp_path) -> None:
    res = _greedy_result()
    d = result_to_dict(res)
    assert d["algorithm"] == "greedy"
    assert d["totals"]["bars"] == res.total_bars_used

    path = tmp_path / "results.json"
    save_results_json({12: [res]}, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["diameters"]["12"]["results"][0]["total_bars_used"] == res.total_bars_used


def test_plot_and_png(tmp_path) -> None:
    res = _greedy_result()
    fig = plot_result(res)
    assert len(fig.axes) == 1
    plt.close(fig)

    png = tmp_path / "plan.png"
    save_result_png(res, str(png))
    assert png.exists() and png.stat().st_size > 0


def test_run_adaptive_exports(tmp_path) -> None:
    rows = [
        CuttingRequirement("1", "B1", dia=12, quantity=3, cutting_length=4.0),
        CuttingRequirement("2", "B2", dia=16, quantity=2, cutting_length=7.5),
    ]
    with timer("run") as t:
        res = run_adaptive(rows, out_dir=tmp_path, png_dir=tmp_path / "png", logger=QUIET)
    assert t["seconds"] >= 0.0

    assert (tmp_path / "cutting_dia12_instructions.csv").exists()
    assert (tmp_path / "cutting_dia16_instructions.csv").exists()
    assert (tmp_path / "cutting_summary.csv").exists()
    assert (tmp_path / "cutting.json").exists()
    assert (tmp_path / "png" / "cutting_dia16.png").exists()
    assert res.best[12].total_bars_used == 1
    assert res.best[16].total_bars_used == 2


def test_logger_scopes_and_streams(capsys) -> None:
    log = Logger(enabled=True, verbose=False).child("dia 12")
    log.info("packed")
    log.debug("hidden")
    log.warn("slow")
    out, err = capsys.readouterr()
    assert out == "[REBAR dia 12] packed\n"
    assert err == "[REBAR dia 12] WARNING: slow\n"

    Logger(enabled=False).error("always shown")
    assert "ERROR: always shown" in capsys.readouterr().err
