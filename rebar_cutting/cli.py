# rebar_cutting/cli.py
# CLI over a requirements CSV:
# - solves every diameter (or a chosen subset) with the adaptive selector
# - optional CSV + JSON export folder and PNG cutting plans
# - prints per-diameter strategy comparison and totals
#
# Run:
#   python -m rebar_cutting.cli --csv schedule.csv --out out/
#
# CSV format (header required), either
#   serial,label,dia,quantity,cutting_length,lap_length,lap_count,element
# or the spreadsheet export
#   SI no,Label,Dia,Total Bars,Cutting Length,Lap Length,No of lap,Element

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .config import make_engine_config, parse_dia_list
from .debug import print_comparison, print_result
from .io_csv import read_requirements_csv
from .logger import get_logger, set_enabled, set_verbose
from .plotting import PlotStyle
from .run import run_adaptive


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Rebar cutting-stock optimizer (adaptive strategy selection)")
    p.add_argument("--csv", type=str, required=True, help="Path to requirements CSV")
    p.add_argument("--bar", type=float, default=12.0, help="Standard stock bar length in m")
    p.add_argument("--min_waste", type=float, default=1.0, help="Offcuts at least this long (m) are reusable")
    p.add_argument("--dia", type=str, default="", help="Only these diameters, e.g. 10,12,16")
    p.add_argument("--large", type=int, default=40, help="Segment count from which exact DP is skipped")
    p.add_argument("--time", type=float, default=10.0, help="Time budget for exact searches (seconds)")
    p.add_argument("--swap", action="store_true", help="Run the swap local search after heuristic packings")
    p.add_argument("--out", type=str, default="", help="Output directory for CSV + JSON exports (optional)")
    p.add_argument("--prefix", type=str, default="cutting", help="Export filename prefix")
    p.add_argument("--png", type=str, default="", help="Directory for PNG cutting plans (optional)")
    p.add_argument("--plot", action="store_true", help="Show matplotlib plots")
    p.add_argument("--no_labels", action="store_true", help="Hide bar codes in plot")
    p.add_argument("--details", action="store_true", help="Print bar-by-bar instructions for the best result")
    p.add_argument("--quiet", action="store_true", help="Silence solver log lines")
    p.add_argument("--verbose", action="store_true", help="Print debug solver log lines")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_argparser().parse_args(argv)
    set_enabled(not args.quiet)
    set_verbose(args.verbose)

    rows = read_requirements_csv(Path(args.csv))
    if not rows:
        get_logger().error(f"No requirements found in {args.csv}")
        raise SystemExit(1)

    cfg = make_engine_config(
        standard_bar_length=args.bar,
        min_waste_length=args.min_waste,
        large_problem_threshold=args.large,
        exact_time_limit_s=args.time,
        swap_improvement=bool(args.swap),
    )
    dias = parse_dia_list(args.dia) if args.dia.strip() else None

    res = run_adaptive(
        rows,
        config=cfg,
        dias=dias,
        validate=True,
        out_dir=args.out.strip() or None,
        export_prefix=args.prefix,
        png_dir=args.png.strip() or None,
        show_plot=bool(args.plot),
        plot_style=PlotStyle(show_labels=not args.no_labels),
    )

    for dia in sorted(res.results):
        print(f"\n### dia {dia}")
        print_comparison(res.comparisons[dia])
        if args.details:
            print_result(res.results[dia][0])

    print(f"\nStock bars ({cfg.standard_bar_length} m): {res.total_bars()}")
    print(f"Total waste: {res.total_waste():.3f} m")
    if args.out.strip():
        print(f"Exported CSV + JSON to: {args.out.strip()}")


if __name__ == "__main__":
    main()
