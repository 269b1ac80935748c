# rebar_cutting/run_json.py
# Runner for JSON jobs ({"settings": {...}, "requirements": [...]}) with a strategy switch.
#
# Modes:
#   --mode adaptive : run the size-appropriate strategies and rank them (default)
#   --mode <tag>    : run one strategy only (greedy, improved-greedy, waste-optimized,
#                     true-dynamic, branch-and-bound)
#
# Usage:
#   python -m rebar_cutting.run_json --job job.json
#   python -m rebar_cutting.run_json --job job.json --mode branch-and-bound --out out/

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from .debug import print_comparison, print_result
from .io_csv import export_all
from .io_json import load_job_json
from .logger import get_logger, set_enabled, set_verbose
from .plotting import PlotStyle, save_result_png, show_result
from .preprocess import RequestPreprocessor
from .progress import ProgressContext
from .run import run_adaptive
from .solver_adaptive import make_strategy
from .types import Algorithm, CuttingStockResult
from .utils import save_results_json
from .validate import raise_on_errors, validate_result

MODES = ["adaptive"] + [a.value for a in Algorithm]


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Run the rebar cutting optimizer on a JSON job.")
    p.add_argument("--job", type=str, required=True, help="Path to job JSON (settings/requirements)")
    p.add_argument("--mode", type=str, default="adaptive", choices=MODES, help="Strategy mode")

    # Overrides for JSON settings
    p.add_argument("--bar", type=float, default=-1.0, help="Override stock bar length (m). -1 = use JSON settings")
    p.add_argument("--time", type=float, default=-1.0, help="Override exact search time budget (s)")
    p.add_argument("--swap", action="store_true", help="Enable the swap local search (overrides JSON settings)")

    # Output
    p.add_argument("--out", type=str, default="", help="Output directory for CSV + JSON exports (optional)")
    p.add_argument("--prefix", type=str, default="cutting", help="Export filename prefix")
    p.add_argument("--png", type=str, default="", help="Directory for PNG cutting plans (optional)")
    p.add_argument("--plot", action="store_true", help="Show matplotlib plots")
    p.add_argument("--details", action="store_true", help="Print bar-by-bar instructions")
    p.add_argument("--profile", action="store_true", help="Print phase timings and search counters")
    p.add_argument("--quiet", action="store_true", help="Silence solver log lines")
    p.add_argument("--verbose", action="store_true", help="Print debug solver log lines")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_argparser().parse_args(argv)
    set_enabled(not args.quiet)
    set_verbose(args.verbose)

    job_path = Path(args.job)
    if not job_path.exists():
        get_logger().error(f"Job JSON not found: {job_path}")
        raise SystemExit(1)

    loaded = load_job_json(job_path)
    cfg = loaded.config
    if args.bar > 0:
        cfg = cfg.with_bar_length(args.bar)
    if args.time > 0:
        cfg = replace(cfg, exact_time_limit_s=float(args.time))
    if args.swap:
        cfg = replace(cfg, swap_improvement=True)

    progress = ProgressContext("job")
    out_dir = args.out.strip() or None
    png_dir = args.png.strip() or None

    best: Dict[int, CuttingStockResult]
    if args.mode == "adaptive":
        res = run_adaptive(
            loaded.requirements,
            config=cfg,
            out_dir=out_dir,
            export_prefix=args.prefix,
            png_dir=png_dir,
            show_plot=bool(args.plot),
            progress=progress,
        )
        for dia in sorted(res.results):
            print(f"\n### dia {dia}")
            print_comparison(res.comparisons[dia])
            if args.details:
                print_result(res.results[dia][0])
        best = res.best
    else:
        pre = RequestPreprocessor(cfg.standard_bar_length, cfg.epsilon)
        requests = pre.convert_to_cutting_requests(loaded.requirements)
        strategy = make_strategy(Algorithm(args.mode), cfg)
        best = {}
        for dia in pre.unique_dias(requests):
            r = strategy.solve(requests, dia, progress=progress.scoped(f"dia {dia}"))
            raise_on_errors(validate_result(r, requests, cfg.epsilon))
            best[dia] = r
            print_result(r, bars=bool(args.details))

        if out_dir is not None:
            outp = Path(out_dir)
            export_all(best, outp, prefix=args.prefix)
            save_results_json({d: [r] for d, r in best.items()}, outp / f"{args.prefix}.json")
        if png_dir is not None:
            Path(png_dir).mkdir(parents=True, exist_ok=True)
            for dia, r in sorted(best.items()):
                if r.total_bars_used > 0:
                    save_result_png(r, str(Path(png_dir) / f"{args.prefix}_dia{dia}.png"), style=PlotStyle())
        if args.plot:
            for r in best.values():
                if r.total_bars_used > 0:
                    show_result(r)

    print(f"\nMode: {args.mode}")
    print(f"Stock bar: {cfg.standard_bar_length} m")
    print(f"Stock bars used: {sum(r.total_bars_used for r in best.values())}")
    print(f"Total waste: {sum(r.total_waste for r in best.values()):.3f} m")
    if out_dir is not None:
        print(f"Exported CSV + JSON to: {out_dir}")
    if args.profile:
        print(progress.report())


if __name__ == "__main__":
    main()
