# rebar_cutting/run.py
# High-level convenience runner that ties together:
# - preprocessing (decomposition into segments)
# - adaptive strategy selection per diameter
# - validation
# - optional CSV / JSON / PNG export
#
# This is meant to be called from your own scripts or the CLIs.
# Example:
#   from rebar_cutting.run import run_adaptive
#   res = run_adaptive(rows, config=make_engine_config(standard_bar_length=12), out_dir="out")

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .io_csv import export_all
from .logger import LOGGER, Logger
from .plotting import PlotStyle, plot_result, save_result_png
from .preprocess import RequestPreprocessor
from .progress import ProgressContext
from .solver_adaptive import AdaptiveSelector, AlgorithmComparison
from .types import CuttingRequest, CuttingRequirement, CuttingStockResult
from .utils import save_results_json
from .validate import raise_on_errors, validate_result


@dataclass(frozen=True)
class RunResult:
    requests: List[CuttingRequest]
    results: Dict[int, List[CuttingStockResult]]       # dia -> ranked results
    comparisons: Dict[int, AlgorithmComparison]

    @property
    def best(self) -> Dict[int, CuttingStockResult]:
        return {dia: rs[0] for dia, rs in self.results.items()}

    def total_bars(self) -> int:
        return sum(r.total_bars_used for r in self.best.values())

    def total_waste(self) -> float:
        return round(sum(r.total_waste for r in self.best.values()), 3)


def run_adaptive(
    requirements: Iterable[CuttingRequirement],
    *,
    config: Optional[EngineConfig] = None,
    dias: Optional[List[int]] = None,
    validate: bool = True,
    out_dir: Optional[str | Path] = None,
    export_prefix: str = "cutting",
    png_dir: Optional[str | Path] = None,
    show_plot: bool = False,
    plot_style: Optional[PlotStyle] = None,
    progress: Optional[ProgressContext] = None,
    logger: Optional[Logger] = None,
) -> RunResult:
    """
    Solve every diameter group independently and rank strategies per group.
    """
    cfg = config or DEFAULT_CONFIG
    log = logger or LOGGER
    pre = RequestPreprocessor(cfg.standard_bar_length, cfg.epsilon)
    requests = pre.convert_to_cutting_requests(requirements)

    wanted = dias if dias is not None else pre.unique_dias(requests)
    selector = AdaptiveSelector(cfg, log)

    results: Dict[int, List[CuttingStockResult]] = {}
    comparisons: Dict[int, AlgorithmComparison] = {}
    for dia in wanted:
        ctx = progress.scoped(f"dia {dia}") if progress is not None else None
        ranked = selector.solve(requests, dia, progress=ctx)
        if validate:
            for r in ranked:
                raise_on_errors(validate_result(r, requests, cfg.epsilon))
        results[dia] = ranked
        comparisons[dia] = selector.get_algorithm_comparison(ranked)
        log.info(f"dia {dia}: best {ranked[0].algorithm.value} with {ranked[0].total_bars_used} bars")

    res = RunResult(requests=requests, results=results, comparisons=comparisons)

    if out_dir is not None:
        outp = Path(out_dir)
        all_results = [r for dia in sorted(results) for r in results[dia]]
        export_all(res.best, outp, prefix=export_prefix, all_results=all_results)
        save_results_json(results, outp / f"{export_prefix}.json", comparisons=comparisons)

    if png_dir is not None:
        pngp = Path(png_dir)
        pngp.mkdir(parents=True, exist_ok=True)
        for dia, best in sorted(res.best.items()):
            if best.total_bars_used > 0:
                save_result_png(best, str(pngp / f"{export_prefix}_dia{dia}.png"), style=plot_style)

    if show_plot:
        import matplotlib.pyplot as plt

        for best in res.best.values():
            if best.total_bars_used > 0:
                plot_result(best, style=plot_style or PlotStyle())
        plt.show()

    return res
