# rebar_cutting/__init__.py
"""
Rebar cutting-stock package (1D cutting of reinforcement bars from stock lengths).

Current state:
- Decomposition of over-length bars into lapped segments
- Five packing strategies behind one PackingStrategy contract:
  - greedy (first-fit-decreasing)
  - improved-greedy (exact-fit combinations first)
  - waste-optimized (OR-Tools CP-SAT per stock bar)
  - true-dynamic (memoized search over the remaining-pieces multiset)
  - branch-and-bound (depth-first with a length lower bound)
- Optional swap local search after heuristic packings
- Adaptive selection and ranking per diameter, with a comparison report
- Saw instructions with positions, reusable offcut flags, CSV/JSON export
- matplotlib visualization of every stock bar in one figure
"""

from .types import (
    Algorithm,
    ALGORITHM_ORDER,
    CuttingRequirement,
    SubBarInfo,
    BarSegment,
    CuttingRequest,
    PatternCut,
    CuttingPattern,
    CuttingBin,
    CutInstruction,
    DetailedCut,
    CuttingSummary,
    CuttingStockResult,
)

from .errors import (
    CuttingStockError,
    InvalidArgument,
    DecompositionInvariantViolation,
    ComputeBudgetExceeded,
)

from .config import EngineConfig, DEFAULT_CONFIG, make_engine_config

from .decompose import SegmentDecomposer
from .preprocess import RequestPreprocessor
from .progress import ProgressContext, ProgressStats

from .solver_base import PackingStrategy
from .improve_swap import SwapImprover, SwapParams, best_fit_decreasing
from .solver_greedy import GreedyCuttingStock, first_fit_decreasing
from .solver_improved_greedy import ImprovedGreedyCuttingStock
from .solver_waste_optimized import WasteOptimizedCuttingStock
from .solver_exact_dp import TrueDynamicCuttingStock
from .solver_branch_bound import BranchAndBoundCuttingStock
from .solver_adaptive import (
    AdaptiveSelector,
    AlgorithmComparison,
    AlgorithmSummary,
    DatasetCharacteristics,
    analyze_dataset,
    make_strategy,
)

from .plotting import (
    PlotStyle,
    plot_result,
    show_result,
    save_result_png,
)

from .run import RunResult, run_adaptive

__all__ = [
    # types
    "Algorithm",
    "ALGORITHM_ORDER",
    "CuttingRequirement",
    "SubBarInfo",
    "BarSegment",
    "CuttingRequest",
    "PatternCut",
    "CuttingPattern",
    "CuttingBin",
    "CutInstruction",
    "DetailedCut",
    "CuttingSummary",
    "CuttingStockResult",
    # errors
    "CuttingStockError",
    "InvalidArgument",
    "DecompositionInvariantViolation",
    "ComputeBudgetExceeded",
    # config
    "EngineConfig",
    "DEFAULT_CONFIG",
    "make_engine_config",
    # preprocessing
    "SegmentDecomposer",
    "RequestPreprocessor",
    "ProgressContext",
    "ProgressStats",
    # strategies
    "PackingStrategy",
    "GreedyCuttingStock",
    "first_fit_decreasing",
    "SwapImprover",
    "SwapParams",
    "best_fit_decreasing",
    "ImprovedGreedyCuttingStock",
    "WasteOptimizedCuttingStock",
    "TrueDynamicCuttingStock",
    "BranchAndBoundCuttingStock",
    "AdaptiveSelector",
    "AlgorithmComparison",
    "AlgorithmSummary",
    "DatasetCharacteristics",
    "analyze_dataset",
    "make_strategy",
    # plotting
    "PlotStyle",
    "plot_result",
    "show_result",
    "save_result_png",
    # running
    "RunResult",
    "run_adaptive",
]
