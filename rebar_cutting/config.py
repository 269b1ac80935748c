# rebar_cutting/config.py
# Centralized defaults and configuration helpers.
# Keeps "magic numbers" (bar length, thresholds, search budgets) in one place.

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, List, Mapping, Optional

from .errors import InvalidArgument


@dataclass(frozen=True)
class Defaults:
    # Typical rebar stock length (m) from the mill
    default_standard_bar_length: float = 12.0

    # Offcuts shorter than this are scrap, not worth tracking (m)
    default_min_waste_length: float = 1.0

    # Input lengths are rounded to 3 decimals
    default_epsilon: float = 0.001

    # Size classes (expanded segment count)
    default_large_problem_threshold: int = 40
    default_branch_and_bound_threshold: int = 40
    default_dp_max_segments: int = 60

    # Exact search budgets
    default_exact_max_steps: int = 200_000
    default_exact_time_limit_s: float = 10.0

    # CP-SAT budgets (waste-optimized strategy, per stock bar)
    default_cp_time_limit_s_per_bar: float = 2.0
    default_cp_deterministic_time_per_bar: float = 1.0
    default_cp_num_workers: int = 1

    # Swap local search run after a heuristic packing (off by default)
    default_swap_improvement: bool = False
    default_swap_max_passes: int = 3
    default_swap_max_iterations: int = 100


DEFAULTS = Defaults()


@dataclass(frozen=True)
class EngineConfig:
    standard_bar_length: float = DEFAULTS.default_standard_bar_length
    min_waste_length: float = DEFAULTS.default_min_waste_length
    epsilon: float = DEFAULTS.default_epsilon

    large_problem_threshold: int = DEFAULTS.default_large_problem_threshold
    branch_and_bound_threshold: int = DEFAULTS.default_branch_and_bound_threshold
    dp_max_segments: int = DEFAULTS.default_dp_max_segments

    exact_max_steps: int = DEFAULTS.default_exact_max_steps
    exact_time_limit_s: float = DEFAULTS.default_exact_time_limit_s

    cp_time_limit_s_per_bar: float = DEFAULTS.default_cp_time_limit_s_per_bar
    cp_deterministic_time_per_bar: float = DEFAULTS.default_cp_deterministic_time_per_bar
    cp_num_workers: int = DEFAULTS.default_cp_num_workers

    swap_improvement: bool = DEFAULTS.default_swap_improvement
    swap_max_passes: int = DEFAULTS.default_swap_max_passes
    swap_max_iterations: int = DEFAULTS.default_swap_max_iterations

    def __post_init__(self):
        if self.standard_bar_length <= 0:
            raise InvalidArgument(f"standard_bar_length must be > 0, got {self.standard_bar_length}")
        if self.min_waste_length < 0:
            raise InvalidArgument(f"min_waste_length must be >= 0, got {self.min_waste_length}")
        if self.epsilon <= 0:
            raise InvalidArgument("epsilon must be > 0")
        for name in (
            "large_problem_threshold",
            "branch_and_bound_threshold",
            "dp_max_segments",
            "exact_max_steps",
            "cp_num_workers",
            "swap_max_passes",
            "swap_max_iterations",
        ):
            if int(getattr(self, name)) < 1:
                raise InvalidArgument(f"{name} must be >= 1")
        if self.exact_time_limit_s <= 0 or self.cp_time_limit_s_per_bar <= 0:
            raise InvalidArgument("time limits must be > 0")

    def with_bar_length(self, standard_bar_length: Optional[float]) -> "EngineConfig":
        if standard_bar_length is None:
            return self
        return replace(self, standard_bar_length=float(standard_bar_length))


DEFAULT_CONFIG = EngineConfig()


def make_engine_config(
    *,
    standard_bar_length: Optional[float] = None,
    min_waste_length: Optional[float] = None,
    large_problem_threshold: Optional[int] = None,
    exact_time_limit_s: Optional[float] = None,
    **overrides: Any,
) -> EngineConfig:
    """
    Convenience factory: defaults plus whatever the caller overrides.
    """
    cfg = replace(
        DEFAULT_CONFIG,
        standard_bar_length=float(
            standard_bar_length if standard_bar_length is not None else DEFAULTS.default_standard_bar_length
        ),
        min_waste_length=float(
            min_waste_length if min_waste_length is not None else DEFAULTS.default_min_waste_length
        ),
        large_problem_threshold=int(
            large_problem_threshold
            if large_problem_threshold is not None
            else DEFAULTS.default_large_problem_threshold
        ),
        exact_time_limit_s=float(
            exact_time_limit_s if exact_time_limit_s is not None else DEFAULTS.default_exact_time_limit_s
        ),
    )
    return replace(cfg, **overrides) if overrides else cfg


def _parse_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise InvalidArgument(f"{name} must be a boolean, got {value!r}")


def config_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    """
    Build config from a settings dict (e.g. the "settings" block of a job JSON).
    Unknown keys are rejected so typos do not silently fall back to defaults.
    """
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise InvalidArgument(f"Unknown config keys: {unknown}")
    kwargs = {}
    for k, v in data.items():
        default = getattr(DEFAULT_CONFIG, k)
        if isinstance(default, bool):
            kwargs[k] = _parse_flag(k, v)
        elif isinstance(default, int):
            kwargs[k] = int(v)
        else:
            kwargs[k] = float(v)
    return replace(DEFAULT_CONFIG, **kwargs)


def parse_dia_list(dia_text: str) -> List[int]:
    """
    Parse '10,12,16' -> [10, 12, 16]
    """
    vals = [v.strip() for v in dia_text.split(",") if v.strip() != ""]
    if not vals:
        raise InvalidArgument("dia list must look like '10,12,16'")
    out = [int(float(v)) for v in vals]
    if any(d <= 0 for d in out):
        raise InvalidArgument(f"dia values must be > 0: {dia_text}")
    return out
