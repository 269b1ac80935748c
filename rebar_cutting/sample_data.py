# rebar_cutting/sample_data.py
# Utilities to generate sample / random bar schedules for quick benchmarking and tuning.
# Also used by the property tests (seeded, so runs are reproducible).

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Tuple

from .types import CuttingRequirement


@dataclass(frozen=True)
class RandomRequirementsConfig:
    seed: int = 123
    n_rows: int = 12
    dias: Tuple[int, ...] = (10, 12, 16)
    qty_range: Tuple[int, int] = (1, 4)

    # typical stirrup / link lengths (m)
    short_range: Tuple[float, float] = (0.8, 3.5)

    # typical beam / column bars (m)
    medium_range: Tuple[float, float] = (3.5, 11.5)

    # probability a row is longer than a stock bar and needs laps
    p_long: float = 0.15
    long_range: Tuple[float, float] = (12.5, 26.0)
    lap_range: Tuple[float, float] = (0.4, 0.9)

    # probability a row is "short"
    p_short: float = 0.45


def generate_random_requirements(cfg: RandomRequirementsConfig) -> List[CuttingRequirement]:
    """
    Generate requirement rows with quantities, lengths and laps.
    Designed to resemble a site schedule: many short links, some main bars, a few spliced bars.
    """
    rnd = random.Random(cfg.seed)
    rows: List[CuttingRequirement] = []

    for i in range(cfg.n_rows):
        r = rnd.random()
        lap = 0.0
        if r < cfg.p_long:
            length = rnd.uniform(*cfg.long_range)
            lap = round(rnd.uniform(*cfg.lap_range), 3)
        elif r < cfg.p_long + cfg.p_short:
            length = rnd.uniform(*cfg.short_range)
        else:
            length = rnd.uniform(*cfg.medium_range)

        rows.append(
            CuttingRequirement(
                serial=str(i + 1),
                label=f"B{i + 1:02d}",
                dia=rnd.choice(cfg.dias),
                quantity=rnd.randint(*cfg.qty_range),
                cutting_length=round(length, 3),
                lap_length=lap,
                element=rnd.choice(("Beam", "Column", "Slab", "Footing")),
            )
        )

    return rows
