# rebar_cutting/plotting.py
# Minimal matplotlib visualization: one horizontal strip per stock bar,
# colored cut blocks, hatched offcut at the end.

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .types import CuttingStockResult, DetailedCut


@dataclass(frozen=True)
class PlotStyle:
    show_labels: bool = True
    show_lengths: bool = True
    show_grid: bool = False
    font_size: int = 7
    bar_height: float = 0.6
    row_height_in: float = 0.45   # figure height per stock bar
    max_bars: int = 200           # cap on drawn bars


def _hash_color(key: str) -> Tuple[float, float, float]:
    """Deterministic pastel-ish color from a string."""
    h = 2166136261
    for ch in key.encode("utf-8"):
        h ^= ch
        h *= 16777619
        h &= 0xFFFFFFFF
    # map to [0.3..0.9] range for readability
    r = 0.3 + ((h >> 0) & 0xFF) / 255 * 0.6
    g = 0.3 + ((h >> 8) & 0xFF) / 255 * 0.6
    b = 0.3 + ((h >> 16) & 0xFF) / 255 * 0.6
    return (r, g, b)


def _result_title(result: CuttingStockResult) -> str:
    bits = [
        f"dia {result.dia}",
        result.algorithm.value,
        f"{result.total_bars_used} bars",
        f"waste {result.total_waste:.3f} m",
        f"util {result.average_utilization:.1f}%",
    ]
    return " | ".join(bits)


def _draw_bar(ax: plt.Axes, row: int, d: DetailedCut, bar_length: float, style: PlotStyle) -> None:
    y = -row - style.bar_height / 2
    ax.add_patch(Rectangle((0, y), bar_length, style.bar_height, fill=False, linewidth=0.8))

    for c in d.cuts:
        color = _hash_color(c.bar_code)
        ax.add_patch(
            Rectangle((c.position, y), c.length, style.bar_height, facecolor=color, edgecolor="black", linewidth=0.6)
        )
        if style.show_labels or style.show_lengths:
            lines: List[str] = []
            if style.show_labels:
                lines.append(c.bar_code + (f" #{c.segment_index + 1}" if c.has_lap or c.segment_index else ""))
            if style.show_lengths:
                lines.append(f"{c.length:.3f}")
            ax.text(
                c.position + c.length / 2,
                -row,
                "\n".join(lines),
                ha="center",
                va="center",
                fontsize=style.font_size,
                color="black",
            )

    if d.waste > 0:
        start = bar_length - d.waste
        ax.add_patch(
            Rectangle(
                (start, y),
                d.waste,
                style.bar_height,
                facecolor="white",
                edgecolor="gray",
                hatch="///" if d.reusable_offcut else "xx",
                linewidth=0.6,
            )
        )


def plot_result(
    result: CuttingStockResult,
    style: Optional[PlotStyle] = None,
    figsize: Optional[Tuple[float, float]] = None,
) -> plt.Figure:
    """
    Draw every stock bar of one result in a single matplotlib figure.
    """
    style = style or PlotStyle()

    n = len(result.detailed_cuts)
    if n == 0:
        raise ValueError("Result has no bars to plot")
    shown = result.detailed_cuts[: style.max_bars]
    bar_length = result.patterns[0].standard_bar_length

    if figsize is None:
        figsize = (12, max(2.0, 1.0 + style.row_height_in * len(shown)))

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    for row, d in enumerate(shown):
        _draw_bar(ax, row, d, bar_length, style)

    ax.set_yticks([-i for i in range(len(shown))])
    ax.set_yticklabels([f"Bar {d.bar_number}" for d in shown], fontsize=style.font_size + 1)
    ax.set_xlim(0, bar_length)
    ax.set_ylim(-len(shown) + 0.5 - style.bar_height, 0.5 + style.bar_height / 2)
    ax.set_xlabel("m")
    title = _result_title(result)
    if len(shown) < n:
        title += f" (first {len(shown)} of {n})"
    ax.set_title(title, fontsize=10)

    if style.show_grid:
        ax.grid(True, axis="x", linewidth=0.3)
    else:
        ax.grid(False)

    fig.tight_layout()
    return fig


def show_result(result: CuttingStockResult, style: Optional[PlotStyle] = None) -> None:
    """Convenience wrapper: plot and show."""
    plot_result(result, style=style)
    plt.show()


def save_result_png(
    result: CuttingStockResult,
    path: str,
    style: Optional[PlotStyle] = None,
    dpi: int = 150,
) -> None:
    """Save the cutting plan figure to PNG."""
    fig = plot_result(result, style=style)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
