# rebar_cutting/progress.py
# Per-call progress reporting and simple phase profiling.
# A ProgressContext is passed into each strategy run; nothing here is global,
# so parallel or nested runs never interleave each other's counters.

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional


@dataclass
class PhaseTimer:
    name: str
    start: float = field(default_factory=time.perf_counter)
    elapsed: float = 0.0

    def stop(self) -> None:
        self.elapsed = time.perf_counter() - self.start


@dataclass(frozen=True)
class ProgressStats:
    label: str
    step: str
    percent: float
    counters: Dict[str, int]
    elapsed_s: float


ProgressListener = Callable[[ProgressStats], None]


class ProgressContext:
    """
    Observable counters + percentage feed for one solver run.

    Usage:
      ctx = ProgressContext("dia 12")
      unsubscribe = ctx.subscribe(lambda s: print(s.step, s.percent))
      with ctx.phase("search"):
          ctx.incr("states")
      print(ctx.report())
    """

    def __init__(self, label: str = "", listeners: Optional[List[ProgressListener]] = None) -> None:
        self.label = label
        self.step = "idle"
        self.percent = 0.0
        self.counters: Dict[str, int] = {}
        self.phases: Dict[str, PhaseTimer] = {}
        self.children: List["ProgressContext"] = []
        self._listeners: List[ProgressListener] = listeners if listeners is not None else []
        self._t0 = time.perf_counter()

    def scoped(self, label: str) -> "ProgressContext":
        """Independent child context (own counters) sharing this context's listeners."""
        name = f"{self.label}/{label}" if self.label else label
        child = ProgressContext(name, listeners=self._listeners)
        self.children.append(child)
        return child

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> ProgressStats:
        return ProgressStats(
            label=self.label,
            step=self.step,
            percent=self.percent,
            counters=dict(self.counters),
            elapsed_s=time.perf_counter() - self._t0,
        )

    def _emit(self) -> None:
        if not self._listeners:
            return
        stats = self.snapshot()
        for listener in list(self._listeners):
            listener(stats)

    def set_step(self, step: str) -> None:
        self.step = step
        self._emit()

    def set_progress(self, percent: float) -> None:
        self.percent = max(0.0, min(100.0, float(percent)))
        self._emit()

    def incr(self, counter: str, amount: int = 1) -> None:
        self.counters[counter] = self.counters.get(counter, 0) + int(amount)
        self._emit()

    @contextmanager
    def phase(self, name: str) -> Iterator[PhaseTimer]:
        pt = PhaseTimer(name=name)
        self.phases[name] = pt
        self.set_step(name)
        try:
            yield pt
        finally:
            pt.stop()

    def report(self) -> str:
        title = f"Solver profile {self.label}" if self.label else "Solver profile"
        lines = [f"--- {title} ---"]
        total = 0.0
        for name, pt in self.phases.items():
            total += pt.elapsed
            lines.append(f"{name:20s}: {pt.elapsed:8.3f} s")
        lines.append(f"{'TOTAL':20s}: {total:8.3f} s")
        for name, value in sorted(self.counters.items()):
            lines.append(f"{name:20s}: {value:,}")
        for child in self.children:
            lines.append(child.report())
        return "\n".join(lines)


def ensure_context(progress: Optional[ProgressContext], label: str) -> ProgressContext:
    """Strategies always report somewhere; a throwaway context when the caller passed none."""
    return progress if progress is not None else ProgressContext(label)
