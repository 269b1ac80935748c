# rebar_cutting/errors.py
# Error taxonomy for the cutting engine.
# Everything derives from ValueError so callers that already catch bad-input
# errors keep working.

from __future__ import annotations


class CuttingStockError(ValueError):
    """Base class for all engine errors."""


class InvalidArgument(CuttingStockError):
    """Bad input reaching the engine (empty comparison, non-positive dims, ...)."""


class DecompositionInvariantViolation(CuttingStockError):
    """A physical segment or pattern would exceed the stock bar length."""


class ComputeBudgetExceeded(CuttingStockError):
    """
    Raised inside exact searches when the step/time budget runs out.
    Strategies catch it and return the best solution found so far.
    """

    def __init__(self, steps: int, seconds: float):
        super().__init__(f"search budget exceeded after {steps} steps / {seconds:.2f} s")
        self.steps = steps
        self.seconds = seconds
