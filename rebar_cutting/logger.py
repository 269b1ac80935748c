# rebar_cutting/logger.py
# Print-based solver logging: one prefix per line, on/off and verbose switches.
# Warnings and errors go to stderr so exported CSV piped from stdout stays clean.

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import TextIO


@dataclass
class Logger:
    enabled: bool = True
    verbose: bool = False
    prefix: str = "[REBAR]"

    def _write(self, stream: TextIO, msg: str) -> None:
        print(f"{self.prefix} {msg}", file=stream)

    def child(self, tag: str) -> "Logger":
        """Same switches, prefix extended with a scope tag (e.g. a diameter)."""
        if self.prefix.endswith("]"):
            return replace(self, prefix=f"{self.prefix[:-1]} {tag}]")
        return replace(self, prefix=f"{self.prefix} {tag}")

    def info(self, msg: str) -> None:
        if self.enabled:
            self._write(sys.stdout, msg)

    def debug(self, msg: str) -> None:
        if self.enabled and self.verbose:
            self._write(sys.stdout, msg)

    def warn(self, msg: str) -> None:
        if self.enabled:
            self._write(sys.stderr, f"WARNING: {msg}")

    def error(self, msg: str) -> None:
        # not silenced by --quiet
        self._write(sys.stderr, f"ERROR: {msg}")


LOGGER = Logger(enabled=True)


def set_enabled(flag: bool) -> None:
    LOGGER.enabled = bool(flag)


def set_verbose(flag: bool) -> None:
    LOGGER.verbose = bool(flag)


def get_logger() -> Logger:
    return LOGGER
