# mosaicify/utils.py
from __future__ import annotations

"""
Shared utilities for mosaicify.

Includes worker-count defaults, progress and duration formatting, a
single-line progress display, and tidy print-based logging.
"""

import os
import sys
import time
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np


def default_workers() -> int:
    """Leave a few cores free for the system; returns a sensible worker count."""
    n = os.cpu_count() or 4
    reserve = 1 if n <= 6 else 2 if n <= 12 else 3 if n <= 18 else 4
    return max(1, n - reserve)


def split_range(total: int, parts: int) -> List[Tuple[int, int]]:
    """Partition range [0, total) into ~parts contiguous [start, end) spans."""
    parts = max(1, int(parts))
    step = max(1, (total + parts - 1) // parts)
    return [(start, min(start + step, total)) for start in range(0, total, step)]


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_eta(seconds: float | None) -> str:
    """Format an ETA in seconds as 'Hh Mm', 'Mm Ss', 'Ss', or '--:--' for unknown."""
    if seconds is None or not np.isfinite(seconds) or seconds < 0:
        return "--:--"
    total = int(round(seconds))
    if total >= 3600:
        hours = total // 3600
        minutes = (total % 3600) // 60
        return f"{hours}h {minutes}m"
    if total >= 60:
        minutes = total // 60
        rem = total % 60
        return f"{minutes}m {rem}s"
    return f"{total}s"


#  Progress


def print_progress_line(message: str, final: bool = False) -> None:
    """Print a single-line progress message that overwrites previous output."""
    sys.stdout.write("\r\033[K" + message)
    sys.stdout.flush()
    if final:
        sys.stdout.write("\n")
        sys.stdout.flush()


class Progress:
    """
    Percent + ETA progress line for a fixed number of steps.
    Prints only when the integer percentage changes.
    """

    def __init__(self, label: str, total: int, enabled: bool = True) -> None:
        self.label = label
        self.total = max(1, int(total))
        self.enabled = enabled
        self.done = 0
        self._t0 = time.perf_counter()
        self._last_pct = -1

    def _eta(self) -> Optional[float]:
        if self.done == 0:
            return None
        elapsed = time.perf_counter() - self._t0
        return elapsed * (self.total / self.done - 1.0)

    def step(self, n: int = 1) -> None:
        self.done = min(self.total, self.done + n)
        if not self.enabled:
            return
        pct = int(100 * self.done / self.total)
        if pct > self._last_pct:
            print_progress_line(
                f"[{self.label}] {pct:3d}% (ETA {format_eta(self._eta())})"
            )
            self._last_pct = pct

    def finish(self) -> None:
        if self.enabled:
            print_progress_line(f"[{self.label}] 100% (ETA 0s)", final=True)


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live progress printing in terminals that expose .reconfigure().
    """
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """Format (name, value) pairs as 'Name: value' blocks separated by sep."""
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [run] Grid: 40x30  Block: 24x18  Colour space: lab  Avoid duplicates: on
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "default_workers",
    "split_range",
    "format_seconds_compact",
    "format_eta",
    "print_progress_line",
    "Progress",
    "enable_line_buffered_stdout",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "log",
    "debug_log",
    "warn",
    "error",
]
