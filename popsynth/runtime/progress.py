"""Lightweight terminal progress reporting and run timing."""

from __future__ import annotations

import math
import sys
import time
from datetime import datetime
from typing import Optional, TextIO

ETA_EWMA_ALPHA = 0.1
ETA_MIN_SAMPLES = 3


class ProgressReporter:
    """Lightweight terminal progress bar with ETA feedback."""

    def __init__(
        self,
        total: int,
        *,
        label: str = "object",
        enabled: bool = False,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.enabled = bool(enabled and total > 0)
        self.total = max(int(total), 1)
        self.label = label
        self.stream = stream if stream is not None else sys.stdout
        self.start = time.monotonic()
        self._finished = False
        self._isatty = bool(getattr(self.stream, "isatty", lambda: False)())
        self._last_percent_int: int = -1
        self._eta_ewma_s: float | None = None
        self._eta_samples: int = 0
        self._last_wall: float | None = None
        self._last_index: int | None = None

    def update(self, index: int, *, force: bool = False) -> None:
        """Render the bar when the percentage changes by 0.1% or when forced."""

        if not self.enabled or self._finished:
            return
        now = time.monotonic()
        self._update_eta(index, now)
        is_last = (index + 1) >= self.total
        frac = min(max((index + 1) / self.total, 0.0), 1.0)
        percent_tenth = int(frac * 1000)
        if not force and not is_last and percent_tenth == self._last_percent_int:
            return
        self._last_percent_int = percent_tenth
        bar_width = 28
        filled = int(bar_width * frac)
        bar = "#" * filled + "-" * (bar_width - filled)
        remaining = max(self.total - (index + 1), 0)
        eta_seconds = float("nan")
        if self._eta_ewma_s is not None and self._eta_samples >= ETA_MIN_SAMPLES:
            eta_seconds = self._eta_ewma_s * remaining
        line = f"[{bar}] {frac * 100:5.1f}% {self.label} {index + 1}/{self.total} {_format_eta(eta_seconds)}"
        if self._isatty:
            self.stream.write(f"\r\033[2K{line}")
            if is_last:
                self.stream.write("\n")
        else:
            self.stream.write(f"{line}\n")
        if is_last:
            self._finished = True
        self.stream.flush()

    def finish(self, index: int) -> None:
        if not self.enabled:
            return
        self.update(index, force=True)

    def _update_eta(self, index: int, now: float) -> None:
        if self._last_wall is not None and self._last_index is not None:
            delta = index - self._last_index
            if delta > 0:
                seconds = (now - self._last_wall) / delta
                if math.isfinite(seconds) and seconds > 0.0:
                    if self._eta_ewma_s is None:
                        self._eta_ewma_s = seconds
                    else:
                        self._eta_ewma_s = ETA_EWMA_ALPHA * seconds + (1.0 - ETA_EWMA_ALPHA) * self._eta_ewma_s
                    self._eta_samples += 1
        self._last_wall = now
        self._last_index = index


def _format_eta(seconds: float) -> str:
    if not math.isfinite(seconds) or seconds < 0.0:
        return "ETA ?"
    if seconds >= 3600.0:
        return f"ETA {seconds/3600.0:.1f}h"
    if seconds >= 60.0:
        return f"ETA {seconds/60.0:.1f}m"
    return f"ETA {seconds:.0f}s"


def format_wall_time(seconds: float) -> str:
    """Return ``h:m:s`` with truncated components, e.g. ``0:1:5``."""

    hours = int(seconds / 3600.0)
    minutes = int((seconds - hours * 3600.0) / 60.0)
    secs = int(seconds - hours * 3600.0 - minutes * 60.0)
    return f"{hours}:{minutes}:{secs}"


class RunTimer:
    """Start/end announcements with CPU and wall-clock totals."""

    def __init__(self, noun: str, *, stream: Optional[TextIO] = None, enabled: bool = True) -> None:
        self.noun = noun
        self.stream = stream if stream is not None else sys.stdout
        self.enabled = bool(enabled)
        self.wall_start = time.perf_counter()
        self.cpu_start = time.process_time()
        if self.enabled:
            self.stream.write(f"Start generating {noun} at {datetime.now():%c}\n\n")

    def finish(self) -> None:
        if not self.enabled:
            return
        cpu_seconds = time.process_time() - self.cpu_start
        wall_seconds = time.perf_counter() - self.wall_start
        self.stream.write(f"\nEnd generating {self.noun} at {datetime.now():%c}\n\n")
        self.stream.write(f"Clock time = {cpu_seconds:g} CPU seconds\n")
        self.stream.write(f"Wall time  = {format_wall_time(wall_seconds)} (hh:mm:ss)\n")
        self.stream.flush()


__all__ = ["ProgressReporter", "RunTimer", "format_wall_time"]
