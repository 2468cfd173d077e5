"""Single-line progress rendering for fetch and push operations."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from git import RemoteProgress

from .ui import ProgressOutput

UPDATE_HZ = 30
INITIAL_DELAY = 0.25  # seconds before the first draw
CLEAR_LINE = "\x1b[K"

logger = logging.getLogger("gitremote.progress")


@dataclass
class TransferProgress:
    """A progress event reported by the transport."""
    overall: float  # 0.0 to 1.0
    bytes_downloaded: Optional[int] = None


class RateEstimate:
    """Smoothed bytes-per-second estimate."""

    def __init__(self):
        self._last_sample: Optional[tuple] = None
        self._rate: Optional[float] = None

    def update(self, now: float, total: int) -> Optional[float]:
        if self._last_sample is None:
            self._last_sample = (now, total)
            return None
        last_time, last_total = self._last_sample
        elapsed = now - last_time
        if elapsed <= 0:
            return self._rate
        sample = (total - last_total) / elapsed
        # exponential smoothing, one second half-life
        weight = 1.0 - 0.5 ** elapsed
        self._rate = sample if self._rate is None else self._rate + weight * (sample - self._rate)
        self._last_sample = (now, total)
        return self._rate


def binary_prefix(value: float) -> tuple:
    """Scale ``value`` to a binary prefix, e.g. 2048 -> (2.0, "Ki")."""
    prefixes = ["", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei"]
    index = 0
    while abs(value) >= 1024 and index < len(prefixes) - 1:
        value /= 1024
        index += 1
    return value, prefixes[index]


def draw_progress_bar(progress: float, width: int) -> str:
    """Render ``[====    ]`` filling ``width`` columns including the brackets."""
    inner = max(width - 2, 0)
    filled = min(int(round(progress * inner)), inner)
    return "[" + "=" * filled + " " * (inner - filled) + "]"


class Progress:
    """
    Rate-limited renderer for transport progress.

    Nothing is drawn during the first quarter second so quick operations stay
    silent. Redraws are limited to UPDATE_HZ and completing the operation
    clears the line.
    """

    def __init__(self, now: float):
        self.next_print = now + INITIAL_DELAY
        self.rate = RateEstimate()
        self.drawn = False

    def update(self, now: float, progress: TransferProgress, output: ProgressOutput) -> None:
        if progress.overall >= 1.0:
            if self.drawn:
                output.write(f"\r{CLEAR_LINE}")
                self.drawn = False
            return

        rate = None
        if progress.bytes_downloaded is not None:
            rate = self.rate.update(now, progress.bytes_downloaded)

        if now < self.next_print:
            return
        self.next_print = now + 1.0 / UPDATE_HZ

        line = f"\r{progress.overall * 100:3.0f}% "
        if progress.bytes_downloaded is not None:
            scaled, prefix = binary_prefix(progress.bytes_downloaded)
            line += f"{scaled:>6.1f} {prefix}B"
            if rate is not None:
                scaled_rate, rate_prefix = binary_prefix(rate)
                line += f" at {scaled_rate:>5.1f} {rate_prefix}B/s"
            line += " "

        width = output.term_width() or 80
        bar_width = width - (len(line) - 1) - 1
        if bar_width > 2:
            line += draw_progress_bar(progress.overall, bar_width)
        output.write(line + CLEAR_LINE)
        self.drawn = True


class GitProgressAdapter(RemoteProgress):
    """Feeds GitPython's remote progress lines into a progress callback."""

    def __init__(self, callback: Callable[[TransferProgress], None]):
        super().__init__()
        self._callback = callback

    def update(self, op_code, cur_count, max_count=None, message=''):
        if not max_count:
            return
        # cur_count and max_count are floats or strings depending on GitPython version
        overall = min(float(cur_count) / float(max_count), 1.0)
        self._callback(TransferProgress(overall=overall))


def make_progress_callback(output: ProgressOutput) -> Callable[[TransferProgress], None]:
    """Build a callback that renders every progress event with the current time."""
    progress = Progress(time.monotonic())

    def callback(event: TransferProgress) -> None:
        try:
            progress.update(time.monotonic(), event, output)
        except OSError as e:
            # a broken progress line must not abort the transfer
            logger.debug(f"Failed to draw progress: {e}")

    return callback
