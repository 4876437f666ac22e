"""
Stage timing for conversion pipelines.

A render runs through up to four stages (decode, resample, quantize, encode).
StageTimer accumulates how long each one took so slow inputs show up in the
debug log on small single-board hosts.
"""

import time
from contextlib import contextmanager
from typing import Iterator, Optional

DECODE = "decode"
RESAMPLE = "resample"
QUANTIZE = "quantize"
ENCODE = "encode"

PIPELINE_STAGES = (DECODE, RESAMPLE, QUANTIZE, ENCODE)


class StageTimer:
    """
    Accumulate wall-clock milliseconds per pipeline stage.

    A stage measured more than once within one render (for example quantize
    in a retried conversion) adds up. Call reset() between renders.
    """

    def __init__(self) -> None:
        self._running: dict[str, float] = {}
        self._elapsed: dict[str, float] = {}

    @staticmethod
    def _now_ms() -> float:
        return time.perf_counter() * 1000

    def start(self, stage: str) -> None:
        """Start (or restart) the clock for a stage."""
        self._running[stage] = self._now_ms()

    def stop(self, stage: str) -> float:
        """
        Stop the clock for a stage and add the interval to its total.

        Args:
            stage: Stage name passed to start()

        Returns:
            Milliseconds since the matching start()

        Raises:
            KeyError: If the stage is not running
        """
        if stage not in self._running:
            raise KeyError(f"Stage '{stage}' was not started")

        interval = self._now_ms() - self._running.pop(stage)
        self._elapsed[stage] = self._elapsed.get(stage, 0.0) + interval
        return interval

    @contextmanager
    def measure(self, stage: str) -> Iterator[None]:
        """Time the enclosed block, also when it raises."""
        self.start(stage)
        try:
            yield
        finally:
            self.stop(stage)

    def elapsed(self, stage: str) -> Optional[float]:
        """Total milliseconds recorded for a stage, or None if it never ran."""
        return self._elapsed.get(stage)

    @property
    def total(self) -> float:
        return sum(self._elapsed.values())

    def reset(self) -> None:
        self._running.clear()
        self._elapsed.clear()

    def summary(self) -> dict[str, float]:
        """Copy of the per-stage totals in the order stages first finished."""
        return dict(self._elapsed)

    def describe(self) -> str:
        """One-line report such as ``decode=1.2ms resample=3.4ms total=4.6ms``."""
        parts = [f"{stage}={ms:.1f}ms" for stage, ms in self._elapsed.items()]
        parts.append(f"total={self.total:.1f}ms")
        return " ".join(parts)
