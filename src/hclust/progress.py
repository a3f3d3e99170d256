"""Progress reporting for the two-phase clustering run."""

from __future__ import annotations

import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

PHASE_DISTANCES = 0
PHASE_MERGES = 1
PHASE_COUNT = 2


def overall_progress(phase: int, phase_progress: float) -> float:
    """Scale ``phase_progress`` for ``phase`` into the overall [0, 1] range."""

    return phase / PHASE_COUNT + phase_progress / PHASE_COUNT


def log_progress(progress: float) -> None:
    """Progress callback that logs the completed percentage."""

    logger.info("Clustering: %.1f%%", progress * 100)


class ProgressReporter:
    """Forward progress fractions to an optional callback.

    Exceptions raised by the callback never abort a clustering run: the first
    failure is logged with its traceback and the callback is not invoked
    again for the lifetime of the reporter.
    """

    __slots__ = ("_callback", "_failed")

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback
        self._failed = False

    @property
    def enabled(self) -> bool:
        return self._callback is not None and not self._failed

    def update(self, phase: int, phase_progress: float) -> None:
        if not self.enabled:
            return

        progress = min(max(overall_progress(phase, phase_progress), 0.0), 1.0)
        try:
            self._callback(progress)
        except Exception:
            self._failed = True
            logger.warning(
                "Progress callback %r failed; further progress updates are disabled",
                self._callback,
                exc_info=True,
            )


__all__ = [
    "PHASE_COUNT",
    "PHASE_DISTANCES",
    "PHASE_MERGES",
    "ProgressCallback",
    "ProgressReporter",
    "log_progress",
    "overall_progress",
]
