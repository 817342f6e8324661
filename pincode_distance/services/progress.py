from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.run_result import ProgressState

"""Row progress for bulk runs.

ProgressReporter is the counter the runner advances after every attempted
row; observers subscribe to it and only read. ProgressTracker is one such
observer that renders a tqdm bar, enabled only when stdout is a TTY so that
CI logs are not flooded with control sequences.
"""

__all__ = [
    "ProgressReporter",
    "ProgressTracker",
    "is_tty_enabled",
]

ProgressListener = Callable[[ProgressState], None]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressReporter:
    """Observable processed/total counter.

    ``advance()`` and ``reset()`` are the only mutation paths. Listeners are
    called with a ProgressState snapshot after each change.
    """

    def __init__(self, total: int = 0) -> None:
        if total < 0:
            raise ValueError("total must be non-negative")
        self._processed = 0
        self._total = total
        self._listeners: list[ProgressListener] = []

    @property
    def processed(self) -> int:
        return self._processed

    @property
    def total(self) -> int:
        return self._total

    def snapshot(self) -> ProgressState:
        return ProgressState(processed=self._processed, total=self._total)

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self, total: int) -> None:
        if total < 0:
            raise ValueError("total must be non-negative")
        self._processed = 0
        self._total = total
        self._notify()

    def advance(self) -> None:
        if self._processed >= self._total:
            raise RuntimeError(
                f"progress already complete ({self._processed}/{self._total})"
            )
        self._processed += 1
        self._notify()

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)


class ProgressTracker:
    """tqdm progress bar for row processing.

    Use as a ProgressReporter listener. In non-TTY environments no bar is
    created and every call is a no-op.
    """

    def __init__(self, total_rows: int, *, description: str = "Calculating distances") -> None:
        """Initialize progress tracker.

        Args:
            total_rows: Total number of data rows to process
            description: Description for the progress bar
        """
        self.total_rows = total_rows
        self.description = description
        self.processed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, state: ProgressState) -> None:
        delta = state.processed - self.processed
        self.processed = state.processed
        if self.enabled and self.pbar is not None:
            if state.total != self.pbar.total:
                self.pbar.reset(total=state.total)
                delta = state.processed
            if delta > 0:
                self.pbar.update(delta)

    def set_postfix(self, **kwargs: Any) -> None:
        """Set postfix information (stats) on the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
