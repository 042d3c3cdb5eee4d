"""
Wall-clock section timing for backends.

Each backend owns one Timer per call. Named sections accumulate, so a
section entered once per IRLS iteration reports the total time spent in
it. The finished breakdown becomes Result.timing.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Overall timer plus accumulating named sections.

        timer = Timer()
        timer.start()
        with timer.section('irls'):
            ...
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'irls': ...}
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._started: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._started = time.perf_counter()

    def stop(self) -> None:
        if self._started is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._started

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Add the time spent in the block to section `name`, even if it raises."""
        entered = time.perf_counter()
        try:
            yield
        finally:
            spent = time.perf_counter() - entered
            self._sections[name] = self._sections.get(name, 0.0) + spent

    def result(self) -> dict[str, float]:
        """
        {'total_seconds': total, <section>: seconds, ...}

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}


@contextmanager
def timed() -> Iterator[Timer]:
    """Yield a started Timer and stop it when the block exits."""
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
