"""
Factorial and log-factorial lookup tables.

Both tables are process-wide and append-only: an entry, once computed,
is never recomputed or changed. They grow lazily up to the largest
argument requested so far, and growth happens under a lock so
concurrent first accesses extend each table exactly once.

n! overflows float64 for n > 170, which bounds the domain of both
functions.
"""

import math
import threading

from pyglm.core.exceptions import DomainError

FACTORIAL_MAX = 170

_lock = threading.Lock()
_factorial: list[float] = [1.0]
_log_factorial: list[float] = [0.0]


def _check_argument(n, name: str) -> int:
    try:
        k = int(n)
    except (TypeError, ValueError, OverflowError) as e:
        raise DomainError(
            f"{name}: expected an integer, got {n!r}",
            name=name,
            value=n,
            valid_range=f"[0, {FACTORIAL_MAX}]",
        ) from e
    if k != n or k < 0 or k > FACTORIAL_MAX:
        raise DomainError(
            f"{name}: must be an integer in [0, {FACTORIAL_MAX}], got {n}",
            name=name,
            value=n,
            valid_range=f"[0, {FACTORIAL_MAX}]",
        )
    return k


def _extend(table: list[float], n: int, step) -> None:
    with _lock:
        # another thread may have grown the table while we waited
        for i in range(len(table), n + 1):
            table.append(step(table[i - 1], i))


def factorial(n: int) -> float:
    """
    n! as a float.

    Args:
        n: Integer in [0, 170]

    Raises:
        DomainError: If n is not an integer in [0, 170]
    """
    k = _check_argument(n, 'n')
    if k >= len(_factorial):
        _extend(_factorial, k, lambda prev, i: prev * i)
    return _factorial[k]


def log_factorial(n: int) -> float:
    """
    log(n!), accumulated as a running sum of log(i).

    Raises:
        DomainError: If n is not an integer in [0, 170]
    """
    k = _check_argument(n, 'n')
    if k >= len(_log_factorial):
        _extend(_log_factorial, k, lambda prev, i: prev + math.log(i))
    return _log_factorial[k]
