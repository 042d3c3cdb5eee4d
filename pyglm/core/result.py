"""
The Result[P] envelope returned by every backend.

A backend fills in a frozen payload P (LinearParams, GLMParams,
NewtonParams) and wraps it together with what is common to all fits:
method metadata, section timings, the backend identifier and any
non-fatal diagnostics. Solution classes wrap a Result; they never
recompute what a backend already produced.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable output of one backend call.

    Attributes:
        params: Backend payload
        info: Method metadata. Always has 'method'; iterative backends add
            'converged' and 'iterations', Newton-Raphson adds 'stop_reason'.
        timing: Seconds per Timer section plus 'total_seconds', or None
        backend_name: e.g. 'cpu_lu', 'cpu_qr', 'cpu_irls', 'cpu_newton'
        warnings: Diagnostics such as non-convergence, oldest first

    Example:
        >>> Result(
        ...     params=GLMParams(...),
        ...     info={'method': 'irls_wls', 'converged': True, 'iterations': 6},
        ...     timing={'total_seconds': 0.004, 'irls': 0.003},
        ...     backend_name='cpu_irls',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def method(self) -> str | None:
        return self.info.get('method')

    @property
    def converged(self) -> bool:
        """False only when an iterative backend reports it; direct solves count as converged."""
        return bool(self.info.get('converged', True))

    def has_warning(self, substring: str) -> bool:
        return any(substring in message for message in self.warnings)
