"""
pyglm exceptions.

    PyGLMError
    ├── ValidationError          bad input, detected before computing
    │   ├── DimensionError       shape / conformability
    │   └── DomainError          argument outside its mathematical domain
    └── NumericalError           failure during computation
        └── SingularMatrixError  zero pivot, rank deficiency

Every exception carries the values needed to diagnose it as attributes.
An iterative solver that runs out of iterations does not raise: it
returns its last estimate and says so in Result.warnings.
"""


class PyGLMError(Exception):
    """Root of all pyglm errors."""
    pass


class ValidationError(PyGLMError):
    """An input failed a boundary check."""
    pass


class DimensionError(ValidationError):
    """
    Operand shapes are wrong or do not conform (A.shape[1] != B.shape[0]
    for A @ B, X and y of different lengths, a non-square input to LU).

    Attributes:
        expected: Expected shape or size, where known
        actual: Shape or size received, where known
    """

    def __init__(
        self,
        message: str,
        expected: tuple[int, ...] | int | None = None,
        actual: tuple[int, ...] | int | None = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class DomainError(ValidationError, ValueError):
    """
    A parameter lies outside the set where the function is defined:
    a factorial argument outside [0, 170], a non-positive Poisson mean or
    Gaussian standard deviation, a negative weight, a zero link slope.

    Also a ValueError, so generic callers can catch it as one.

    Attributes:
        name: Parameter name
        value: Value received
        valid_range: Readable description of the accepted values
    """

    def __init__(
        self,
        message: str,
        name: str | None = None,
        value: object = None,
        valid_range: str | None = None,
    ):
        super().__init__(message)
        self.name = name
        self.value = value
        self.valid_range = valid_range


class NumericalError(PyGLMError):
    """Computation could not be completed with the given data."""
    pass


class SingularMatrixError(NumericalError):
    """
    A factorisation hit a (numerically) zero pivot, or a design matrix is
    rank-deficient.

    Attributes:
        matrix_name: Which matrix, e.g. 'a', 'X', "X'X"
        column: Elimination step at which the zero pivot appeared
        rank: Numerical rank, where computed
        expected_rank: Full rank for the shape
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        column: int | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.column = column
        self.rank = rank
        self.expected_rank = expected_rank
