"""
Exceptions raised by the spectral engine.

PreconditionError covers malformed calls (bad widths, empty windows,
negative shifts). AmplitudeComparisonError is kept separate so callers can
tell a badly shaped request apart from degenerate numeric content.
"""


class SpectrumError(Exception):
    """Base class for all errors raised by fftfun."""


class PreconditionError(SpectrumError, ValueError):
    """A caller contract was violated; the input must change before retrying."""


class AmplitudeComparisonError(SpectrumError, ArithmeticError):
    """Two NaN amplitudes were compared while searching for the main frequency."""
