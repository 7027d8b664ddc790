import operator
from enum import Enum
from typing import Union

import numpy as np

from ..errors import PreconditionError


class Window(Enum):
    """
    Window functions applied to samples before the transform.

    The set is closed: iterating ``Window`` (or ``Window.ALL``) yields every
    kind, so callers can offer all of them without a lookup table.
    """

    BARTLETT = 'bartlett'
    HAMMING = 'hamming'
    HANN = 'hann'
    RECTANGULAR = 'rectangular'

    def __str__(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, name: Union[str, 'Window']) -> 'Window':
        """Look a window up by name, case-insensitively ('triangular' means Bartlett)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        if key == 'triangular':
            return cls.BARTLETT
        try:
            return cls(key)
        except ValueError:
            known = ', '.join(w.value for w in cls)
            raise PreconditionError(f"Unknown window type: {name!r} (expected one of {known})") from None

    def values(self, width: int) -> np.ndarray:
        return get_window(self, width)


ALL_WINDOWS = tuple(Window)
Window.ALL = ALL_WINDOWS


def get_window(window: Union[str, Window], width: int) -> np.ndarray:
    """
    Generate the scale factors of a window function.

    Parameters
    ----------
    window : Window or str
        Window kind, or its name ('hann', 'hamming', 'bartlett', 'rectangular')
    width : int
        Number of scale factors, normally the number of samples being windowed

    Returns
    -------
    np.ndarray
        Float64 array of length width

    Notes
    -----
    All windows use N (not N-1) in the denominator, the periodic form:

    - Rectangular: 1
    - Bartlett: 1 - |n - N/2| / (N/2)
    - Hann: 0.5 * (1 - cos(2πn / N))
    - Hamming: 25/46 - 21/46 * cos(2πn / N)
    """
    window = Window.parse(window)
    width = operator.index(width)
    if width <= 0:
        raise PreconditionError(f"Window width must be positive, got {width}")

    n = np.arange(width, dtype=np.float64)
    half = width / 2

    if window is Window.RECTANGULAR:
        return np.ones(width, dtype=np.float64)
    elif window is Window.BARTLETT:
        return 1.0 - np.abs((n - half) / half)
    elif window is Window.HANN:
        return 0.5 * (1.0 - np.cos(2 * np.pi * n / width))
    elif window is Window.HAMMING:
        return 25.0 / 46.0 - 21.0 / 46.0 * np.cos(2 * np.pi * n / width)

    raise AssertionError(f"unhandled window {window!r}")
