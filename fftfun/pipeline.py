"""
Analyze, shift and resynthesize windows of a waveform.

``shift_window`` processes the single window under a cursor, the way an
interactive viewer redraws one frame. ``shift_waveform`` walks a whole,
already loaded signal in consecutive windows and joins the results.
"""

import logging
import math
import operator
from dataclasses import dataclass
from typing import Union

import numpy as np

from .errors import PreconditionError
from .dsp_core import Spectrum, Window, analyze, is_power_of_two
from .utils.audio import Waveform

logger = logging.getLogger(__name__)


def _as_whole_number(name, value):
    try:
        return operator.index(value)
    except TypeError:
        raise PreconditionError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class ShiftSettings:
    """Parameters for one shift run."""
    window: Union[Window, str] = Window.HANN
    fft_width: int = 2048
    window_width: int = 2048
    shift_hz: float = 0.0
    cursor: int = 0

    def __post_init__(self):
        self.window = Window.parse(self.window)
        self.fft_width = _as_whole_number('fft_width', self.fft_width)
        self.window_width = _as_whole_number('window_width', self.window_width)
        self.cursor = _as_whole_number('cursor', self.cursor)
        try:
            self.shift_hz = float(self.shift_hz)
        except (TypeError, ValueError):
            raise PreconditionError(f"shift_hz must be a number, got {self.shift_hz!r}") from None

        if not is_power_of_two(self.fft_width):
            raise PreconditionError(f"fft_width must be a power of two, got {self.fft_width}")
        if not 1 <= self.window_width <= self.fft_width:
            raise PreconditionError(
                f"window_width must be between 1 and fft_width ({self.fft_width}), "
                f"got {self.window_width}"
            )
        if not math.isfinite(self.shift_hz) or self.shift_hz < 0:
            raise PreconditionError(f"shift_hz must be a non-negative number, got {self.shift_hz}")
        if self.cursor < 0:
            raise PreconditionError(f"cursor must not be negative, got {self.cursor}")


@dataclass
class ShiftResult:
    """Everything produced for one window."""
    cursor: int
    shift_buckets: int
    spectrum: Spectrum
    shifted: Spectrum
    reconstructed: Waveform


def _shift_one(window_waveform: Waveform, settings: ShiftSettings):
    spectrum = analyze(window_waveform, settings.window, settings.fft_width)
    shift_buckets = spectrum.bucket_from_freq(settings.shift_hz)
    shifted = spectrum.shift(shift_buckets)
    reconstructed = shifted.to_waveform().slice(0, settings.window_width)
    return spectrum, shift_buckets, shifted, reconstructed


def shift_window(waveform: Waveform, settings: ShiftSettings) -> ShiftResult:
    """
    Shift the window starting at ``settings.cursor``.

    The cursor is clamped so the window stays inside the waveform. The
    reconstruction is cut back to ``window_width`` samples.
    """
    max_cursor = max(0, len(waveform) - settings.window_width - 1)
    cursor = min(settings.cursor, max_cursor)
    if cursor != settings.cursor:
        logger.debug("Cursor %d clamped to %d", settings.cursor, cursor)

    window_waveform = waveform.slice(cursor, cursor + settings.window_width)
    spectrum, shift_buckets, shifted, reconstructed = _shift_one(window_waveform, settings)

    logger.debug(
        "Window at %d: %.1f Hz -> %d buckets of %.3f Hz",
        cursor, settings.shift_hz, shift_buckets, spectrum.frequency_resolution()
    )

    return ShiftResult(
        cursor=cursor,
        shift_buckets=shift_buckets,
        spectrum=spectrum,
        shifted=shifted,
        reconstructed=reconstructed,
    )


def shift_waveform(waveform: Waveform, settings: ShiftSettings) -> Waveform:
    """
    Shift a whole waveform in consecutive, non-overlapping windows.

    A trailing window shorter than ``window_width`` is skipped, so the
    result may be shorter than the input.
    """
    width = settings.window_width
    pieces = []

    for start in range(0, len(waveform), width):
        if start + width > len(waveform):
            logger.warning(
                "Skipping partial window [%d, %d) of a %d-sample waveform",
                start, start + width, len(waveform)
            )
            continue

        _, _, _, reconstructed = _shift_one(waveform.slice(start, start + width), settings)
        pieces.append(reconstructed.samples())

    logger.info("Shifted %d windows of %d samples by %.1f Hz", len(pieces), width, settings.shift_hz)

    samples = np.concatenate(pieces) if pieces else np.zeros(0)
    return Waveform(samples, waveform.sample_rate)
