"""
Frequency-domain view of one analysis window.

Bucket layout for a spectrum of width N:

    0              DC
    1 .. N/2       positive frequencies, ascending; N/2 is Nyquist
    N/2+1 .. N-1   negative-frequency mirror, conjugate of N-k for real input

A Spectrum never changes after construction. ``shift`` and ``to_waveform``
return new values.
"""

import logging
import math
import operator
from typing import Optional, Tuple, Union

import numpy as np

from ..errors import AmplitudeComparisonError, PreconditionError
from ..utils.audio import Waveform
from .fft import analyze_transform, is_power_of_two, synthesize_transform
from .window import Window, get_window

logger = logging.getLogger(__name__)


def _compare_amplitudes(a: float, b: float) -> int:
    """
    Total order over amplitudes where NaN loses to any number.

    Returns -1, 0 or 1. Two NaNs have no order and raise.
    """
    a_nan, b_nan = math.isnan(a), math.isnan(b)
    if a_nan and b_nan:
        raise AmplitudeComparisonError("encountered two NaN values")
    if a_nan:
        return -1
    if b_nan:
        return 1
    return (a > b) - (a < b)


class Spectrum:
    """
    Buckets of a power-of-two FFT together with the source sample rate.

    Args:
        buckets: Complex buckets, length must be a power of two
        sample_rate: Sample rate of the signal the buckets came from
    """

    def __init__(self, buckets, sample_rate: int):
        buckets = np.array(buckets, dtype=np.complex128)
        if buckets.ndim != 1:
            raise PreconditionError(f"Spectrum buckets must be 1D, got shape {buckets.shape}")
        if not is_power_of_two(len(buckets)):
            raise PreconditionError(
                f"Spectrum width must be a power of two, got {len(buckets)}"
            )
        try:
            sample_rate = operator.index(sample_rate)
        except TypeError:
            raise PreconditionError(f"Sample rate must be an integer, got {sample_rate!r}") from None
        if sample_rate <= 0:
            raise PreconditionError(f"Sample rate must be positive, got {sample_rate}")

        buckets.flags.writeable = False
        self._buckets = buckets
        self._sample_rate = sample_rate

    @property
    def width(self) -> int:
        return len(self._buckets)

    @property
    def buckets(self) -> np.ndarray:
        """Read-only complex buckets, ``width`` long."""
        return self._buckets

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def amplitudes(self) -> np.ndarray:
        """Magnitude of every bucket, both halves."""
        return np.abs(self._buckets)

    def phases(self) -> np.ndarray:
        """
        Phase of every bucket divided by the width.

        The division is a long-standing convention of this API and is kept
        so phase plots line up with earlier output.
        """
        return np.angle(self._buckets) / self.width

    def amplitudes_real(self) -> np.ndarray:
        """Amplitudes from DC through Nyquist inclusive."""
        return self.amplitudes()[:self.width // 2 + 1]

    def phases_real(self) -> np.ndarray:
        """Phases from DC through Nyquist inclusive."""
        return self.phases()[:self.width // 2 + 1]

    def main_frequency(self) -> Optional[Tuple[int, float]]:
        """
        Bucket and amplitude of the loudest component in the real half.

        Ties go to the later bucket. NaN amplitudes lose to every number;
        comparing two NaNs raises AmplitudeComparisonError.
        """
        amplitudes = self.amplitudes_real()
        if len(amplitudes) == 0:
            return None

        best_bucket, best_amplitude = 0, float(amplitudes[0])
        for bucket in range(1, len(amplitudes)):
            amplitude = float(amplitudes[bucket])
            if _compare_amplitudes(best_amplitude, amplitude) <= 0:
                best_bucket, best_amplitude = bucket, amplitude

        if math.isnan(best_amplitude):
            logger.warning("Main frequency of a width-%d spectrum is NaN", self.width)
        return best_bucket, best_amplitude

    def frequency_resolution(self) -> float:
        """Hertz covered by one bucket."""
        return (1.0 / self.width) * self._sample_rate

    def frequency_from_bucket(self, bucket: int) -> float:
        """Frequency of *bucket* in Hz; mirror buckets map to negative frequencies."""
        if bucket > self.width // 2:
            return -((self.width - bucket) * self.frequency_resolution())
        return bucket * self.frequency_resolution()

    def bucket_from_freq(self, freq: float) -> int:
        """
        Nearest bucket for *freq* Hz, rounding halves away from zero.

        The result is not clamped to ``[0, width)``; callers validate it.
        """
        position = freq * self.width / self._sample_rate
        if not math.isfinite(position):
            raise PreconditionError(f"Frequency must be finite, got {freq}")
        return int(math.copysign(math.floor(abs(position) + 0.5), position))

    def shift(self, shift: int) -> 'Spectrum':
        """
        Move every component *shift* buckets away from DC on both halves.

        Builds ``shift`` zeros, the low positive buckets ``[0, N/2 - shift)``,
        the mirror buckets ``[N/2 + shift, N)`` and ``shift`` trailing zeros,
        which keeps the result conjugate-symmetric. A shift of half the
        width or more leaves nothing and returns an all-zero spectrum.
        """
        try:
            shift = operator.index(shift)
        except TypeError:
            raise PreconditionError(f"Shift must be a whole number of buckets, got {shift!r}") from None
        if shift < 0:
            raise PreconditionError(f"Shift must not be negative, got {shift}")

        if shift >= self.width / 2:
            logger.debug("Shift of %d buckets clears a width-%d spectrum", shift, self.width)
            return Spectrum(np.zeros(self.width, dtype=np.complex128), self._sample_rate)

        half = self.width // 2
        zeros = np.zeros(shift, dtype=np.complex128)
        buckets = np.concatenate([
            zeros,
            self._buckets[:half - shift],
            self._buckets[half + shift:],
            zeros,
        ])
        return Spectrum(buckets, self._sample_rate)

    def to_waveform(self) -> Waveform:
        """
        Reconstruct ``width`` time-domain samples at the source sample rate.

        Callers that analyzed a shorter window slice the result themselves.
        """
        return Waveform(synthesize_transform(self._buckets), self._sample_rate)

    def __len__(self) -> int:
        return self.width

    def __repr__(self) -> str:
        return f"Spectrum(width={self.width}, sample_rate={self._sample_rate})"


def analyze(waveform: Waveform, window: Union[str, Window], fft_width: int) -> Spectrum:
    """
    Window *waveform*, zero-pad it to *fft_width* and transform it.

    Parameters
    ----------
    waveform : Waveform
        Samples to analyze, at most fft_width of them
    window : Window or str
        Window function, scaled over the waveform's own length
    fft_width : int
        Power-of-two transform length

    Returns
    -------
    Spectrum
        fft_width buckets carrying the waveform's sample rate

    Examples
    --------
    >>> tone = Waveform.sine_wave(440.0, 2048 / 44100)
    >>> spectrum = analyze(tone, Window.HANN, 2048)
    >>> spectrum.bucket_from_freq(440.0)
    20
    """
    window = Window.parse(window)
    n_samples = len(waveform)

    if not is_power_of_two(fft_width):
        raise PreconditionError(f"FFT width must be a power of two, got {fft_width}")
    if n_samples > fft_width:
        raise PreconditionError(
            f"{n_samples} is too many samples for an FFT of width {fft_width}"
        )
    if n_samples == 0:
        raise PreconditionError("Cannot analyze an empty waveform")

    logger.debug(
        "Analyzing %d samples at %d Hz: window=%s, fft_width=%d",
        n_samples, waveform.sample_rate, window, fft_width
    )

    windowed = waveform.samples() * get_window(window, n_samples)
    return Spectrum(analyze_transform(windowed, fft_width), waveform.sample_rate)
