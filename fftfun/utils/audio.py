"""
Time-domain signal container and audio file I/O.

A Waveform is a read-only window of mono samples plus the sample rate they
were recorded at. Slicing returns another Waveform over the same samples,
so walking a cursor through a long recording never copies it.
"""

import operator
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..errors import PreconditionError


CD_SAMPLE_RATE = 44100


class Waveform:
    """
    Mono samples at a fixed sample rate.

    Args:
        samples: Sample values, any 1-D array-like
        sample_rate: Samples per second, a positive integer
    """

    CD_SAMPLE_RATE = CD_SAMPLE_RATE

    def __init__(self, samples, sample_rate: int):
        try:
            sample_rate = operator.index(sample_rate)
        except TypeError:
            raise PreconditionError(f"Sample rate must be an integer, got {sample_rate!r}") from None
        if sample_rate <= 0:
            raise PreconditionError(f"Sample rate must be positive, got {sample_rate}")

        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise PreconditionError(f"Waveform must be 1D, got shape {samples.shape}")
        if samples.flags.writeable:
            samples = samples.view()
            samples.flags.writeable = False

        self._samples = samples
        self._sample_rate = sample_rate

    @classmethod
    def sine_wave(
        cls,
        frequency: float,
        duration: float,
        sample_rate: int = CD_SAMPLE_RATE,
        amplitude: float = 1.0
    ) -> 'Waveform':
        """Generate a pure tone of *frequency* Hz lasting *duration* seconds."""
        n_samples = int(round(duration * sample_rate))
        t = np.arange(n_samples) / sample_rate
        return cls(amplitude * np.sin(2 * np.pi * frequency * t), sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self._samples) / self._sample_rate

    def sample_count(self) -> int:
        return len(self._samples)

    def samples(self) -> np.ndarray:
        """Read-only array of the sample values."""
        return self._samples

    def slice(self, start: Optional[int] = None, stop: Optional[int] = None) -> 'Waveform':
        """Sub-window ``[start, stop)``, clipped to the available samples."""
        return Waveform(self._samples[start:stop], self._sample_rate)

    def spectrum(self, window, fft_width: int):
        """Analyze this waveform; see :func:`fftfun.dsp_core.spectrum.analyze`."""
        from ..dsp_core.spectrum import analyze
        return analyze(self, window, fft_width)

    def normalize(self, method: str = 'peak') -> 'Waveform':
        """
        Return a normalized copy.

        Args:
            method: 'peak' scales the largest magnitude to 1, 'rms' scales
                the RMS level to 1. Silence is returned unchanged.
        """
        samples = self._samples
        if method == 'peak':
            scale = np.abs(samples).max() if len(samples) else 0.0
        elif method == 'rms':
            scale = np.sqrt(np.mean(samples ** 2)) if len(samples) else 0.0
        else:
            raise PreconditionError(f"Unknown normalization method: {method!r}")

        if scale > 0:
            samples = samples / scale
        return Waveform(samples, self._sample_rate)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __getitem__(self, item):
        if isinstance(item, slice):
            if item.step not in (None, 1):
                raise PreconditionError("Waveform slices must be contiguous")
            return self.slice(item.start, item.stop)
        return float(self._samples[item])

    def __repr__(self) -> str:
        return (
            f"Waveform(samples={len(self)}, sample_rate={self._sample_rate}, "
            f"duration={self.duration:.3f}s)"
        )


def load_waveform(path: Union[str, Path], sr: Optional[int] = None) -> Waveform:
    """
    Load an audio file as a mono Waveform.

    Args:
        path: Any format librosa can read
        sr: Target sample rate; None keeps the file's native rate
    """
    import librosa

    if not Path(path).is_file():
        raise FileNotFoundError(f"Audio file not found: {path}")
    y, sample_rate = librosa.load(str(path), sr=sr, mono=True)
    return Waveform(y, int(sample_rate))


def save_waveform(path: Union[str, Path], waveform: Waveform, subtype: str = 'PCM_16') -> Path:
    """Write *waveform* to a WAV file, clipping samples to [-1, 1]."""
    import soundfile as sf

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(path), np.clip(waveform.samples(), -1.0, 1.0), waveform.sample_rate, subtype=subtype)
    return path
