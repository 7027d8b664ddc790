"""
DSP Core Module - Hand-written FFT, window functions and spectrum analysis

This module turns a window of time-domain samples into frequency buckets,
shifts those buckets, and rebuilds a time-domain signal from them.

Modules:
    - window: Rectangular, Bartlett, Hann and Hamming window functions
    - fft: In-place radix-2 FFT (Cooley-Tukey, Numba JIT), used both ways
    - spectrum: Spectrum values, frequency/bucket conversion, shift, synthesis
"""

from .window import Window, ALL_WINDOWS, get_window
from .fft import transform_in_place, analyze_transform, synthesize_transform, is_power_of_two
from .spectrum import Spectrum, analyze

__all__ = [
    # Window functions
    'Window',
    'ALL_WINDOWS',
    'get_window',
    # FFT functions
    'transform_in_place',
    'analyze_transform',
    'synthesize_transform',
    'is_power_of_two',
    # Spectrum
    'Spectrum',
    'analyze',
]
