"""
fftfun - spectral analysis, bucket shifting and resynthesis of audio windows.
"""

from .errors import SpectrumError, PreconditionError, AmplitudeComparisonError
from .utils.audio import Waveform, load_waveform, save_waveform
from .dsp_core import Window, ALL_WINDOWS, Spectrum, analyze

__all__ = [
    'SpectrumError',
    'PreconditionError',
    'AmplitudeComparisonError',
    'Waveform',
    'load_waveform',
    'save_waveform',
    'Window',
    'ALL_WINDOWS',
    'Spectrum',
    'analyze',
]

__version__ = '1.0.0'
