"""
Utility modules.
"""

from .audio import Waveform, CD_SAMPLE_RATE, load_waveform, save_waveform
from .logging import RunLogger, parse_level

__all__ = [
    'Waveform',
    'CD_SAMPLE_RATE',
    'load_waveform',
    'save_waveform',
    'RunLogger',
    'parse_level',
]
