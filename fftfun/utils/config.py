"""
Configuration for shift runs, loaded from YAML.

Every section has defaults, so an empty file (or no file) gives the same
setup as the interactive viewer starts with: a 220 Hz test tone, Hann
window, 2048-point FFT over a 2048-sample window, no shift.
"""

from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import PreconditionError
from .audio import CD_SAMPLE_RATE
from .logging import parse_level


@dataclass
class AnalysisConfig:
    window: str = 'hann'
    fft_width: int = 2048
    window_width: int = 2048


@dataclass
class ShiftConfig:
    shift_hz: float = 0.0
    cursor: int = 0
    whole_signal: bool = False


@dataclass
class InputConfig:
    """Either an audio file (``path``) or a generated sine tone."""
    path: Optional[str] = None
    sample_rate: Optional[int] = None      # resample the file; None keeps its rate
    sine_frequency: float = 220.0
    sine_duration: float = 0.5
    sine_sample_rate: int = CD_SAMPLE_RATE


@dataclass
class OutputConfig:
    results_dir: str = 'results'
    normalize: Optional[str] = 'peak'      # 'peak', 'rms' or None
    plot: bool = False
    phase: bool = False                    # add a phase panel to spectrum.png
    decibels: bool = False


@dataclass
class LoggingConfig:
    level: str = 'INFO'
    log_dir: str = 'logs'


@dataclass
class RunConfig:
    """Complete configuration of a shift run."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    shift: ShiftConfig = field(default_factory=ShiftConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_settings(self):
        """Validated pipeline settings for this configuration."""
        from ..pipeline import ShiftSettings

        return ShiftSettings(
            window=self.analysis.window,
            fft_width=self.analysis.fft_width,
            window_width=self.analysis.window_width,
            shift_hz=self.shift.shift_hz,
            cursor=self.shift.cursor,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_SECTIONS = {
    'analysis': AnalysisConfig,
    'shift': ShiftConfig,
    'input': InputConfig,
    'output': OutputConfig,
    'logging': LoggingConfig,
}


def config_from_dict(data: Optional[Dict[str, Any]]) -> RunConfig:
    """
    Build a RunConfig from nested dictionaries.

    Unknown sections or keys raise PreconditionError so typos do not
    silently fall back to defaults. The resulting settings and the logging
    level are validated.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise PreconditionError(f"Configuration must be a mapping, got {type(data).__name__}")

    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise PreconditionError(f"Unknown configuration sections: {sorted(unknown)}")

    sections = {}
    for name, section_cls in _SECTIONS.items():
        values = data.get(name) or {}
        if not isinstance(values, dict):
            raise PreconditionError(f"Section '{name}' must be a mapping")

        allowed = {f.name for f in fields(section_cls)}
        bad_keys = set(values) - allowed
        if bad_keys:
            raise PreconditionError(f"Unknown keys in section '{name}': {sorted(bad_keys)}")
        sections[name] = section_cls(**values)

    config = RunConfig(**sections)
    config.to_settings()
    parse_level(config.logging.level)
    return config


def load_config(config_path: Union[str, Path]) -> RunConfig:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return config_from_dict(yaml.safe_load(f))


def save_config(config: RunConfig, path: Union[str, Path]):
    """Save configuration to YAML file."""
    with open(path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)
