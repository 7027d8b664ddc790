"""
Per-run log files for the shift runner.

Library modules log through ``logging.getLogger(__name__)``, all under the
``fftfun`` namespace. A RunLogger routes that namespace to a timestamped
file for the duration of one run; the console only gets warnings because
rich draws the main display.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import PreconditionError

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def parse_level(level: Union[str, int]) -> int:
    """Numeric logging level for a name such as 'info' or 'DEBUG'."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise PreconditionError(f"Unknown logging level: {level!r}")
    return value


class RunLogger:
    """
    Attach a console and a file handler to the ``fftfun`` logger.

    Args:
        run_name: Prefix of the log file name
        log_dir: Directory for the log file, created if missing
        level: Level name or number for the package logger and the file
        console_level: Level for the stdout handler
    """

    def __init__(
        self,
        run_name: str,
        log_dir: Union[str, Path] = 'logs',
        level: Union[str, int] = logging.INFO,
        console_level: Union[str, int] = logging.WARNING
    ):
        level = parse_level(level)
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        self.log_file = log_dir / f'{run_name}_{timestamp}.log'

        self.logger = logging.getLogger('fftfun')
        self.logger.setLevel(level)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(parse_level(console_level))
        to_file = logging.FileHandler(self.log_file, mode='a', encoding='utf-8')
        to_file.setLevel(level)

        self._handlers = [console, to_file]
        for handler in self._handlers:
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def info(self, msg: str):
        self.logger.info(msg)

    def exception(self, msg: str):
        self.logger.exception(msg)

    def log_config(self, config: Dict[str, Any]):
        self._log_section("RUN CONFIGURATION", config)

    def log_results(self, results: Dict[str, Any], title: str = "RESULTS"):
        self._log_section(title, results)

    def _log_section(self, title: str, values: Dict[str, Any]):
        rule = "=" * 60
        self.logger.info(rule)
        self.logger.info(title)
        self.logger.info(rule)
        for line in _format_lines(values, indent=2):
            self.logger.info(line)
        self.logger.info(rule)

    def close(self):
        """Detach and close the handlers this run added."""
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self._handlers = []


def _format_lines(values: Dict[str, Any], indent: int):
    prefix = " " * indent
    for key, value in values.items():
        if isinstance(value, dict):
            yield f"{prefix}{key}:"
            yield from _format_lines(value, indent + 2)
        elif isinstance(value, float):
            yield f"{prefix}{key}: {value:.4f}"
        else:
            yield f"{prefix}{key}: {value}"
