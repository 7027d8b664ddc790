#!/usr/bin/env python3
"""
Spectrum Shift Script

Analyzes a window of an audio file (or a generated sine tone), shifts its
frequency buckets by a number of hertz and writes the reconstructed audio.

Usage:
    python scripts/shift_spectrum.py --sine 440 --shift-hz 200
    python scripts/shift_spectrum.py --input voice.wav --shift-hz 150 --whole
    python scripts/shift_spectrum.py --config configs/default.yaml --plot
"""

import sys
import json
import argparse
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from fftfun.errors import SpectrumError
from fftfun.dsp_core import ALL_WINDOWS
from fftfun.pipeline import shift_window, shift_waveform
from fftfun.utils.audio import Waveform, load_waveform, save_waveform
from fftfun.utils.config import RunConfig, load_config
from fftfun.utils.logging import RunLogger, parse_level

console = Console()


def apply_overrides(config: RunConfig, args: argparse.Namespace) -> RunConfig:
    """Fold command-line overrides into the loaded configuration."""
    if args.input is not None:
        config.input.path = args.input
    if args.sine is not None:
        config.input.path = None
        config.input.sine_frequency = args.sine
    if args.window is not None:
        config.analysis.window = args.window
    if args.fft_width is not None:
        config.analysis.fft_width = args.fft_width
    if args.window_width is not None:
        config.analysis.window_width = args.window_width
    if args.shift_hz is not None:
        config.shift.shift_hz = args.shift_hz
    if args.cursor is not None:
        config.shift.cursor = args.cursor
    if args.whole:
        config.shift.whole_signal = True
    if args.plot:
        config.output.plot = True
    if args.phase:
        config.output.phase = True
    if args.decibels:
        config.output.decibels = True
    return config


def load_input(config: RunConfig) -> Waveform:
    if config.input.path:
        return load_waveform(config.input.path, sr=config.input.sample_rate)
    return Waveform.sine_wave(
        config.input.sine_frequency,
        config.input.sine_duration,
        config.input.sine_sample_rate,
    )


def print_summary(summary: Dict):
    table = Table(title="Spectrum Shift", box=box.ROUNDED)
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", justify="right")

    for key, value in summary.items():
        if isinstance(value, float):
            table.add_row(key, f"{value:.3f}")
        else:
            table.add_row(key, str(value))

    console.print(table)


def run(config: RunConfig, output_dir: Path, logger: RunLogger) -> Dict:
    """Run one shift and write its artifacts to *output_dir*."""
    settings = config.to_settings()
    waveform = load_input(config)

    console.print(f"[green]✓[/green] Loaded {waveform!r}")
    logger.info(f"Input: {waveform!r}")

    result = shift_window(waveform, settings)
    spectrum = result.spectrum
    main = spectrum.main_frequency()

    summary = {
        'samples': len(waveform),
        'sample_rate': waveform.sample_rate,
        'window': str(settings.window),
        'fft_width': settings.fft_width,
        'window_width': settings.window_width,
        'cursor': result.cursor,
        'resolution_hz': spectrum.frequency_resolution(),
        'main_bucket': main[0],
        'main_frequency_hz': spectrum.frequency_from_bucket(main[0]),
        'main_amplitude': main[1],
        'shift_hz': settings.shift_hz,
        'shift_buckets': result.shift_buckets,
    }

    if config.shift.whole_signal:
        output = shift_waveform(waveform, settings)
    else:
        output = result.reconstructed

    if config.output.normalize:
        output = output.normalize(config.output.normalize)

    wav_path = save_waveform(output_dir / 'shifted.wav', output)
    summary['output_samples'] = len(output)
    console.print(f"[green]✓[/green] Audio saved to {wav_path}")

    if config.output.plot:
        from fftfun.utils.plot import plot_spectrum, plot_waveforms

        window_waveform = waveform.slice(result.cursor, result.cursor + settings.window_width)
        plot_spectrum(
            spectrum, str(output_dir / 'spectrum.png'), shifted=result.shifted,
            phase=config.output.phase, decibels=config.output.decibels
        )
        plot_waveforms(window_waveform, result.reconstructed, str(output_dir / 'waveform.png'))
        console.print(f"[green]✓[/green] Plots saved to {output_dir}")

    with open(output_dir / 'summary.json', 'w') as f:
        json.dump(summary, f, indent=2)

    print_summary(summary)
    logger.log_results(summary)
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shift the spectrum of an audio window")
    parser.add_argument('--config', type=str, default=None, help='Path to YAML configuration file')
    parser.add_argument('--output', type=str, default=None, help='Output directory for results')

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--input', type=str, default=None, help='Audio file to analyze')
    source.add_argument('--sine', type=float, default=None, help='Analyze a generated sine tone of this frequency (Hz)')

    parser.add_argument('--window', type=str, default=None,
                        choices=[w.value for w in ALL_WINDOWS], help='Window function')
    parser.add_argument('--fft-width', type=int, default=None, help='FFT width (power of two)')
    parser.add_argument('--window-width', type=int, default=None, help='Samples per analysis window')
    parser.add_argument('--shift-hz', type=float, default=None, help='Frequency shift in Hz')
    parser.add_argument('--cursor', type=int, default=None, help='First sample of the analyzed window')
    parser.add_argument('--whole', action='store_true', help='Shift the whole signal window by window')
    parser.add_argument('--plot', action='store_true', help='Save spectrum and waveform plots')
    parser.add_argument('--phase', action='store_true', help='Add bucket phases to the spectrum plot')
    parser.add_argument('--decibels', action='store_true', help='Plot amplitudes in decibels')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else RunConfig()
        config = apply_overrides(config, args)
        config.to_settings()
        parse_level(config.logging.level)
    except SpectrumError as e:
        console.print(f"[bold red]Configuration error: {e}[/bold red]")
        return 2

    if args.output:
        output_dir = Path(args.output)
    else:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        output_dir = PROJECT_ROOT / config.output.results_dir / timestamp
    output_dir.mkdir(parents=True, exist_ok=True)

    logger = RunLogger(
        'shift_spectrum',
        log_dir=str(output_dir / config.logging.log_dir),
        level=config.logging.level,
    )
    logger.log_config(config.to_dict())

    console.print(Panel.fit(
        "[bold blue]Spectrum Shift[/bold blue]\n"
        f"Window: {config.analysis.window} | FFT width: {config.analysis.fft_width} | "
        f"Shift: {config.shift.shift_hz} Hz",
        border_style="blue"
    ))

    try:
        run(config, output_dir, logger)
    except (SpectrumError, OSError) as e:
        logger.exception("Shift failed")
        console.print(f"[bold red]Error: {e}[/bold red]")
        return 1
    except Exception:
        logger.exception("Shift failed")
        raise
    finally:
        logger.close()

    console.print(Panel.fit(
        "[bold green]Shift completed successfully![/bold green]\n"
        f"Results saved to: {output_dir}",
        border_style="green"
    ))
    return 0


if __name__ == '__main__':
    sys.exit(main())
