import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

# Amplitude floor for the decibel scale, so empty buckets stay finite
MIN_AMPLITUDE = 1e-10


def to_decibels(amplitudes):
    """20 * log10 of amplitudes, floored at MIN_AMPLITUDE."""
    return 20 * np.log10(np.maximum(amplitudes, MIN_AMPLITUDE))


def plot_spectrum(spectrum, save_path, shifted=None, full_spectrum=False, phase=False, decibels=False):
    """
    Plot bucket amplitudes against frequency, optionally overlaying a shifted copy.

    With ``phase`` a second panel shows the (width-scaled) bucket phases;
    with ``decibels`` amplitudes are drawn as 20*log10.
    """
    if full_spectrum:
        buckets = np.arange(spectrum.width)
    else:
        buckets = np.arange(spectrum.width // 2 + 1)
    freqs = np.array([spectrum.frequency_from_bucket(b) for b in buckets])
    order = np.argsort(freqs)

    def amplitudes(s):
        values = s.amplitudes()[buckets][order]
        return to_decibels(values) if decibels else values

    if phase:
        fig, (amp_ax, phase_ax) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    else:
        fig, amp_ax = plt.subplots(figsize=(10, 6))

    amp_ax.plot(freqs[order], amplitudes(spectrum), label='Original')
    if shifted is not None:
        amp_ax.plot(freqs[order], amplitudes(shifted), label='Shifted', alpha=0.8)
    amp_ax.set_title(f'Spectrum (width {spectrum.width}, {spectrum.frequency_resolution():.2f} Hz/bucket)')
    amp_ax.set_ylabel('Amplitude (dB)' if decibels else 'Amplitude')
    amp_ax.legend()
    amp_ax.grid(True)

    if phase:
        phase_ax.plot(freqs[order], spectrum.phases()[buckets][order], label='Original')
        if shifted is not None:
            phase_ax.plot(freqs[order], shifted.phases()[buckets][order], label='Shifted', alpha=0.8)
        phase_ax.set_ylabel('Phase / width (rad)')
        phase_ax.legend()
        phase_ax.grid(True)
        phase_ax.set_xlabel('Frequency (Hz)')
    else:
        amp_ax.set_xlabel('Frequency (Hz)')

    os.makedirs(os.path.dirname(os.path.abspath(save_path)), exist_ok=True)
    fig.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path


def plot_waveforms(original, reconstructed, save_path):
    """Plot the analyzed window and its reconstruction on one time axis."""
    plt.figure(figsize=(10, 6))
    t = np.arange(len(original)) / original.sample_rate
    plt.plot(t, original.samples(), label='Original')
    t = np.arange(len(reconstructed)) / reconstructed.sample_rate
    plt.plot(t, reconstructed.samples(), label='Reconstructed', alpha=0.8)
    plt.title('Waveform')
    plt.xlabel('Time (s)')
    plt.ylabel('Amplitude')
    plt.legend()
    plt.grid(True)
    os.makedirs(os.path.dirname(os.path.abspath(save_path)), exist_ok=True)
    plt.savefig(save_path, dpi=150)
    plt.close()
    return save_path
