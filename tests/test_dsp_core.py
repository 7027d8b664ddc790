"""
Unit Tests for the DSP Core Module

This test suite validates the hand-written in-place FFT, the window
functions and the Spectrum type, comparing against scipy where a
reference exists.

Test Coverage:
    - FFT: correctness, preconditions, analysis and synthesis wrappers
    - Window: formulas, ranges, enumeration
    - Spectrum: construction, conversions, shift, reconstruction

Run:
    pytest tests/test_dsp_core.py -v
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from scipy.fft import fft as scipy_fft
from scipy.signal import windows as scipy_windows

from fftfun.errors import AmplitudeComparisonError, PreconditionError
from fftfun.dsp_core import (
    ALL_WINDOWS,
    Spectrum,
    Window,
    analyze,
    analyze_transform,
    get_window,
    is_power_of_two,
    synthesize_transform,
    transform_in_place,
)
from fftfun.utils.audio import Waveform


class TestFFT:
    """Test suite for the in-place FFT."""

    def test_fft_random_signal(self):
        """Test FFT on random signal."""
        x = np.random.randn(1024)
        X_ours = x.astype(np.complex128)
        transform_in_place(X_ours)
        error = np.abs(X_ours - scipy_fft(x))

        print(f"\n[FFT Random Signal]")
        print(f"  Max error: {error.max():.2e}")

        assert error.max() < 1e-9, f"FFT error too large: {error.max()}"

    def test_fft_power_of_2(self):
        """Test FFT on power-of-2 lengths, including the trivial ones."""
        for N in [1, 2, 4, 8, 64, 256, 1024, 4096]:
            x = np.random.randn(N) + 1j * np.random.randn(N)
            X_ours = x.copy()
            transform_in_place(X_ours)
            error = np.abs(X_ours - scipy_fft(x))
            assert error.max() < 1e-9, f"FFT failed for N={N}"

    def test_fft_all_zeros(self):
        """An all-zero buffer transforms to all zeros."""
        for N in [1, 2, 16, 512, 2048]:
            x = np.zeros(N, dtype=np.complex128)
            transform_in_place(x)
            assert np.all(x == 0)

    def test_fft_impulse(self):
        """An impulse has a flat, unnormalized spectrum."""
        x = np.zeros(16, dtype=np.complex128)
        x[0] = 1.0
        transform_in_place(x)
        np.testing.assert_allclose(x, np.ones(16), atol=1e-12)

    def test_fft_sine_wave(self):
        """Test FFT on known sine wave."""
        N = 1024
        bucket = 10
        n = np.arange(N)
        x = np.sin(2 * np.pi * bucket * n / N).astype(np.complex128)
        transform_in_place(x)

        amplitudes = np.abs(x)
        assert np.argmax(amplitudes[:N // 2 + 1]) == bucket
        assert amplitudes[bucket] == pytest.approx(N / 2, rel=1e-9)

    @pytest.mark.parametrize("N", [0, 3, 6, 100, 1000])
    def test_fft_non_power_of_2_rejected(self, N):
        x = np.arange(N, dtype=np.complex128)
        before = x.copy()
        with pytest.raises(PreconditionError):
            transform_in_place(x)
        np.testing.assert_array_equal(x, before)

    def test_fft_rejects_bad_buffers(self):
        with pytest.raises(PreconditionError):
            transform_in_place(np.zeros(8, dtype=np.float64))
        with pytest.raises(PreconditionError):
            transform_in_place(np.zeros((4, 4), dtype=np.complex128))
        with pytest.raises(PreconditionError):
            transform_in_place([0j] * 8)

        read_only = np.zeros(8, dtype=np.complex128)
        read_only.flags.writeable = False
        with pytest.raises(PreconditionError):
            transform_in_place(read_only)

    def test_is_power_of_two(self):
        assert [n for n in range(-2, 70) if is_power_of_two(n)] == [1, 2, 4, 8, 16, 32, 64]

    def test_analyze_transform_zero_pads(self):
        """Analysis transform matches scipy with n= padding."""
        x = np.random.randn(300)
        X_ours = analyze_transform(x, 512)
        error = np.abs(X_ours - scipy_fft(x, n=512))

        assert X_ours.shape == (512,)
        assert X_ours.dtype == np.complex128
        assert error.max() < 1e-9

    def test_analyze_transform_preconditions(self):
        with pytest.raises(PreconditionError):
            analyze_transform(np.zeros(10), 12)
        with pytest.raises(PreconditionError):
            analyze_transform(np.zeros(20), 16)
        with pytest.raises(PreconditionError):
            analyze_transform(np.zeros((2, 8)), 16)

    def test_synthesize_transform_inverts(self):
        """Swap-transform-swap reproduces the original real signal."""
        x = np.random.randn(2048)
        X = scipy_fft(x)
        before = X.copy()

        y = synthesize_transform(X)
        error = np.abs(y - x)

        print(f"\n[Synthesis Transform]")
        print(f"  Max error: {error.max():.2e}")

        assert y.dtype == np.float64
        assert error.max() < 1e-10
        np.testing.assert_array_equal(X, before)

    def test_synthesize_transform_matches_real_ifft(self):
        """For a non-symmetric spectrum the result is the real part of the inverse."""
        X = np.random.randn(64) + 1j * np.random.randn(64)
        y = synthesize_transform(X)
        np.testing.assert_allclose(y, np.fft.ifft(X).real, atol=1e-12)


class TestWindow:
    """Test suite for window functions."""

    def test_enumeration(self):
        assert len(ALL_WINDOWS) == 4
        assert set(ALL_WINDOWS) == {Window.RECTANGULAR, Window.BARTLETT, Window.HANN, Window.HAMMING}
        assert list(Window) == list(ALL_WINDOWS)

    def test_all_on_enum(self):
        assert Window.ALL == ALL_WINDOWS
        assert Window.ALL[0] is Window.BARTLETT
        # Not a member, so iteration still yields the four kinds
        assert Window.ALL not in list(Window)

    def test_display_names(self):
        assert [str(w) for w in ALL_WINDOWS] == ['Bartlett', 'Hamming', 'Hann', 'Rectangular']

    def test_parse(self):
        assert Window.parse('hann') is Window.HANN
        assert Window.parse('Hamming') is Window.HAMMING
        assert Window.parse('triangular') is Window.BARTLETT
        assert Window.parse(Window.RECTANGULAR) is Window.RECTANGULAR
        with pytest.raises(PreconditionError):
            Window.parse('blackman')

    @pytest.mark.parametrize("width", [1, 7, 64, 2048])
    def test_rectangular_all_ones(self, width):
        w = get_window(Window.RECTANGULAR, width)
        assert w.shape == (width,)
        assert np.all(w == 1.0)

    @pytest.mark.parametrize("window", [Window.HANN, Window.HAMMING])
    @pytest.mark.parametrize("width", [1, 2, 5, 256, 1000])
    def test_hann_hamming_in_unit_range(self, window, width):
        w = get_window(window, width)
        assert w.min() >= 0.0
        assert w.max() <= 1.0 + 1e-12

    @pytest.mark.parametrize("width", [2, 8, 64, 2048])
    def test_bartlett_endpoints(self, width):
        w = get_window(Window.BARTLETT, width)
        assert w[0] == 0.0
        assert w[width // 2] == 1.0

    def test_matches_scipy_periodic_windows(self):
        """Periodic (DFT-even) forms agree with scipy.signal.windows."""
        for width in [16, 100, 1024]:
            np.testing.assert_allclose(
                get_window('hann', width), scipy_windows.hann(width, sym=False), atol=1e-12
            )
            np.testing.assert_allclose(
                get_window('bartlett', width), scipy_windows.bartlett(width, sym=False), atol=1e-12
            )
            np.testing.assert_allclose(
                get_window('hamming', width),
                scipy_windows.general_hamming(width, 25.0 / 46.0, sym=False),
                atol=1e-12
            )

    def test_values_is_restartable(self):
        w = Window.HANN.values(32)
        assert list(w) == list(w)
        np.testing.assert_array_equal(w, get_window(Window.HANN, 32))

    @pytest.mark.parametrize("window", list(ALL_WINDOWS))
    def test_zero_width_rejected(self, window):
        with pytest.raises(PreconditionError):
            get_window(window, 0)
        with pytest.raises(PreconditionError):
            get_window(window, -4)


def _tone(freq, n_samples, sample_rate):
    t = np.arange(n_samples) / sample_rate
    return Waveform(np.sin(2 * np.pi * freq * t), sample_rate)


class TestSpectrum:
    """Test suite for Spectrum analysis, conversions and shifting."""

    def test_analyze_matches_scipy(self):
        """Windowed, zero-padded analysis matches scipy for every window."""
        samples = np.random.randn(700)
        waveform = Waveform(samples, 8000)

        for window in ALL_WINDOWS:
            spectrum = analyze(waveform, window, 1024)
            expected = scipy_fft(samples * get_window(window, 700), n=1024)
            error = np.abs(spectrum.buckets - expected)
            assert error.max() < 1e-9, f"analysis failed for {window}"

    def test_construction(self):
        spectrum = analyze(Waveform(np.random.randn(100), 16000), Window.HANN, 128)

        assert spectrum.width == 128
        assert len(spectrum) == 128
        assert spectrum.buckets.shape == (128,)
        assert spectrum.sample_rate == 16000
        assert repr(spectrum) == "Spectrum(width=128, sample_rate=16000)"

    def test_buckets_read_only(self):
        spectrum = analyze(Waveform(np.random.randn(64), 8000), 'hann', 64)
        with pytest.raises(ValueError):
            spectrum.buckets[0] = 1.0

    def test_waveform_spectrum_shortcut(self):
        waveform = Waveform(np.random.randn(64), 8000)
        np.testing.assert_array_equal(
            waveform.spectrum(Window.HAMMING, 128).buckets,
            analyze(waveform, Window.HAMMING, 128).buckets,
        )

    def test_analyze_preconditions(self):
        waveform = Waveform(np.random.randn(100), 8000)
        with pytest.raises(PreconditionError):
            analyze(waveform, Window.HANN, 96)
        with pytest.raises(PreconditionError):
            analyze(waveform, Window.HANN, 64)
        with pytest.raises(PreconditionError):
            analyze(Waveform([], 8000), Window.HANN, 64)

    def test_direct_construction_preconditions(self):
        with pytest.raises(PreconditionError):
            Spectrum(np.zeros(6), 8000)
        with pytest.raises(PreconditionError):
            Spectrum(np.zeros(8), 0)

    @pytest.mark.parametrize("window", list(ALL_WINDOWS))
    def test_conjugate_symmetry(self, window):
        width = 512
        spectrum = analyze(Waveform(np.random.randn(400), 8000), window, width)
        b = spectrum.buckets
        for k in range(1, width // 2):
            assert abs(b[k] - np.conj(b[width - k])) < 1e-9

    def test_round_trip(self):
        """Rectangular analysis then reconstruction gives back the padded window."""
        samples = np.random.randn(1500)
        spectrum = analyze(Waveform(samples, 44100), Window.RECTANGULAR, 2048)
        reconstructed = spectrum.to_waveform()

        padded = np.zeros(2048)
        padded[:1500] = samples
        error = np.abs(reconstructed.samples() - padded)

        print(f"\n[Round Trip]")
        print(f"  Max error: {error.max():.2e}")

        assert len(reconstructed) == 2048
        assert reconstructed.sample_rate == 44100
        assert error.max() < 1e-10

    def test_amplitudes_and_phases(self):
        spectrum = analyze(Waveform(np.random.randn(32), 8000), Window.HANN, 32)
        b = spectrum.buckets

        np.testing.assert_allclose(spectrum.amplitudes(), np.sqrt(b.real ** 2 + b.imag ** 2))
        np.testing.assert_allclose(spectrum.phases(), np.arctan2(b.imag, b.real) / 32)
        assert len(spectrum.amplitudes_real()) == 17
        assert len(spectrum.phases_real()) == 17
        np.testing.assert_array_equal(spectrum.amplitudes_real(), spectrum.amplitudes()[:17])
        np.testing.assert_array_equal(spectrum.phases_real(), spectrum.phases()[:17])

    def test_concrete_440hz_scenario(self):
        """2048-sample Hann window of a 440 Hz tone at 44.1 kHz."""
        spectrum = analyze(_tone(440.0, 2048, 44100), Window.HANN, 2048)

        assert spectrum.frequency_resolution() == pytest.approx(44100 / 2048)
        assert spectrum.frequency_resolution() == pytest.approx(21.53, abs=0.01)
        assert spectrum.bucket_from_freq(440.0) == 20

        bucket, amplitude = spectrum.main_frequency()
        print(f"\n[440 Hz] main bucket {bucket}, amplitude {amplitude:.2f}")
        assert abs(bucket - 20) <= 1
        assert amplitude > 0

    def test_frequency_bucket_round_trip(self):
        spectrum = analyze(Waveform(np.zeros(1024), 44100), Window.HANN, 1024)
        resolution = spectrum.frequency_resolution()

        for f in np.linspace(0, 44100 / 2, 500, endpoint=False):
            recovered = spectrum.frequency_from_bucket(spectrum.bucket_from_freq(f))
            assert abs(recovered - f) <= resolution

    def test_frequency_from_bucket_mirror(self):
        spectrum = Spectrum(np.zeros(2048), 44100)
        resolution = 44100 / 2048

        assert spectrum.frequency_from_bucket(0) == 0.0
        assert spectrum.frequency_from_bucket(1024) == pytest.approx(1024 * resolution)
        assert spectrum.frequency_from_bucket(1025) == pytest.approx(-1023 * resolution)
        assert spectrum.frequency_from_bucket(2047) == pytest.approx(-resolution)

    def test_bucket_from_freq_unclamped(self):
        spectrum = Spectrum(np.zeros(8), 8)

        assert spectrum.bucket_from_freq(8.0) == 8
        assert spectrum.bucket_from_freq(100.0) == 100
        assert spectrum.bucket_from_freq(-3.0) == -3
        assert spectrum.bucket_from_freq(2.5) == 3
        assert spectrum.bucket_from_freq(-2.5) == -3
        with pytest.raises(PreconditionError):
            spectrum.bucket_from_freq(float('nan'))

    def test_main_frequency_ties_pick_later_bucket(self):
        spectrum = Spectrum(np.ones(4), 8000)
        assert spectrum.main_frequency() == (2, 1.0)

    def test_main_frequency_nan_loses(self):
        nan = float('nan')
        spectrum = Spectrum([nan, 5, 1, 0, 0, 0, 0, 0], 8000)
        assert spectrum.main_frequency() == (1, 5.0)

        spectrum = Spectrum([1, nan, nan, 3, 0, 0, 0, 0], 8000)
        assert spectrum.main_frequency() == (3, 3.0)

    def test_main_frequency_two_nans(self):
        nan = float('nan')
        spectrum = Spectrum([nan, nan, 1, 1], 8000)
        with pytest.raises(AmplitudeComparisonError) as excinfo:
            spectrum.main_frequency()
        assert not isinstance(excinfo.value, PreconditionError)

    def test_shift_zero_is_identity(self):
        spectrum = analyze(Waveform(np.random.randn(256), 8000), Window.HANN, 256)
        shifted = spectrum.shift(0)

        assert shifted is not spectrum
        np.testing.assert_array_equal(shifted.buckets, spectrum.buckets)

    def test_shift_zero_width_one(self):
        spectrum = Spectrum([3.0], 8000)
        np.testing.assert_array_equal(spectrum.shift(0).buckets, [3.0])

    @pytest.mark.parametrize("shift", [128, 129, 256, 10_000])
    def test_shift_past_half_clears(self, shift):
        spectrum = analyze(Waveform(np.random.randn(256), 8000), Window.HANN, 256)
        shifted = spectrum.shift(shift)

        assert shifted.width == 256
        assert shifted.sample_rate == 8000
        assert np.all(shifted.buckets == 0)

    def test_shift_layout(self):
        buckets = np.arange(1, 9, dtype=np.complex128)
        spectrum = Spectrum(buckets, 8000)

        np.testing.assert_array_equal(spectrum.shift(1).buckets, [0, 1, 2, 3, 6, 7, 8, 0])
        np.testing.assert_array_equal(spectrum.shift(2).buckets, [0, 0, 1, 2, 7, 8, 0, 0])
        np.testing.assert_array_equal(spectrum.buckets, buckets)

    @pytest.mark.parametrize("window", list(ALL_WINDOWS))
    def test_shift_keeps_symmetry(self, window):
        width = 512
        spectrum = analyze(Waveform(np.random.randn(512), 8000), window, width)
        shift = 37
        b = spectrum.shift(shift).buckets
        for k in range(1, width // 2):
            if k == shift:
                # the old DC bucket lands here and has no mirror
                continue
            assert abs(b[k] - np.conj(b[width - k])) < 1e-9

    def test_shift_rejects_bad_amounts(self):
        spectrum = Spectrum(np.zeros(8), 8000)
        with pytest.raises(PreconditionError):
            spectrum.shift(-1)
        with pytest.raises(PreconditionError):
            spectrum.shift(1.5)

    def test_shift_moves_tone(self):
        """A tone on bucket 100 shifted by 50 buckets is a tone on bucket 150."""
        N = 1024
        spectrum = analyze(_tone(100.0, N, N), Window.RECTANGULAR, N)
        shifted = spectrum.shift(50)

        bucket, amplitude = shifted.main_frequency()
        assert bucket == 150
        assert amplitude == pytest.approx(N / 2, rel=1e-9)

        reconstructed = shifted.to_waveform()
        expected = np.sin(2 * np.pi * 150 * np.arange(N) / N)
        np.testing.assert_allclose(reconstructed.samples(), expected, atol=1e-9)
