import concurrent.futures

import numpy as np
import pytest

from bandpass_filter import (EngineClosedError, InvalidLengthError,
                             LengthMismatchError, PackedSpectrum, TransformEngine)


def test_packed_layout_matches_rfft(cpu_backend, rng):
    signal = rng.standard_normal(16)
    engine = TransformEngine(16, backend=cpu_backend, dtype=np.float64)
    spectrum = engine.forward(signal)
    reference = np.fft.rfft(signal)

    assert spectrum.half_n == 8
    # 直流分量在 real[0]，奈奎斯特分量在 imag[0]，系数为普通DFT的两倍
    assert spectrum.real[0] == pytest.approx(2 * reference[0].real)
    assert spectrum.imag[0] == pytest.approx(2 * reference[8].real)
    np.testing.assert_allclose(spectrum.real[1:], 2 * reference[1:8].real, atol=1e-10)
    np.testing.assert_allclose(spectrum.imag[1:], 2 * reference[1:8].imag, atol=1e-10)


@pytest.mark.parametrize("length", [2, 4, 64, 1024])
def test_inverse_restores_signal(cpu_backend, rng, length):
    signal = rng.standard_normal(length)
    engine = TransformEngine(length, backend=cpu_backend, dtype=np.float64)
    restored = engine.inverse(engine.forward(signal))
    np.testing.assert_allclose(restored, signal, atol=1e-10)


def test_default_dtype_is_float32(cpu_backend, rng):
    engine = TransformEngine(256, backend=cpu_backend)
    signal = rng.standard_normal(256)
    spectrum = engine.forward(signal)
    restored = engine.inverse(spectrum)

    assert spectrum.real.dtype == np.float32
    assert restored.dtype == np.float32
    np.testing.assert_allclose(restored, signal, atol=1e-4)


def test_inverse_does_not_mutate_spectrum(cpu_backend, rng):
    engine = TransformEngine(32, backend=cpu_backend)
    spectrum = engine.forward(rng.standard_normal(32))
    real, imag = spectrum.real.copy(), spectrum.imag.copy()
    engine.inverse(spectrum)
    np.testing.assert_array_equal(spectrum.real, real)
    np.testing.assert_array_equal(spectrum.imag, imag)


@pytest.mark.parametrize("length", [0, -4, 1, 3, 6, 1000, 2.5, "8"])
def test_invalid_lengths(cpu_backend, length):
    with pytest.raises(InvalidLengthError):
        TransformEngine(length, backend=cpu_backend)


def test_invalid_length_is_value_error(cpu_backend):
    with pytest.raises(ValueError):
        TransformEngine.create(0, backend=cpu_backend)


def test_from_order(cpu_backend):
    engine = TransformEngine.from_order(10, backend=cpu_backend)
    assert engine.length == 1024
    assert engine.half_n == 512
    assert engine.log2n == 10

    with pytest.raises(InvalidLengthError):
        TransformEngine.from_order(0, backend=cpu_backend)


def test_create_accepts_numpy_integers(cpu_backend):
    engine = TransformEngine.create(np.int64(128), backend=cpu_backend)
    assert engine.length == 128


@pytest.mark.parametrize("length", [8, 32, 15])
def test_forward_rejects_wrong_length(cpu_backend, length):
    engine = TransformEngine(16, backend=cpu_backend)
    with pytest.raises(LengthMismatchError):
        engine.forward(np.zeros(length))


def test_forward_rejects_2d_input(cpu_backend):
    engine = TransformEngine(16, backend=cpu_backend)
    with pytest.raises(LengthMismatchError):
        engine.forward(np.zeros((2, 16)))


def test_inverse_rejects_wrong_length(cpu_backend):
    engine = TransformEngine(16, backend=cpu_backend)
    spectrum = PackedSpectrum(np.zeros(4, dtype=np.float32), np.zeros(4, dtype=np.float32))
    with pytest.raises(LengthMismatchError):
        engine.inverse(spectrum)


def test_packed_spectrum_halves_must_match():
    with pytest.raises(LengthMismatchError):
        PackedSpectrum(np.zeros(4), np.zeros(5))
    with pytest.raises(LengthMismatchError):
        PackedSpectrum(np.zeros((2, 2)), np.zeros((2, 2)))


def test_packed_spectrum_scaled_returns_new_instance():
    spectrum = PackedSpectrum(np.ones(4), np.full(4, 2.0))
    scaled = spectrum.scaled(np.array([0.0, 1.0, 2.0, 3.0]))
    np.testing.assert_array_equal(scaled.real, [0.0, 1.0, 2.0, 3.0])
    np.testing.assert_array_equal(scaled.imag, [0.0, 2.0, 4.0, 6.0])
    np.testing.assert_array_equal(spectrum.real, np.ones(4))
    with pytest.raises(LengthMismatchError):
        spectrum.scaled(np.ones(3))


def test_plan_is_read_only(cpu_backend):
    engine = TransformEngine(64, backend=cpu_backend)
    assert engine.plan.order == 6
    assert not engine.plan.twiddles.flags.writeable
    with pytest.raises(ValueError):
        engine.plan.twiddles[0] = 0


def test_closed_engine_raises(cpu_backend):
    with TransformEngine(16, backend=cpu_backend) as engine:
        engine.forward(np.zeros(16))
    assert engine.closed
    with pytest.raises(EngineClosedError):
        engine.forward(np.zeros(16))
    with pytest.raises(EngineClosedError):
        engine.length
    engine.close()


def test_engine_shared_between_threads(cpu_backend, rng):
    engine = TransformEngine(512, backend=cpu_backend, dtype=np.float64)
    signals = [rng.standard_normal(512) for _ in range(8)]
    expected = [engine.inverse(engine.forward(s)) for s in signals]

    with concurrent.futures.ThreadPoolExecutor(max_workers=4) as ex:
        results = list(ex.map(lambda s: engine.inverse(engine.forward(s)), signals))

    for got, want in zip(results, expected):
        np.testing.assert_array_equal(got, want)


def test_packed_spectrum_accepts_sequences():
    spectrum = PackedSpectrum([0.0, 1.0], (2.0, 3.0))
    assert spectrum.half_n == 2
    assert isinstance(spectrum.real, np.ndarray)
    scaled = spectrum.scaled([2.0, 0.5])
    np.testing.assert_array_equal(scaled.real, [0.0, 0.5])
    np.testing.assert_array_equal(scaled.imag, [4.0, 1.5])


def test_packed_spectrum_sequences_must_match():
    with pytest.raises(LengthMismatchError):
        PackedSpectrum([0.0, 1.0], [0.0])
    with pytest.raises(LengthMismatchError):
        PackedSpectrum([0.0, 1.0], [0.0, 1.0]).scaled([1.0])


def test_inverse_of_list_spectrum(cpu_backend, rng):
    engine = TransformEngine(8, backend=cpu_backend, dtype=np.float64)
    signal = rng.standard_normal(8)
    spectrum = engine.forward(signal)
    rebuilt = PackedSpectrum(spectrum.real.tolist(), spectrum.imag.tolist())
    np.testing.assert_allclose(engine.inverse(rebuilt), signal, atol=1e-10)
