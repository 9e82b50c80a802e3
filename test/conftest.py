import numpy as np
import pytest

from bandpass_filter import ArrayBackend, BandpassFilter
from bandpass_filter import config

from signal_generator import SignalGenerator


@pytest.fixture(autouse=True)
def _restore_config():
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def cpu_backend():
    return ArrayBackend(device='cpu')


@pytest.fixture
def complex_signal():
    # 256 Hz 采样，重复 4 个周期，n = 1024
    return SignalGenerator.make_complex_signal(sample_rate=256, n_times=4)


@pytest.fixture
def bandpass_1024(cpu_backend):
    bandpass = BandpassFilter.from_length(1024, backend=cpu_backend)
    yield bandpass
    bandpass.engine.close()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
