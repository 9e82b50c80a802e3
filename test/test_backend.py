import sys

import numpy as np
import pytest

from bandpass_filter import (ArrayBackend, BackendUnavailableError,
                             InvalidParameterError)
from bandpass_filter import config
from bandpass_filter.core import backend as backend_module


def test_cpu_backend_uses_numpy(cpu_backend):
    assert cpu_backend.xp is np
    assert not cpu_backend.is_gpu
    info = cpu_backend.get_device_info()
    assert info['device'] == 'cpu'
    assert info['array_module'] == 'numpy'


def test_default_device_follows_config():
    assert ArrayBackend().device == 'cpu'


def test_invalid_device():
    with pytest.raises(InvalidParameterError):
        ArrayBackend(device='tpu')


def test_asarray_and_to_cpu(cpu_backend):
    arr = cpu_backend.asarray([1, 2, 3], dtype=np.float32)
    assert arr.dtype == np.float32
    np.testing.assert_array_equal(cpu_backend.to_cpu(arr), [1.0, 2.0, 3.0])


def test_context_manager(cpu_backend):
    with cpu_backend as backend:
        backend.synchronize()
    assert backend is cpu_backend


@pytest.mark.parametrize("major, package", [
    (11, "cupy-cuda11x"),
    (12, "cupy-cuda12x"),
    (10, None),
    (None, None),
])
def test_cupy_package_name(major, package):
    assert backend_module.cupy_package_name(major) == package


def test_missing_cupy_raises(monkeypatch):
    monkeypatch.setitem(sys.modules, 'cupy', None)
    monkeypatch.setattr(backend_module, 'detect_cuda_version', lambda: (11, 8))
    with pytest.raises(BackendUnavailableError, match="cupy-cuda11x"):
        ArrayBackend(device='gpu')


def test_gpu_from_config_without_cupy(monkeypatch):
    monkeypatch.setitem(sys.modules, 'cupy', None)
    monkeypatch.setattr(backend_module, 'detect_cuda_version', lambda: (None, None))
    config.apply_overrides({"GLOBAL": {"use_gpu": True}})
    with pytest.raises(BackendUnavailableError):
        ArrayBackend()


def _no_nvcc(*args, **kwargs):
    raise FileNotFoundError("nvcc")


def test_detect_cuda_version_from_cuda_home(monkeypatch, tmp_path):
    (tmp_path / "version.txt").write_text("CUDA Version 11.8.89\n")
    monkeypatch.setattr(backend_module.subprocess, 'run', _no_nvcc)
    monkeypatch.setenv('CUDA_HOME', str(tmp_path))
    assert backend_module.detect_cuda_version() == (11, 8)


def test_detect_cuda_version_unavailable(monkeypatch):
    monkeypatch.setattr(backend_module.subprocess, 'run', _no_nvcc)
    monkeypatch.delenv('CUDA_HOME', raising=False)
    monkeypatch.delenv('CUDA_PATH', raising=False)
    assert backend_module.detect_cuda_version() == (None, None)
