"""
计算后端
在 numpy（CPU）与 cupy（GPU）之间选择数组模块，并提供设备管理
"""

import logging
import os
import subprocess
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .. import config
from ..errors import BackendUnavailableError, InvalidParameterError

logger = logging.getLogger(__name__)


def detect_cuda_version() -> Tuple[Optional[int], Optional[int]]:
    """
    检测本机 CUDA 版本

    Returns:
        (major, minor)，检测失败时为 (None, None)
    """
    try:
        result = subprocess.run(["nvcc", "--version"], check=False,
                                capture_output=True, text=True)
    except OSError:
        result = None

    if result is not None and result.returncode == 0:
        for line in result.stdout.split('\n'):
            if 'release' in line.lower():
                version_str = line.split('release')[1].split(',')[0].strip()
                version_parts = version_str.split('.')
                if len(version_parts) >= 2:
                    return int(version_parts[0]), int(version_parts[1])

    cuda_home = os.environ.get('CUDA_HOME') or os.environ.get('CUDA_PATH')
    if cuda_home:
        version_file = os.path.join(cuda_home, 'version.txt')
        if os.path.exists(version_file):
            with open(version_file, 'r') as f:
                content = f.read()
            if 'CUDA Version' in content:
                version_str = content.split('CUDA Version')[1].split('\n')[0].strip()
                version_parts = version_str.split('.')
                if len(version_parts) >= 2:
                    return int(version_parts[0]), int(version_parts[1])

    return None, None


def cupy_package_name(cuda_major: Optional[int]) -> Optional[str]:
    """
    根据 CUDA 主版本号选择 CuPy 发行包名

    Args:
        cuda_major: CUDA 主版本号

    Returns:
        包名，不支持的版本返回 None
    """
    if cuda_major in (11, 12, 13):
        return f"cupy-cuda{cuda_major}x"
    return None


def _import_cupy():
    try:
        import cupy
    except ImportError as exc:
        major, _ = detect_cuda_version()
        package = cupy_package_name(major) or "cupy-cuda12x"
        raise BackendUnavailableError(
            f"GPU 后端需要 cupy，请先安装: pip install {package}") from exc
    return cupy


class ArrayBackend:
    """
    数组后端
    封装 numpy / cupy 的选择与数据搬运
    """

    def __init__(self, device: Optional[str] = None, gpu_id: Optional[int] = None):
        """
        初始化数组后端

        Args:
            device: 'gpu' 强制 GPU，'cpu' 强制 CPU，None 则使用 CONFIG["GLOBAL"]["use_gpu"]
            gpu_id: GPU 设备 ID，None 则使用配置
        """
        gcfg = config.CONFIG.get("GLOBAL", {})
        if device is None:
            device = 'gpu' if gcfg.get("use_gpu", False) else 'cpu'
        if device not in ('cpu', 'gpu'):
            raise InvalidParameterError(f"不支持的设备类型: {device}")

        self.device = device
        self.gpu_id = int(gcfg.get("gpu_id", 0)) if gpu_id is None else int(gpu_id)

        if device == 'gpu':
            cp = _import_cupy()
            self._device = cp.cuda.Device(self.gpu_id)
            self._device.use()
            self.xp = cp
            logger.info("使用GPU设备 %d", self.gpu_id)
        else:
            self._device = None
            self.xp = np
            logger.debug("使用CPU后端 (numpy %s)", np.__version__)

    @property
    def is_gpu(self) -> bool:
        return self.device == 'gpu'

    def asarray(self, data: Any, dtype=None):
        """
        将数据转换为当前后端的数组

        Args:
            data: 输入数据（列表、numpy 或 cupy 数组）
            dtype: 目标数据类型

        Returns:
            后端数组
        """
        if self.is_gpu:
            return self.xp.asarray(data, dtype=dtype)
        if type(data).__module__.startswith('cupy'):
            # cupy 数组先搬回主机
            data = data.get()
        return np.asarray(data, dtype=dtype)

    def to_cpu(self, data: Any) -> np.ndarray:
        """
        将数据转移到CPU

        Args:
            data: 后端数组

        Returns:
            numpy 数组
        """
        if self.is_gpu:
            return self.xp.asnumpy(data)
        return np.asarray(data)

    def synchronize(self):
        """同步GPU操作"""
        if self.is_gpu:
            self.xp.cuda.Stream.null.synchronize()

    def clear_memory(self):
        """清理GPU内存"""
        if self.is_gpu:
            self.xp.get_default_memory_pool().free_all_blocks()
            self.xp.cuda.runtime.deviceSynchronize()

    def get_device_info(self) -> Dict[str, Any]:
        """
        获取设备信息

        Returns:
            设备信息字典
        """
        if not self.is_gpu:
            return {'device': 'cpu', 'array_module': 'numpy', 'version': np.__version__}

        props = self.xp.cuda.runtime.getDeviceProperties(self.gpu_id)
        free, total = self.xp.cuda.runtime.memGetInfo()
        return {
            'device': 'gpu',
            'array_module': 'cupy',
            'id': self.gpu_id,
            'name': props['name'].decode(),
            'memory_total': total,
            'memory_free': free,
            'compute_capability': f"{props['major']}.{props['minor']}",
        }

    def __repr__(self) -> str:
        return f"ArrayBackend(device={self.device!r})"

    def __enter__(self):
        """上下文管理器入口"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """上下文管理器出口"""
        self.clear_memory()


def get_backend(backend: Optional[ArrayBackend] = None) -> ArrayBackend:
    """返回给定后端，未指定时按配置新建"""
    if backend is None:
        return ArrayBackend()
    return backend
