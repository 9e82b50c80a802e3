"""
打包频谱
长度为 n 的实信号经打包实数 FFT 后的频域表示
"""

import importlib

import numpy as np

from ..errors import LengthMismatchError


def _as_array(data, like=None):
    """列表/元组转换为数组；like 为 cupy 数组时转换到同一设备"""
    if hasattr(data, 'ndim'):
        return data
    if like is None or isinstance(like, np.ndarray):
        return np.asarray(data, dtype=np.float64)
    xp = importlib.import_module(type(like).__module__.split('.')[0])
    return xp.asarray(data, dtype=np.float64)


class PackedSpectrum:
    """
    打包频谱 (real[halfN], imag[halfN])

    bin 0 的实部为直流分量，虚部为奈奎斯特分量；
    bin 1..halfN-1 为递增正频率的复系数。
    """

    __slots__ = ('real', 'imag')

    def __init__(self, real, imag):
        """
        Args:
            real: 实部数组 (numpy、cupy 或序列)
            imag: 虚部数组，长度必须与 real 相同
        """
        real = _as_array(real)
        imag = _as_array(imag, like=real)
        if real.ndim != 1 or imag.ndim != 1:
            raise LengthMismatchError(
                f"频谱实部/虚部必须是一维数组, 得到 ndim={real.ndim}/{imag.ndim}")
        if real.shape[0] != imag.shape[0]:
            raise LengthMismatchError(
                f"频谱实部长度 {real.shape[0]} != 虚部长度 {imag.shape[0]}")
        self.real = real
        self.imag = imag

    @property
    def half_n(self) -> int:
        return int(self.real.shape[0])

    @property
    def signal_length(self) -> int:
        """对应的时域信号长度"""
        return 2 * self.half_n

    def __len__(self) -> int:
        return self.half_n

    def copy(self) -> 'PackedSpectrum':
        return PackedSpectrum(self.real.copy(), self.imag.copy())

    def scaled(self, mask) -> 'PackedSpectrum':
        """
        逐 bin 缩放实部与虚部

        Args:
            mask: 长度为 halfN 的缩放系数（数组或序列）

        Returns:
            新的打包频谱
        """
        mask = _as_array(mask, like=self.real)
        if mask.ndim != 1 or mask.shape[0] != self.half_n:
            raise LengthMismatchError(
                f"掩码形状 {mask.shape} 与频谱长度 {self.half_n} 不符")
        mask = mask.astype(self.real.dtype, copy=False)
        return PackedSpectrum(self.real * mask, self.imag * mask)

    def __repr__(self) -> str:
        return f"PackedSpectrum(half_n={self.half_n}, dtype={self.real.dtype})"
