"""
变换引擎
基于复数FFT实现打包实数FFT的正变换与逆变换，执行计划按固定信号长度复用
"""

import logging
import math
import operator
from typing import NamedTuple, Optional

import numpy as np

from .. import config
from ..core.backend import ArrayBackend, get_backend
from ..errors import EngineClosedError, InvalidLengthError, LengthMismatchError
from .packed_spectrum import PackedSpectrum

logger = logging.getLogger(__name__)


class _FFTPlan(NamedTuple):
    """不可变的FFT执行计划（只包含变换系数，不包含数据）"""
    order: int
    length: int
    twiddles: object
    mirror: object
    wrap: object


def _freeze(arr):
    # cupy 数组没有写保护标志
    if isinstance(arr, np.ndarray):
        arr.setflags(write=False)
    return arr


def _order_for_length(length) -> int:
    try:
        length = operator.index(length)
    except TypeError:
        raise InvalidLengthError(f"变换长度必须是整数, 得到 {length!r}") from None
    if length <= 0:
        raise InvalidLengthError(f"变换长度必须为正, 得到 {length}")

    log2n = int(math.ceil(math.log2(length)))
    if 2 ** log2n != length or log2n < 1:
        raise InvalidLengthError(
            f"变换长度必须是不小于2的2的整数次幂, 得到 {length}")
    return log2n


class TransformEngine:
    """
    变换引擎类
    对固定长度 n 的实信号执行打包实数FFT及其逆变换
    """

    def __init__(self, length: int, backend: Optional[ArrayBackend] = None,
                 dtype=None):
        """
        初始化变换引擎并建立执行计划

        Args:
            length: 信号长度 n，必须是 2 的整数次幂
            backend: 数组后端，None 则按配置选择
            dtype: 时域信号数据类型，None 则使用 CONFIG["GLOBAL"]["dtype"]
        """
        order = _order_for_length(length)
        self.backend = get_backend(backend)
        if dtype is None:
            dtype = config.CONFIG.get("GLOBAL", {}).get("dtype", "float32")
        self.dtype = np.dtype(dtype)
        self._plan = self._build_plan(order)
        logger.debug("建立FFT执行计划: n=%d, log2n=%d, 后端=%s",
                     self._plan.length, order, self.backend.device)

    @classmethod
    def create(cls, length: int, backend: Optional[ArrayBackend] = None,
               dtype=None) -> 'TransformEngine':
        """按信号长度创建引擎"""
        return cls(length, backend=backend, dtype=dtype)

    @classmethod
    def from_order(cls, log2n: int, backend: Optional[ArrayBackend] = None,
                   dtype=None) -> 'TransformEngine':
        """
        按变换阶数创建引擎

        Args:
            log2n: 变换阶数，信号长度为 2**log2n

        Returns:
            变换引擎
        """
        try:
            log2n = operator.index(log2n)
        except TypeError:
            raise InvalidLengthError(f"变换阶数必须是整数, 得到 {log2n!r}") from None
        if log2n < 1:
            raise InvalidLengthError(f"变换阶数必须 >= 1, 得到 {log2n}")
        return cls(2 ** log2n, backend=backend, dtype=dtype)

    def _build_plan(self, order: int) -> _FFTPlan:
        xp = self.backend.xp
        n = 2 ** order
        half_n = n // 2
        k = np.arange(half_n)
        twiddles = np.exp(-2j * np.pi * k / n)
        # 共轭对称位置: 逆变换用 halfN-k (取值 1..halfN)，正变换再对 halfN 取模
        mirror = half_n - k
        wrap = mirror % half_n
        return _FFTPlan(
            order=order,
            length=n,
            twiddles=_freeze(xp.asarray(twiddles)),
            mirror=_freeze(xp.asarray(mirror)),
            wrap=_freeze(xp.asarray(wrap)),
        )

    @property
    def plan(self) -> _FFTPlan:
        if self._plan is None:
            raise EngineClosedError("FFT执行计划已释放")
        return self._plan

    @property
    def closed(self) -> bool:
        return self._plan is None

    @property
    def length(self) -> int:
        return self.plan.length

    @property
    def half_n(self) -> int:
        return self.plan.length // 2

    @property
    def log2n(self) -> int:
        return self.plan.order

    def forward(self, signal) -> PackedSpectrum:
        """
        打包实数FFT正变换

        Args:
            signal: 长度为 n 的实信号

        Returns:
            打包频谱，系数为普通DFT的两倍
        """
        plan = self.plan
        xp = self.backend.xp
        samples = self.backend.asarray(signal, dtype=self.dtype)
        if samples.ndim != 1 or samples.shape[0] != plan.length:
            raise LengthMismatchError(
                f"信号长度 {samples.shape} 与引擎长度 {plan.length} 不符")

        # 相邻采样成对打包为复数: z[k] = s[2k] + i*s[2k+1]
        packed = samples[0::2].astype(np.float64) + 1j * samples[1::2].astype(np.float64)
        z = xp.fft.fft(packed)

        # 拆分偶数/奇数采样的频谱
        z_conj = xp.conj(z[plan.wrap])
        even = 0.5 * (z + z_conj)
        odd = -0.5j * (z - z_conj)

        spectrum = 2.0 * (even + plan.twiddles * odd)
        nyquist = 2.0 * (even[0] - odd[0]).real

        real = spectrum.real.astype(self.dtype)
        imag = spectrum.imag.astype(self.dtype)
        imag[0] = nyquist
        return PackedSpectrum(real, imag)

    def inverse(self, spectrum: PackedSpectrum):
        """
        打包实数FFT逆变换

        Args:
            spectrum: 打包频谱（可能已被掩码缩放），不会被修改

        Returns:
            长度为 n 的实信号，已按 1/(2n) 缩放
        """
        plan = self.plan
        xp = self.backend.xp
        half_n = plan.length // 2
        if spectrum.half_n != half_n:
            raise LengthMismatchError(
                f"频谱长度 {spectrum.half_n} 与引擎 halfN {half_n} 不符")

        real = self.backend.asarray(spectrum.real).astype(np.float64)
        imag = self.backend.asarray(spectrum.imag).astype(np.float64)

        # 展开为 halfN+1 个系数，末位为奈奎斯特分量
        coeffs = xp.empty(half_n + 1, dtype=np.complex128)
        coeffs[:half_n] = real + 1j * imag
        coeffs[0] = real[0]
        coeffs[half_n] = imag[0]

        mirrored = xp.conj(coeffs[plan.mirror])
        head = coeffs[:half_n]
        even = head + mirrored
        odd = (head - mirrored) * xp.conj(plan.twiddles)

        # 未归一化的逆变换，结果为原信号的 2n 倍
        z = xp.fft.ifft(even + 1j * odd, norm="forward")

        out = xp.empty(plan.length, dtype=np.float64)
        out[0::2] = z.real
        out[1::2] = z.imag
        out *= 1.0 / (2 * plan.length)
        return out.astype(self.dtype)

    def close(self):
        """释放执行计划"""
        if self._plan is not None:
            logger.debug("释放FFT执行计划: n=%d", self._plan.length)
            self._plan = None

    def __repr__(self) -> str:
        if self.closed:
            return "TransformEngine(closed)"
        return f"TransformEngine(length={self._plan.length}, device={self.backend.device!r})"

    def __enter__(self):
        """上下文管理器入口"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """上下文管理器出口"""
        self.close()
