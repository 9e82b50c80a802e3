"""
频谱掩码
根据截止频率计算每个频率bin的缩放系数
"""

import logging
import math
import operator
from typing import Optional

import numpy as np

from ..core.backend import ArrayBackend, get_backend
from ..errors import InvalidParameterError

logger = logging.getLogger(__name__)


class SpectralMask:
    """
    频谱掩码类
    提供硬带通（置零）和通带/阻带双系数放大掩码
    """

    def __init__(self, backend: Optional[ArrayBackend] = None):
        self.backend = get_backend(backend)

    def bin_frequencies(self, n: int, sample_rate: float):
        """
        计算每个bin的中心频率

        Args:
            n: 信号长度
            sample_rate: 采样率 (Hz)

        Returns:
            长度为 n//2 的频率数组 f(i) = sample_rate / n * i
        """
        try:
            n = operator.index(n)
        except TypeError:
            raise InvalidParameterError(f"信号长度必须是整数, 得到 {n!r}") from None
        if n <= 0:
            raise InvalidParameterError(f"信号长度必须为正, 得到 {n}")
        if not (math.isfinite(sample_rate) and sample_rate > 0):
            raise InvalidParameterError(f"采样率必须是正的有限数, 得到 {sample_rate}")
        xp = self.backend.xp
        return float(sample_rate) / n * xp.arange(n // 2, dtype=np.float64)

    def amplification_factors(self, inbound_factor: float, outbound_factor: float,
                              low_cutoff: float, high_cutoff: float,
                              n: int, sample_rate: float):
        """
        计算通带/阻带双系数掩码

        Args:
            inbound_factor: 通带内系数
            outbound_factor: 通带外系数
            low_cutoff: 低频截止 (Hz)，含边界
            high_cutoff: 高频截止 (Hz)，含边界
            n: 信号长度
            sample_rate: 采样率 (Hz)

        Returns:
            长度为 n//2 的掩码数组
        """
        for name, value in (('inbound_factor', inbound_factor),
                            ('outbound_factor', outbound_factor)):
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} 必须是有限数, 得到 {value}")
        if math.isnan(low_cutoff) or math.isnan(high_cutoff):
            raise InvalidParameterError(
                f"截止频率不能为 NaN: [{low_cutoff}, {high_cutoff}]")

        freqs = self.bin_frequencies(n, sample_rate)
        if high_cutoff < low_cutoff:
            logger.debug("通带为空: high_cutoff %s < low_cutoff %s", high_cutoff, low_cutoff)

        xp = self.backend.xp
        in_band = (freqs >= low_cutoff) & (freqs <= high_cutoff)
        return xp.where(in_band, float(inbound_factor), float(outbound_factor))

    def zeroing_mask(self, n: int, sample_rate: float,
                     low_cutoff: float, high_cutoff: float):
        """
        硬带通掩码：通带内为1，通带外为0

        Args:
            n: 信号长度
            sample_rate: 采样率 (Hz)
            low_cutoff: 低频截止 (Hz)
            high_cutoff: 高频截止 (Hz)

        Returns:
            长度为 n//2 的掩码数组
        """
        return self.amplification_factors(1.0, 0.0, low_cutoff, high_cutoff,
                                          n, sample_rate)
