"""
频谱分析器
提供自功率谱计算和显著频率分量提取功能
"""

import logging
from typing import Iterator, NamedTuple, Optional

import numpy as np

from ..core.backend import ArrayBackend, get_backend
from ..errors import InvalidLengthError
from ..transforms.packed_spectrum import PackedSpectrum

logger = logging.getLogger(__name__)

# 显著性阈值：自功率谱大于该值的bin才被视为频率分量
SIGNIFICANCE_THRESHOLD = 1.0


class FrequencyAmplitudePair(NamedTuple):
    frequency_bin: int
    amplitude: float


class FrequencyAmplitudePairs:
    """
    频率-幅度对序列

    按bin序号升序惰性产生，每次迭代都会重新开始。
    """

    def __init__(self, autospectrum: np.ndarray, length: int):
        """
        Args:
            autospectrum: 自功率谱 (CPU数组)
            length: 时域信号长度 n，用于幅度归一化
        """
        if length <= 0:
            raise InvalidLengthError(f"信号长度必须为正, 得到 {length}")
        self._autospectrum = autospectrum
        self.length = length

    def __iter__(self) -> Iterator[FrequencyAmplitudePair]:
        for index, power in enumerate(self._autospectrum):
            if power > SIGNIFICANCE_THRESHOLD:
                yield FrequencyAmplitudePair(index, float(np.sqrt(power)) / self.length)

    def __len__(self) -> int:
        return int(np.count_nonzero(self._autospectrum > SIGNIFICANCE_THRESHOLD))

    def as_hz(self, sample_rate: float) -> Iterator[tuple]:
        """将bin序号换算为物理频率 (Hz)"""
        bin_width = float(sample_rate) / self.length
        for pair in self:
            yield pair.frequency_bin * bin_width, pair.amplitude

    def __repr__(self) -> str:
        return f"FrequencyAmplitudePairs({list(self)!r})"


class SpectralAnalyzer:
    """
    频谱分析器
    基于打包频谱计算自功率谱及显著频率分量
    """

    def __init__(self, backend: Optional[ArrayBackend] = None):
        self.backend = get_backend(backend)

    def autospectrum(self, spectrum: PackedSpectrum):
        """
        计算自功率谱：每个bin的实部与虚部平方和

        Args:
            spectrum: 打包频谱

        Returns:
            长度为 halfN 的非负数组
        """
        real = spectrum.real.astype(np.float64)
        imag = spectrum.imag.astype(np.float64)
        return real * real + imag * imag

    def frequency_amplitude_pairs(self, spectrum: PackedSpectrum,
                                  length: Optional[int] = None) -> FrequencyAmplitudePairs:
        """
        提取显著频率分量

        Args:
            spectrum: 打包频谱
            length: 时域信号长度，None 则为 2*halfN

        Returns:
            频率-幅度对序列，幅度为 sqrt(power)/n
        """
        if length is None:
            length = spectrum.signal_length
        power = self.backend.to_cpu(self.autospectrum(spectrum))
        return FrequencyAmplitudePairs(power, length)

    def dominant_frequency(self, spectrum: PackedSpectrum,
                           length: Optional[int] = None) -> Optional[FrequencyAmplitudePair]:
        """
        找出功率最大的显著频率分量

        Returns:
            频率-幅度对，没有显著分量时为 None
        """
        pairs = self.frequency_amplitude_pairs(spectrum, length)
        best = None
        for pair in pairs:
            if best is None or pair.amplitude > best.amplitude:
                best = pair
        if best is None:
            logger.debug("未检测到超过阈值 %.1f 的频率分量", SIGNIFICANCE_THRESHOLD)
        return best
