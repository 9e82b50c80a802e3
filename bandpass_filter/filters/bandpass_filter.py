"""
带通滤波器
组合变换引擎与频谱掩码完成频域滤波，并提供频谱分析
"""

import concurrent.futures
import logging
from typing import List, Optional, Sequence

from .. import config
from ..analysis.spectral_analyzer import (FrequencyAmplitudePair,
                                          FrequencyAmplitudePairs,
                                          SpectralAnalyzer)
from ..core.backend import ArrayBackend
from ..errors import LengthMismatchError
from ..transforms.packed_spectrum import PackedSpectrum
from ..transforms.transform_engine import TransformEngine
from .spectral_mask import SpectralMask

logger = logging.getLogger(__name__)


class BandpassFilter:
    """
    带通滤波器类
    正变换 -> 频谱掩码 -> 逆变换
    """

    def __init__(self, engine: TransformEngine):
        """
        初始化带通滤波器

        Args:
            engine: 变换引擎，其执行计划在多次调用间复用
        """
        self.engine = engine
        self.mask = SpectralMask(engine.backend)
        self.analyzer = SpectralAnalyzer(engine.backend)

    @classmethod
    def from_length(cls, length: int, backend: Optional[ArrayBackend] = None,
                    dtype=None) -> 'BandpassFilter':
        """按信号长度创建滤波器"""
        return cls(TransformEngine(length, backend=backend, dtype=dtype))

    @classmethod
    def from_order(cls, log2n: int, backend: Optional[ArrayBackend] = None,
                   dtype=None) -> 'BandpassFilter':
        """按变换阶数创建滤波器"""
        return cls(TransformEngine.from_order(log2n, backend=backend, dtype=dtype))

    @property
    def backend(self) -> ArrayBackend:
        return self.engine.backend

    def _prepare(self, signal):
        samples = self.backend.asarray(signal, dtype=self.engine.dtype)
        if samples.ndim != 1 or samples.shape[0] != self.engine.length:
            raise LengthMismatchError(
                f"信号长度 {samples.shape} 与引擎长度 {self.engine.length} 不符")
        return samples

    def filter(self, signal, sample_rate: float,
               low_cutoff: float, high_cutoff: float):
        """
        硬带通滤波：保留 [low_cutoff, high_cutoff] 内的频率分量

        Args:
            signal: 输入信号
            sample_rate: 采样率 (Hz)
            low_cutoff: 低频截止 (Hz)
            high_cutoff: 高频截止 (Hz)

        Returns:
            滤波后的信号，长度与输入相同
        """
        samples = self._prepare(signal)
        mask = self.mask.zeroing_mask(samples.shape[0], sample_rate,
                                      low_cutoff, high_cutoff)
        return self.apply_mask(mask, samples)

    def apply_zeroing(self, signal, sample_rate: float,
                      low_cutoff: float, high_cutoff: float):
        """通带外频率分量置零，等价于 filter"""
        return self.filter(signal, sample_rate, low_cutoff, high_cutoff)

    def apply(self, signal, sample_rate: float, low_cutoff: float,
              high_cutoff: float, inbound_factor: Optional[float] = None,
              outbound_factor: Optional[float] = None):
        """
        通带/阻带分别按系数缩放

        Args:
            signal: 输入信号
            sample_rate: 采样率 (Hz)
            low_cutoff: 低频截止 (Hz)
            high_cutoff: 高频截止 (Hz)
            inbound_factor: 通带系数，None 则使用 CONFIG["FILTER"]
            outbound_factor: 阻带系数，None 则使用 CONFIG["FILTER"]

        Returns:
            滤波后的信号
        """
        fcfg = config.CONFIG.get("FILTER", {})
        if inbound_factor is None:
            inbound_factor = float(fcfg.get("inbound_factor", 1.0))
        if outbound_factor is None:
            outbound_factor = float(fcfg.get("outbound_factor", 0.0))

        samples = self._prepare(signal)
        mask = self.mask.amplification_factors(inbound_factor, outbound_factor,
                                               low_cutoff, high_cutoff,
                                               samples.shape[0], sample_rate)
        return self.apply_mask(mask, samples)

    def apply_mask(self, mask, signal):
        """
        应用任意频谱掩码

        Args:
            mask: 长度为 len(signal)//2 的缩放系数
            signal: 输入信号

        Returns:
            重构的时域信号
        """
        samples = self._prepare(signal)
        mask = self.backend.asarray(mask)
        expected = samples.shape[0] // 2
        if mask.ndim != 1 or mask.shape[0] != expected:
            raise LengthMismatchError(
                f"掩码长度 {mask.shape} 与 signal.length/2 = {expected} 不符")

        spectrum = self.engine.forward(samples)
        return self.engine.inverse(spectrum.scaled(mask))

    def forward_fft(self, signal) -> PackedSpectrum:
        return self.engine.forward(signal)

    def inverse_fft(self, spectrum: PackedSpectrum):
        return self.engine.inverse(spectrum)

    def autospectrum(self, signal):
        """
        计算信号的自功率谱

        Returns:
            长度为 halfN 的功率数组
        """
        return self.analyzer.autospectrum(self.engine.forward(signal))

    def frequency_amplitude_pairs(self, signal) -> FrequencyAmplitudePairs:
        """
        提取功率超过阈值的频率分量 (bin序号, 幅度)

        Args:
            signal: 输入信号

        Returns:
            按bin序号升序、可重复迭代的频率-幅度对序列
        """
        spectrum = self.engine.forward(signal)
        return self.analyzer.frequency_amplitude_pairs(spectrum, self.engine.length)

    def dominant_frequency(self, signal) -> Optional[FrequencyAmplitudePair]:
        spectrum = self.engine.forward(signal)
        return self.analyzer.dominant_frequency(spectrum, self.engine.length)

    def filter_batch(self, signals: Sequence, sample_rate: float,
                     low_cutoff: float, high_cutoff: float,
                     workers: Optional[int] = None) -> List:
        """
        批量硬带通滤波，共享同一执行计划

        Args:
            signals: 等长信号序列
            sample_rate: 采样率 (Hz)
            low_cutoff: 低频截止 (Hz)
            high_cutoff: 高频截止 (Hz)
            workers: 并行线程数，None 则使用 CONFIG["PERF"]["workers"]

        Returns:
            滤波结果列表，顺序与输入一致
        """
        pcfg = config.CONFIG.get("PERF", {})
        if workers is None:
            workers = pcfg.get("workers")
        threshold = int(pcfg.get("batch_size_threshold_for_workers", 8))

        # 先统一检查长度，避免部分完成后才报错
        batch = [self._prepare(s) for s in signals]

        def run(samples):
            return self.filter(samples, sample_rate, low_cutoff, high_cutoff)

        if workers is None or workers <= 1 or len(batch) < threshold:
            return [run(s) for s in batch]

        logger.debug("并行批量滤波: %d 个信号, %d 个线程", len(batch), workers)
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
            return list(ex.map(run, batch))
