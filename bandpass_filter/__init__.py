"""
FFT带通滤波库
基于打包实数FFT的频域带通滤波与频谱分析工具包
"""

import logging

__version__ = "1.0.0"
__author__ = "Signal Processing Team"

from .errors import (BandpassFilterError, InvalidLengthError, InvalidParameterError,
                     LengthMismatchError, EngineClosedError, BackendUnavailableError)
from .core.backend import ArrayBackend
from .transforms.packed_spectrum import PackedSpectrum
from .transforms.transform_engine import TransformEngine
from .filters.spectral_mask import SpectralMask
from .filters.bandpass_filter import BandpassFilter
from .analysis.spectral_analyzer import (SpectralAnalyzer, FrequencyAmplitudePair,
                                         FrequencyAmplitudePairs, SIGNIFICANCE_THRESHOLD)
from .utils.performance_monitor import PerformanceMonitor

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'ArrayBackend',
    'PackedSpectrum',
    'TransformEngine',
    'SpectralMask',
    'BandpassFilter',
    'SpectralAnalyzer',
    'FrequencyAmplitudePair',
    'FrequencyAmplitudePairs',
    'SIGNIFICANCE_THRESHOLD',
    'PerformanceMonitor',
    'BandpassFilterError',
    'InvalidLengthError',
    'InvalidParameterError',
    'LengthMismatchError',
    'EngineClosedError',
    'BackendUnavailableError',
]
