"""
分析模块
包含频谱分析器
"""

from .spectral_analyzer import (SpectralAnalyzer, FrequencyAmplitudePair,
                                FrequencyAmplitudePairs, SIGNIFICANCE_THRESHOLD)

__all__ = ['SpectralAnalyzer', 'FrequencyAmplitudePair',
           'FrequencyAmplitudePairs', 'SIGNIFICANCE_THRESHOLD']
