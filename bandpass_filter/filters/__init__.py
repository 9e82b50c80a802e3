"""
滤波器模块
包含频谱掩码和带通滤波器
"""

from .spectral_mask import SpectralMask
from .bandpass_filter import BandpassFilter

__all__ = ['SpectralMask', 'BandpassFilter']
