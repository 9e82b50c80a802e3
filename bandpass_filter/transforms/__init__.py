"""
变换模块
包含打包频谱和变换引擎
"""

from .packed_spectrum import PackedSpectrum
from .transform_engine import TransformEngine

__all__ = ['PackedSpectrum', 'TransformEngine']
