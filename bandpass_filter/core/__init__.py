"""
核心模块
包含数组后端
"""

from .backend import ArrayBackend

__all__ = ['ArrayBackend']
