"""
工具模块
包含性能监控工具
"""

from .performance_monitor import PerformanceMonitor

__all__ = ['PerformanceMonitor']
