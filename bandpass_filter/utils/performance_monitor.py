"""
性能监控工具
测量变换引擎执行计划复用带来的收益
"""

import time
from typing import Callable, Dict, List, Optional

import numpy as np

from .. import config
from ..core.backend import ArrayBackend, get_backend
from ..filters.bandpass_filter import BandpassFilter
from ..transforms.transform_engine import TransformEngine


class PerformanceMonitor:
    """
    性能监控工具类
    提供函数基准测试和滤波性能分析
    """

    def __init__(self, backend: Optional[ArrayBackend] = None):
        self.backend = get_backend(backend)
        self.performance_history = []

    def benchmark_function(self, func: Callable, *args,
                           num_runs: Optional[int] = None,
                           warmup_runs: Optional[int] = None,
                           **kwargs) -> Dict[str, float]:
        """
        基准测试函数性能

        Args:
            func: 要测试的函数
            *args: 函数参数
            num_runs: 测试运行次数，None 则使用 CONFIG["PERF"]
            warmup_runs: 预热运行次数，None 则使用 CONFIG["PERF"]
            **kwargs: 函数关键字参数

        Returns:
            性能统计字典
        """
        pcfg = config.CONFIG.get("PERF", {})
        if num_runs is None:
            num_runs = int(pcfg.get("num_runs", 10))
        if warmup_runs is None:
            warmup_runs = int(pcfg.get("warmup_runs", 3))

        # 预热运行
        for _ in range(warmup_runs):
            func(*args, **kwargs)
        self.backend.synchronize()

        times = []
        for _ in range(num_runs):
            start_time = time.perf_counter()
            func(*args, **kwargs)
            self.backend.synchronize()
            times.append(time.perf_counter() - start_time)

        times = np.array(times)
        stats = {
            'mean_time': float(np.mean(times)),
            'std_time': float(np.std(times)),
            'min_time': float(np.min(times)),
            'max_time': float(np.max(times)),
            'median_time': float(np.median(times)),
            'total_time': float(np.sum(times))
        }

        return stats

    def compare_plan_reuse(self, length: int, sample_rate: float = 44100,
                           low_cutoff: float = 300.0, high_cutoff: float = 3400.0,
                           num_runs: Optional[int] = None) -> Dict[str, object]:
        """
        比较复用执行计划与每次新建引擎的滤波耗时

        Args:
            length: 信号长度
            sample_rate: 采样率
            low_cutoff: 低频截止
            high_cutoff: 高频截止
            num_runs: 测试运行次数

        Returns:
            {'reused': 统计, 'fresh': 统计, 'speedup': 加速比}
        """
        t = np.arange(length) / sample_rate
        signal = np.sin(2 * np.pi * 1000 * t) + np.random.normal(0, 0.1, length)
        signal = self.backend.asarray(signal)

        def fresh_filter(sig):
            with TransformEngine(length, backend=self.backend) as engine:
                return BandpassFilter(engine).filter(sig, sample_rate, low_cutoff, high_cutoff)

        with TransformEngine(length, backend=self.backend) as shared_engine:
            shared = BandpassFilter(shared_engine)
            reused_stats = self.benchmark_function(
                shared.filter, signal, sample_rate, low_cutoff, high_cutoff,
                num_runs=num_runs)
            fresh_stats = self.benchmark_function(fresh_filter, signal, num_runs=num_runs)

        results = {
            'length': length,
            'reused': reused_stats,
            'fresh': fresh_stats,
            'speedup': fresh_stats['mean_time'] / max(reused_stats['mean_time'], 1e-12),
        }
        self.performance_history.append(
            f"n={length}: 复用 {reused_stats['mean_time'] * 1e3:.3f} ms, "
            f"新建 {fresh_stats['mean_time'] * 1e3:.3f} ms")
        return results

    def profile_filter_performance(self, signal_lengths: List[int],
                                   sample_rate: float = 44100,
                                   num_runs: int = 5) -> Dict[str, List[float]]:
        """
        分析不同信号长度下的滤波性能

        Args:
            signal_lengths: 信号长度列表（2的整数次幂）
            sample_rate: 采样率
            num_runs: 每个长度的运行次数

        Returns:
            滤波性能分析结果
        """
        filter_times = []
        for length in signal_lengths:
            t = np.arange(length) / sample_rate
            signal = self.backend.asarray(np.sin(2 * np.pi * 1000 * t))
            with TransformEngine(length, backend=self.backend) as engine:
                bandpass = BandpassFilter(engine)
                stats = self.benchmark_function(
                    bandpass.filter, signal, sample_rate, 500.0, 1500.0,
                    num_runs=num_runs)
            filter_times.append(stats['mean_time'])

        return {
            'signal_lengths': list(signal_lengths),
            'filter_times': filter_times,
            'samples_per_second': [n / t if t > 0 else float('inf')
                                   for n, t in zip(signal_lengths, filter_times)]
        }

    def get_performance_report(self) -> str:
        """
        生成性能报告

        Returns:
            性能报告字符串
        """
        report = "带通滤波性能报告\n"
        report += "=" * 50 + "\n\n"

        device_info = self.backend.get_device_info()
        report += f"计算设备: {device_info['device']} ({device_info['array_module']})\n\n"

        if self.performance_history:
            report += "性能历史记录:\n"
            for i, record in enumerate(self.performance_history[-5:]):  # 显示最近5条记录
                report += f"  记录 {i+1}: {record}\n"

        return report
