#!/usr/bin/env python3
"""
FFT带通滤波项目安装脚本
GPU 后端为可选依赖: pip install .[gpu]，具体 CuPy 包名见 bandpass_filter.core.backend.cupy_package_name
"""

import sys

from setuptools import setup, find_packages

if sys.version_info < (3, 8):
    sys.exit("错误: 需要Python 3.8或更高版本")

setup(
    name="bandpass-filter",
    version="1.0.0",
    description="基于打包实数FFT的频域带通滤波与频谱分析",
    author="Signal Processing Team",
    python_requires=">=3.8",
    packages=find_packages(include=["bandpass_filter", "bandpass_filter.*"]),
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "gpu": ["cupy-cuda12x"],
        "test": ["pytest>=7"],
    },
)
