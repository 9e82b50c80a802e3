"""
异常定义
所有错误都是调用方前置条件违例，在调用入口同步检测
"""


class BandpassFilterError(Exception):
    """带通滤波库的基础异常"""


class InvalidLengthError(BandpassFilterError, ValueError):
    """变换长度非正，或无法推导出有效的变换阶数"""


class InvalidParameterError(BandpassFilterError, ValueError):
    """采样率非正，或其他超出定义域的数值参数"""


class LengthMismatchError(BandpassFilterError, ValueError):
    """信号长度与引擎配置不符，或掩码长度与 signal.length/2 不符"""


class EngineClosedError(BandpassFilterError, RuntimeError):
    """FFT 执行计划已释放后仍被调用"""


class BackendUnavailableError(BandpassFilterError, RuntimeError):
    """请求的计算后端（cupy / GPU）不可用"""
