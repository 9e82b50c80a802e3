from typing import Any, Dict, Optional
import json
import logging
import os
import copy

DEFAULT_CONFIG: Dict[str, Any] = {
    "GLOBAL": {
        # 是否使用 GPU（cupy）；默认 CPU（numpy）
        "use_gpu": False,
        # GPU 设备 ID
        "gpu_id": 0,
        # 时域信号的数据类型
        "dtype": "float32",
    },

    # 掩码缺省系数
    "FILTER": {
        # 通带内的缩放系数
        "inbound_factor": 1.0,
        # 通带外的缩放系数（0 表示硬带通）
        "outbound_factor": 0.0,
    },

    # 并行 / 性能调优
    "PERF": {
        # 批量滤波的并行 worker 数（None 表示串行）
        "workers": None,
        # 小批量阈值：仅当批量大小 >= 该值时启用并行 worker
        "batch_size_threshold_for_workers": 8,
        # 基准测试的预热次数与运行次数
        "warmup_runs": 3,
        "num_runs": 10,
    },

    # 调试 / 日志
    "DEBUG": {
        # 日志等级： "DEBUG" / "INFO" / "WARNING" / "ERROR"
        "log_level": "INFO",
    },
}

# 运行时配置对象（可被修改以影响全局行为）
CONFIG: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

CONFIG_PATH_ENV = "BANDPASS_FILTER_CONFIG_PATH"


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    # 只做两层合并：section 内按键覆盖
    for k, v in overrides.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            base[k].update(v)
        else:
            base[k] = v


def load_from_json(path: str) -> Dict[str, Any]:
    """参数:
        path: json 文件路径
    返回:
        配置字典（以文件内容覆盖默认配置）
    """
    with open(path, "r", encoding="utf-8") as f:
        user_cfg = json.load(f)
    merged = copy.deepcopy(DEFAULT_CONFIG)
    _merge(merged, user_cfg)
    return merged


def apply_overrides(overrides: Dict[str, Any]) -> None:
    """参数:
        overrides: 要覆盖的配置字典（部分或全部）
    返回:
        None
    """
    _merge(CONFIG, overrides)


def load_if_exists(json_path_env: str = CONFIG_PATH_ENV) -> None:
    """参数:
        json_path_env: 环境变量名，若存在则从该 json 文件加载配置覆盖默认
    返回:
        None
    """
    p = os.environ.get(json_path_env)
    if p and os.path.exists(p):
        cfg = load_from_json(p)
        CONFIG.clear()
        CONFIG.update(cfg)


def reset_config() -> None:
    """恢复默认配置"""
    CONFIG.clear()
    CONFIG.update(copy.deepcopy(DEFAULT_CONFIG))


def get_config_copy() -> Dict[str, Any]:
    """参数:
        无
    返回:
        CONFIG 的深拷贝（防止上层直接修改引用）
    """
    return copy.deepcopy(CONFIG)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """参数:
        level: 日志等级名，None 则使用 CONFIG["DEBUG"]["log_level"]
    返回:
        包级 logger
    """
    if level is None:
        level = CONFIG.get("DEBUG", {}).get("log_level", "INFO")
    logger = logging.getLogger("bandpass_filter")
    logger.setLevel(str(level).upper())
    return logger


load_if_exists()

if __name__ == "__main__":

    print(json.dumps(CONFIG, indent=2, ensure_ascii=False))
