"""
日志模块

命令行输出占用 stdout，日志统一写入 stderr。
"""

import os
import sys
from typing import Optional

from loguru import logger


DEBUG_ENV = "MODPORTAL_DEBUG"

_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
_DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | {message}"
)


def setup_logger(debug: Optional[bool] = None, sink=sys.stderr) -> None:
    """
    配置日志输出

    Args:
        debug: 是否输出调试日志，None 时读取环境变量 MODPORTAL_DEBUG
        sink: 输出目标
    """
    if debug is None:
        debug = os.environ.get(DEBUG_ENV, "0") == "1"

    logger.remove()
    logger.add(
        sink,
        format=_DEBUG_FORMAT if debug else _FORMAT,
        level="DEBUG" if debug else "INFO",
        backtrace=debug,
        diagnose=debug,
    )
    logger.debug("[日志] 调试模式已启用")


__all__ = ["logger", "setup_logger"]
