"""
日志模块

控制台日志写到 stderr，stdout 只留给 --info 之类的结果输出。
指定日志文件时，文件中总是记录完整的 DEBUG 日志，方便事后排查被跳过的文件。
"""

import os
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from packotter.exceptions import ConfigValidationError


CONSOLE_FORMAT = "{time:HH:mm:ss} | {level: <8} | {message}"
DEBUG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def resolve_level(level: Optional[str] = None) -> str:
    """
    确定控制台日志级别

    优先级: 显式参数 > PACKOTTER_LOG_LEVEL > PACKOTTER_DEBUG=1 > INFO

    Raises:
        ConfigValidationError: 级别名称无效
    """
    if level is None:
        level = os.environ.get("PACKOTTER_LOG_LEVEL")
    if level is None:
        level = "DEBUG" if os.environ.get("PACKOTTER_DEBUG", "0") == "1" else "INFO"

    level = level.upper()
    try:
        logger.level(level)
    except ValueError:
        raise ConfigValidationError(f"无效的日志级别: {level}", context={"level": level})
    return level


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    sink=None,
    enqueue: bool = True,
    colorize: Optional[bool] = None,
) -> None:
    """
    设置日志记录器

    Args:
        level: 控制台日志级别，默认由环境变量决定
        log_file: 额外的日志文件（DEBUG 级别，不着色）
        sink: 控制台输出目标，默认 sys.stderr
        enqueue: 是否启用队列（线程安全）
        colorize: 是否着色，默认仅在终端中着色
    """
    level = resolve_level(level)
    debug = level == "DEBUG"

    logger.remove()
    logger.add(
        sink=sink or sys.stderr,
        format=DEBUG_FORMAT if debug else CONSOLE_FORMAT,
        enqueue=enqueue,
        level=level,
        colorize=colorize,
        backtrace=debug,
        diagnose=debug,
    )

    if log_file is not None:
        logger.add(
            sink=str(log_file),
            format=DEBUG_FORMAT,
            enqueue=enqueue,
            level="DEBUG",
            colorize=False,
            encoding="utf-8",
        )

    if debug:
        logger.debug("DEBUG 模式已启用")


__all__ = ["logger", "setup_logger", "resolve_level"]
