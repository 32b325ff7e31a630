# -*- coding: utf-8 -*-
"""
Peeklog - 分级日志库

轻量的分级日志库，支持：
- 六个日志级别（Trace、Debug、Info、Warn、Error、Fatal）
- 可组合的日志头部字段（级别、时间、文件行号）
- 标准输出、普通文件输出
- 按大小轮转、按时间轮转、按时间轮转并按数量清理
- 格式化缓冲区复用
"""

from .__version__ import __version__
from .bridge import LoggerHandler
from .bufpool import BufferPool
from .config import LogConfig, load_config, new_logger, parse_size
from .errors import DestinationIOError, InvalidConfigurationError, LogError
from .handlers import (
    Destination,
    FileHandler,
    NullHandler,
    RotatingFileHandler,
    StreamHandle,
    TimedFileHandler,
    TimedRotatingFileHandler,
    When,
)
from .level import LEVEL_NAMES, Flag, Level, parse_flags, parse_level
from .logger import Logger

__all__ = [
    "__version__",
    # 核心
    "Logger",
    "Level",
    "Flag",
    "LEVEL_NAMES",
    "parse_level",
    "parse_flags",
    "BufferPool",
    # 输出目标
    "Destination",
    "StreamHandle",
    "NullHandler",
    "FileHandler",
    "RotatingFileHandler",
    "TimedFileHandler",
    "TimedRotatingFileHandler",
    "When",
    # 配置
    "LogConfig",
    "load_config",
    "new_logger",
    "parse_size",
    # 桥接
    "LoggerHandler",
    # 错误
    "LogError",
    "InvalidConfigurationError",
    "DestinationIOError",
]
