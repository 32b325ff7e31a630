# -*- coding: utf-8 -*-
"""
日志级别与格式标志

级别从低到高：Trace < Debug < Info < Warn < Error < Fatal，
级别越高越严重。只有级别不低于阈值的日志才会输出。

注意：Fatal 只是一个日志级别，不会终止进程。
"""

from enum import IntEnum, IntFlag
from typing import Union

from .errors import InvalidConfigurationError


class Level(IntEnum):
    """日志级别枚举"""
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5

    @property
    def label(self) -> str:
        """输出用的定宽级别名"""
        return LEVEL_NAMES[self]


class Flag(IntFlag):
    """日志头部格式标志，可组合使用"""
    NONE = 0
    TIME = 1   # 时间，格式 YYYY/MM/DD HH:MM:SS.mmm
    FILE = 2   # 文件名和行号，格式 file.py:123
    LEVEL = 4  # 级别，格式 Trace|Debug|Info ...
    ALL = TIME | FILE | LEVEL


# 定宽级别名
LEVEL_NAMES = ("Trace", "Debug", "Info ", "Warn ", "Error", "Fatal")

_NAME_MAP = {
    "trace": Level.TRACE,
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "error": Level.ERROR,
    "fatal": Level.FATAL,
}


def parse_level(value: Union[str, int, Level]) -> Level:
    """将级别名或数值转换为 Level

    Args:
        value: 级别名（不区分大小写）、整数或 Level

    Returns:
        Level: 日志级别

    Raises:
        InvalidConfigurationError: 无法识别的级别
    """
    if isinstance(value, Level):
        return value

    if isinstance(value, bool):
        raise InvalidConfigurationError(f"invalid log level: {value!r}")

    if isinstance(value, int):
        try:
            return Level(value)
        except ValueError:
            raise InvalidConfigurationError(f"invalid log level: {value}") from None

    if isinstance(value, str):
        level = _NAME_MAP.get(value.strip().lower())
        if level is not None:
            return level

    raise InvalidConfigurationError(f"invalid log level: {value!r}")


def parse_flags(value) -> Flag:
    """将标志名列表（或整数）转换为 Flag

    支持 ["time", "file", "level"] 的任意组合，"all" 表示全部。
    """
    if isinstance(value, Flag):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0 or value & ~int(Flag.ALL):
            raise InvalidConfigurationError(f"invalid log flags: {value}")
        return Flag(value)

    if isinstance(value, str):
        value = [v for v in value.replace("|", ",").split(",") if v.strip()]

    flags = Flag.NONE
    for name in value or []:
        key = str(name).strip().upper()
        if key not in Flag.__members__:
            raise InvalidConfigurationError(f"invalid log flag: {name!r}")
        flags |= Flag[key]
    return flags
