# -*- coding: utf-8 -*-
"""
默认 Logger

进程内不会隐式创建任何全局 Logger，需要先显式调用 set_default。
未设置默认 Logger 时，模块级的 trace/info/... 函数直接丢弃日志。

用法：
    import peeklog.default as log

    log.set_default(Logger().init_std(Level.DEBUG))
    log.info("hello world")
    log.infof("%s %d", "hello", 123)
"""

import threading
from typing import Optional

from .level import Level
from .logger import Logger, sprint

_lock = threading.Lock()
_default: Optional[Logger] = None


def set_default(logger: Optional[Logger]) -> Optional[Logger]:
    """设置默认 Logger，返回之前的默认 Logger（不会关闭它）"""
    global _default
    with _lock:
        old, _default = _default, logger
    return old


def get_default() -> Optional[Logger]:
    return _default


def close_default() -> None:
    """关闭并移除默认 Logger"""
    old = set_default(None)
    if old is not None:
        old.close()


def _output(level: Level, msg, args: tuple = ()) -> None:
    logger = _default
    if logger is None:
        return
    # 0 output, 1 _output, 2 模块函数, 3 调用者
    logger.output(3, level, msg, args)


def trace(*v) -> None:
    _output(Level.TRACE, sprint(v))


def debug(*v) -> None:
    _output(Level.DEBUG, sprint(v))


def info(*v) -> None:
    _output(Level.INFO, sprint(v))


def warn(*v) -> None:
    _output(Level.WARN, sprint(v))


def error(*v) -> None:
    _output(Level.ERROR, sprint(v))


def fatal(*v) -> None:
    _output(Level.FATAL, sprint(v))


def tracef(format: str, *v) -> None:
    _output(Level.TRACE, format, v)


def debugf(format: str, *v) -> None:
    _output(Level.DEBUG, format, v)


def infof(format: str, *v) -> None:
    _output(Level.INFO, format, v)


def warnf(format: str, *v) -> None:
    _output(Level.WARN, format, v)


def errorf(format: str, *v) -> None:
    _output(Level.ERROR, format, v)


def fatalf(format: str, *v) -> None:
    _output(Level.FATAL, format, v)
