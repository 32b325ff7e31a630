# -*- coding: utf-8 -*-
"""
标准库 logging 桥接

将 logging 模块的日志记录转发到 peeklog.Logger，复用其格式和轮转。

用法：
    log = Logger().init_rotating("./log/app.log", 10 * 1024 * 1024, 5)
    logging.getLogger().addHandler(LoggerHandler(log))
"""

import logging

from .level import Level
from .logger import Logger


def level_from_logging(levelno: int) -> Level:
    """logging 级别映射到 Level"""
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    return Level.TRACE


class LoggerHandler(logging.Handler):
    """基于 peeklog.Logger 的日志处理器

    调用位置取自日志记录的 pathname 和 lineno。peeklog 自身的诊断日志
    不会被转发，避免写入失败时递归。
    """

    def __init__(self, log: Logger, level: int = logging.NOTSET, close_logger: bool = False):
        """初始化

        Args:
            log: 目标 Logger
            level: 处理器级别
            close_logger: 处理器关闭时是否一并关闭 Logger
        """
        super().__init__(level)
        self.log = log
        self.close_logger = close_logger

    def emit(self, record: logging.LogRecord):
        if record.name == "peeklog" or record.name.startswith("peeklog."):
            return
        try:
            # 默认格式为 %(message)s，异常堆栈附加在消息之后
            msg = self.format(record)
            self.log.output(
                1,
                level_from_logging(record.levelno),
                msg,
                caller=(record.pathname, record.lineno),
            )
        except Exception:
            self.handleError(record)

    def close(self):
        if self.close_logger:
            self.log.close()
        super().close()
