# -*- coding: utf-8 -*-
"""
Logger - 分级日志记录器

用法：
    log = Logger().init_rotating("./log/app.log", 2 * 1024 * 1024, 10, Level.TRACE)
    log.info("hello world")
    log.infof("%s %d", "hello", 123)
    log.close()

输出格式（各字段仅在对应标志开启时出现）：
    [Info  | 2021/09/17 23:00:00.123 | main.py:10] hello world

写日志永远不会抛异常：已关闭、低于阈值、写入失败的日志都被静默丢弃。
"""

import logging
import os
import sys
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Callable, Optional, Tuple, Union

from .bufpool import BufferPool
from .handlers import (
    Destination,
    FileHandler,
    RotatingFileHandler,
    StreamHandle,
    TimedFileHandler,
    TimedRotatingFileHandler,
    When,
)
from .level import LEVEL_NAMES, Flag, Level, parse_flags, parse_level

logger = logging.getLogger(__name__)

# 时间字段格式，毫秒单独拼接
TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

Caller = Tuple[str, int]


class Logger:
    """分级日志记录器

    创建后必须先调用一次 init 或 init_* 绑定输出目标。重复 init 会直接覆盖
    原有状态（不会关闭原输出目标），且不能与写日志并发调用。

    并发模型：
    - 输出目标锁保护输出目标的读取、替换、关闭以及每次写入，写入互斥，
      多线程输出的行不会交错
    - 缓冲区池有自己的锁
    - 阈值和关闭标志是单个属性，读取时不加锁

    close 与写日志并发时，已经通过关闭检查的写入在拿到锁后发现输出目标
    已被移除，日志被丢弃；close 不等待正在进行的写入。
    """

    def __init__(
        self,
        pool: Optional[BufferPool] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._level = Level.INFO
        self._flag = Flag.NONE
        self._handler_lock = threading.Lock()
        self._handler: Optional[Destination] = None
        self._pool = pool if pool is not None else BufferPool()
        self._clock = clock or datetime.now
        self._closed = False

    # ------------------------------------------------------------------
    # 初始化
    # ------------------------------------------------------------------

    def init(
        self,
        handler: Destination,
        level: Union[str, int, Level] = Level.INFO,
        flag: Union[int, Flag] = Flag.ALL,
    ) -> "Logger":
        """绑定已打开的输出目标

        Args:
            handler: 输出目标，由 Logger 接管，close 时一并关闭
            level: 日志级别阈值
            flag: Flag.TIME、Flag.FILE、Flag.LEVEL 的组合

        Returns:
            Logger: self

        Raises:
            InvalidConfigurationError: 级别或标志非法
        """
        level = parse_level(level)
        flag = parse_flags(flag)

        self._level = level
        self._flag = flag
        self._handler = handler
        self._pool.reset()
        self._closed = False
        logger.debug(
            f"Logger initialized: handler={type(handler).__name__}, "
            f"level={level.name}, flag={int(flag)}"
        )
        return self

    def init_std(
        self,
        level: Union[str, int, Level] = Level.INFO,
        flag: Union[int, Flag] = Flag.ALL,
        writer=None,
    ) -> "Logger":
        """输出到标准输出（或指定 writer）"""
        level = parse_level(level)
        return self.init(StreamHandle(writer), level, flag)

    def init_file(self, name: str, level: Union[str, int, Level] = Level.INFO) -> "Logger":
        """输出到普通文件，格式标志固定为 Flag.ALL

        Raises:
            InvalidConfigurationError: 级别非法
            DestinationIOError: 创建目录或打开文件失败
        """
        level = parse_level(level)
        return self.init(FileHandler(name), level, Flag.ALL)

    def init_rotating(
        self,
        name: str,
        max_bytes: int,
        backup_count: int = 0,
        level: Union[str, int, Level] = Level.INFO,
    ) -> "Logger":
        """输出到按大小轮转的文件

        Args:
            name: 日志文件路径
            max_bytes: 单个文件最大字节数
            backup_count: 最大保留备份数
            level: 日志级别阈值
        """
        level = parse_level(level)
        handler = RotatingFileHandler(name, max_bytes, backup_count)
        return self.init(handler, level, Flag.ALL)

    def init_timed(
        self,
        name: str,
        when: Union[str, int, When] = When.DAY,
        interval: int = 1,
        level: Union[str, int, Level] = Level.INFO,
    ) -> "Logger":
        """输出到按时间轮转的文件，不清理历史文件"""
        level = parse_level(level)
        handler = TimedFileHandler(name, when, interval, clock=self._clock)
        return self.init(handler, level, Flag.ALL)

    def init_timed_rotating(
        self,
        name: str,
        when: Union[str, int, When] = When.DAY,
        interval: int = 1,
        backup_count: int = 0,
        level: Union[str, int, Level] = Level.INFO,
    ) -> "Logger":
        """输出到按时间轮转的文件，最多保留 backup_count 个历史文件"""
        level = parse_level(level)
        handler = TimedRotatingFileHandler(
            name, when, interval, backup_count, clock=self._clock
        )
        return self.init(handler, level, Flag.ALL)

    # ------------------------------------------------------------------
    # 配置
    # ------------------------------------------------------------------

    @property
    def level(self) -> Level:
        return self._level

    @property
    def flag(self) -> Flag:
        return self._flag

    @property
    def handler(self) -> Optional[Destination]:
        return self._handler

    @property
    def pool(self) -> BufferPool:
        return self._pool

    @property
    def closed(self) -> bool:
        return self._closed

    def set_level(self, level: Union[str, int, Level]) -> None:
        """设置日志级别阈值，低于阈值的日志不输出"""
        self._level = parse_level(level)

    def set_level_by_name(self, name: str) -> None:
        """按名称设置级别，name 为 trace、debug、info、warn、error、fatal 之一"""
        self.set_level(str(name))

    def set_flag(self, flag: Union[int, Flag]) -> None:
        self._flag = parse_flags(flag)

    def set_handler(self, handler: Destination) -> None:
        """替换输出目标，原输出目标被关闭

        已关闭的 Logger 不再接受新的输出目标，传入的 handler 会被直接关闭。
        """
        with self._handler_lock:
            if self._closed:
                _close_quietly(handler)
                return
            old, self._handler = self._handler, handler
            if old is not None and old is not handler:
                _close_quietly(old)

    def close(self) -> None:
        """关闭 Logger 和输出目标，重复调用无副作用"""
        with self._handler_lock:
            if self._closed:
                return
            self._closed = True
            handler, self._handler = self._handler, None
            if handler is not None:
                _close_quietly(handler)

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # 输出
    # ------------------------------------------------------------------

    def output(
        self,
        call_depth: int,
        level: Level,
        msg,
        args: tuple = (),
        caller: Optional[Caller] = None,
    ) -> None:
        """格式化并写入一条日志

        Args:
            call_depth: 调用者所在栈帧相对 output 的深度，1 表示直接调用 output 的函数
            level: 日志级别，非法级别的日志被丢弃
            msg: 消息，args 非空时按 % 格式化
            args: 格式化参数
            caller: 显式指定的 (文件, 行号)，为 None 时从调用栈获取
        """
        if self._closed:
            return

        try:
            level = parse_level(level)
        except ValueError:
            logger.debug(f"Dropped log with invalid level: {level!r}")
            return

        if level < self._level:
            return

        flag = self._flag
        fields = []
        if flag & Flag.LEVEL:
            fields.append(LEVEL_NAMES[level])

        if flag & Flag.TIME:
            now = self._clock()
            fields.append(f"{now.strftime(TIME_FORMAT)}.{now.microsecond // 1000:03d}")

        if flag & Flag.FILE:
            if caller is None:
                caller = _find_caller(call_depth + 1)
            file, line = caller
            fields.append(f"{os.path.basename(file)}:{line}")

        s = _render(msg, args)

        buf = self._pool.get()
        try:
            if fields:
                buf += b"["
                buf += " | ".join(fields).encode("utf-8")
                buf += b"] "
            buf += s.encode("utf-8", errors="replace")
            if not s.endswith("\n"):
                buf += b"\n"

            with self._handler_lock:
                handler = self._handler
                if handler is None:
                    return
                try:
                    handler.write(buf)
                except Exception as e:
                    logger.debug(f"Failed to write log to {type(handler).__name__}: {e}")
        finally:
            self._pool.put(buf)

    def log(self, level: Union[str, int, Level], msg, *args, stacklevel: int = 1) -> None:
        """以指定级别输出，stacklevel 指定报告第几层调用者"""
        try:
            level = parse_level(level)
        except ValueError:
            return
        self.output(stacklevel + 1, level, msg, args)

    def trace(self, *v) -> None:
        """以 Trace 级别输出，多个参数以空格连接"""
        self.output(2, Level.TRACE, sprint(v))

    def debug(self, *v) -> None:
        self.output(2, Level.DEBUG, sprint(v))

    def info(self, *v) -> None:
        self.output(2, Level.INFO, sprint(v))

    def warn(self, *v) -> None:
        self.output(2, Level.WARN, sprint(v))

    def error(self, *v) -> None:
        self.output(2, Level.ERROR, sprint(v))

    def fatal(self, *v) -> None:
        """以 Fatal 级别输出，不会退出进程"""
        self.output(2, Level.FATAL, sprint(v))

    def tracef(self, format: str, *v) -> None:
        """以 Trace 级别按 % 格式化输出"""
        self.output(2, Level.TRACE, format, v)

    def debugf(self, format: str, *v) -> None:
        self.output(2, Level.DEBUG, format, v)

    def infof(self, format: str, *v) -> None:
        self.output(2, Level.INFO, format, v)

    def warnf(self, format: str, *v) -> None:
        self.output(2, Level.WARN, format, v)

    def errorf(self, format: str, *v) -> None:
        self.output(2, Level.ERROR, format, v)

    def fatalf(self, format: str, *v) -> None:
        self.output(2, Level.FATAL, format, v)


def sprint(v: tuple) -> str:
    """多个值以空格连接"""
    return " ".join(str(x) for x in v)


def _render(msg, args: tuple) -> str:
    """按 % 格式化消息，格式化失败时原样拼接参数"""
    msg = str(msg)
    if not args:
        return msg
    # 与 logging 一致，单个字典参数用于命名占位符
    if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
        args = args[0]
    try:
        return msg % args
    except (TypeError, ValueError, KeyError) as e:
        logger.debug(f"Failed to format log message {msg!r}: {e}")
        if isinstance(args, Mapping):
            return f"{msg} {args}"
        return " ".join([msg] + [str(a) for a in args])


def _find_caller(depth: int) -> Caller:
    """获取调用栈上第 depth 层的文件名和行号，0 表示 _find_caller 自身"""
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return "???", 0
    return frame.f_code.co_filename, frame.f_lineno


def _close_quietly(handler: Destination) -> None:
    try:
        handler.close()
    except Exception as e:
        logger.debug(f"Failed to close {type(handler).__name__}: {e}")
