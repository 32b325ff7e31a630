# -*- coding: utf-8 -*-
"""
日志轮转模块

支持：
- 按文件大小轮转，序列备份命名（app.log, app.log.1, app.log.2, ...）
- 按时间间隔轮转，时间前缀命名（2021-09-17-23_app.log）
- 按时间轮转并按数量清理历史文件

轮转过程中的 IO 错误（重命名、删除、列目录）都是尽力而为，
不会抛给调用方，日志继续写入轮转后得到的文件句柄。
"""

import logging
import os
from datetime import datetime, timedelta
from enum import IntEnum
from typing import BinaryIO, Callable, List, Optional, Tuple, Union

from ..errors import InvalidConfigurationError
from .base import Destination
from .file import make_parent_dirs, open_file

logger = logging.getLogger(__name__)


class RotatingFileHandler(Destination):
    """按大小轮转的文件输出目标

    每次写入前检查：若当前字节数加上待写入字节数超过 max_bytes，
    先轮转再写入，单次写入不会被拆分到两个文件。

    轮转时 app.log 重命名为 app.log.1，原 app.log.1 .. app.log.{N-1}
    依次后移，超出 backup_count 的最旧备份被删除。backup_count 为 0 时
    直接截断当前文件，不保留备份。
    """

    def __init__(self, name: str, max_bytes: int, backup_count: int = 0):
        """初始化

        Args:
            name: 日志文件路径
            max_bytes: 单个文件最大字节数，必须大于 0
            backup_count: 最大保留备份数

        Raises:
            InvalidConfigurationError: 参数非法
            DestinationIOError: 创建目录或打开文件失败
        """
        if isinstance(max_bytes, bool) or not isinstance(max_bytes, int) or max_bytes <= 0:
            raise InvalidConfigurationError(f"invalid max bytes: {max_bytes!r}")
        if isinstance(backup_count, bool) or not isinstance(backup_count, int) or backup_count < 0:
            raise InvalidConfigurationError(f"invalid backup count: {backup_count!r}")

        self.name = name
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        make_parent_dirs(name)
        self._fd: Optional[BinaryIO] = open_file(name, "ab")
        # 已有文件的大小作为初始字节数
        self._cur_bytes = os.fstat(self._fd.fileno()).st_size

    @property
    def cur_bytes(self) -> int:
        """自上次轮转以来写入的字节数"""
        return self._cur_bytes

    def should_rollover(self, length: int) -> bool:
        # 空文件不轮转，超大的单条日志直接写入
        return self._cur_bytes > 0 and self._cur_bytes + length > self.max_bytes

    def write(self, data: bytes) -> int:
        if self.should_rollover(len(data)):
            self.do_rollover()

        if self._fd is None:
            # 上次轮转没能打开新文件，重试
            self._fd = open(self.name, "ab")
            self._cur_bytes = os.fstat(self._fd.fileno()).st_size

        n = self._fd.write(data)
        self._fd.flush()
        self._cur_bytes += n
        return n

    def backup_name(self, index: int) -> str:
        return f"{self.name}.{index}"

    def do_rollover(self) -> None:
        """执行一次轮转

        当前文件没能重命名为备份时以追加模式重新打开，已有内容不会被截断。
        """
        self._close_fd()

        renamed = True
        if self.backup_count > 0:
            for i in range(self.backup_count - 1, 0, -1):
                sfn = self.backup_name(i)
                dfn = self.backup_name(i + 1)
                if os.path.exists(sfn):
                    self._replace(sfn, dfn)
            renamed = self._replace(self.name, self.backup_name(1))

        try:
            self._fd = open(self.name, "wb" if renamed else "ab")
        except OSError as e:
            logger.error(f"Failed to reopen log file {self.name}: {e}")
            self._fd = None
            self._cur_bytes = 0
            return

        if renamed:
            self._cur_bytes = 0
        else:
            logger.error(f"Failed to rotate {self.name}, keep appending to it")
            self._cur_bytes = os.fstat(self._fd.fileno()).st_size

    @staticmethod
    def _replace(src: str, dst: str) -> bool:
        """将 src 重命名为 dst，已存在的 dst 先删除，返回是否成功"""
        try:
            if os.path.exists(dst):
                os.remove(dst)
            os.replace(src, dst)
        except OSError as e:
            logger.debug(f"Failed to rename {src} to {dst}: {e}")
            return False
        return True

    def _close_fd(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fd.close()
        except OSError as e:
            logger.debug(f"Failed to close {self.name}: {e}")

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            fd.close()


class When(IntEnum):
    """时间轮转粒度"""
    SECOND = 0
    MINUTE = 1
    HOUR = 2
    DAY = 3


# 粒度 -> (单位时长, 文件名时间前缀格式)
WHEN_SPECS = {
    When.SECOND: (timedelta(seconds=1), "%Y-%m-%d-%H-%M-%S"),
    When.MINUTE: (timedelta(minutes=1), "%Y-%m-%d-%H-%M"),
    When.HOUR: (timedelta(hours=1), "%Y-%m-%d-%H"),
    When.DAY: (timedelta(days=1), "%Y-%m-%d"),
}

_WHEN_NAMES = {
    "s": When.SECOND,
    "second": When.SECOND,
    "m": When.MINUTE,
    "minute": When.MINUTE,
    "h": When.HOUR,
    "hour": When.HOUR,
    "d": When.DAY,
    "day": When.DAY,
}


def parse_when(value: Union[str, int, When]) -> When:
    """解析轮转粒度

    Args:
        value: When、整数 0-3 或名称（second/minute/hour/day，或 s/m/h/d）

    Raises:
        InvalidConfigurationError: 无法识别的粒度
    """
    if isinstance(value, When):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return When(value)
        except ValueError:
            raise InvalidConfigurationError(f"invalid when_rotate: {value}") from None
    if isinstance(value, str):
        when = _WHEN_NAMES.get(value.strip().lower())
        if when is not None:
            return when
    raise InvalidConfigurationError(f"invalid when_rotate: {value!r}")


class TimedFileHandler(Destination):
    """按时间间隔轮转的文件输出目标

    文件命名格式：{时间前缀}_{文件名}，与配置路径位于同一目录。
    例如路径 ./log/app.log、粒度 HOUR 时，文件为 ./log/2021-09-17-23_app.log。
    时间前缀使文件名按创建时间字典序有序。

    写入时若当前时间超过 rollover_at（打开时间 + 间隔），
    关闭当前文件，以当前时间生成新文件名并以追加模式打开。
    """

    def __init__(
        self,
        name: str,
        when: Union[str, int, When] = When.DAY,
        interval: int = 1,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """初始化

        Args:
            name: 日志文件路径，文件名部分作为基础名
            when: 轮转粒度
            interval: 粒度倍数，实际间隔为 interval 个粒度单位
            clock: 当前时间函数，默认 datetime.now

        Raises:
            InvalidConfigurationError: 参数非法
            DestinationIOError: 创建目录或打开文件失败
        """
        self.when = parse_when(when)
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise InvalidConfigurationError(f"invalid rotate interval: {interval!r}")

        self.dirname, self.basename = os.path.split(name)
        if not self.basename:
            raise InvalidConfigurationError(f"invalid log file name: {name!r}")

        unit, self.suffix = WHEN_SPECS[self.when]
        self.interval = unit * interval
        self._clock = clock or datetime.now

        make_parent_dirs(name)
        now = self._clock()
        self.filename = self.filename_at(now)
        self.rollover_at = now + self.interval
        self._fd: Optional[BinaryIO] = open_file(self.filename, "ab")

    def filename_at(self, t: datetime) -> str:
        """时间 t 对应的日志文件路径"""
        return os.path.join(self.dirname, f"{t.strftime(self.suffix)}_{self.basename}")

    def parse_filename(self, filename: str) -> Optional[datetime]:
        """解析 {时间前缀}_{文件名} 格式的文件名，格式不对返回 None"""
        tail = "_" + self.basename
        if not filename.endswith(tail):
            return None
        stamp = filename[: -len(tail)]
        try:
            t = datetime.strptime(stamp, self.suffix)
        except ValueError:
            return None
        # strptime 接受不补零的字段，只认本模块生成的格式
        if t.strftime(self.suffix) != stamp:
            return None
        return t

    def should_rollover(self, now: datetime) -> bool:
        return now > self.rollover_at

    def write(self, data: bytes) -> int:
        now = self._clock()
        if self.should_rollover(now):
            self.do_rollover(now)

        if self._fd is None:
            self._fd = open(self.filename, "ab")

        n = self._fd.write(data)
        self._fd.flush()
        return n

    def do_rollover(self, now: datetime) -> None:
        """关闭当前文件，打开 now 对应的新文件"""
        if self._fd is not None:
            fd, self._fd = self._fd, None
            try:
                fd.close()
            except OSError as e:
                logger.debug(f"Failed to close {self.filename}: {e}")

        self.filename = self.filename_at(now)
        self.rollover_at = now + self.interval
        try:
            self._fd = open(self.filename, "ab")
        except OSError as e:
            logger.error(f"Failed to create file {self.filename}: {e}")

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            fd.close()


class TimedRotatingFileHandler(TimedFileHandler):
    """按时间轮转并按数量清理历史文件

    初始化时以及每次时间轮转后，列出目录中所有 {合法时间前缀}_{文件名}
    格式的文件（格式不对的跳过），不计当前正在写入的文件，按时间前缀
    从旧到新排序，删除最旧的文件直到最多保留 backup_count 个。
    """

    def __init__(
        self,
        name: str,
        when: Union[str, int, When] = When.DAY,
        interval: int = 1,
        backup_count: int = 0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if isinstance(backup_count, bool) or not isinstance(backup_count, int) or backup_count < 0:
            raise InvalidConfigurationError(f"invalid backup count: {backup_count!r}")
        self.backup_count = backup_count

        super().__init__(name, when=when, interval=interval, clock=clock)
        self.cleanup_old_files()

    def do_rollover(self, now: datetime) -> None:
        super().do_rollover(now)
        self.cleanup_old_files()

    def list_backups(self) -> List[str]:
        """列出历史日志文件，按时间前缀从旧到新排序

        Raises:
            OSError: 列目录失败
        """
        current = os.path.basename(self.filename)
        matches: List[Tuple[datetime, str]] = []
        with os.scandir(self.dirname or os.curdir) as it:
            for entry in it:
                # 不递归子目录
                if entry.name == current or not entry.is_file():
                    continue
                t = self.parse_filename(entry.name)
                if t is None:
                    continue
                matches.append((t, entry.name))

        matches.sort()
        return [os.path.join(self.dirname, name) for _, name in matches]

    def cleanup_old_files(self) -> None:
        """删除超出 backup_count 的最旧文件"""
        try:
            files = self.list_backups()
        except OSError as e:
            logger.debug(f"Failed to list {self.dirname}: {e}")
            return

        excess = len(files) - self.backup_count
        for filepath in files[:max(excess, 0)]:
            try:
                os.remove(filepath)
                logger.debug(f"Deleted old log file: {filepath}")
            except OSError as e:
                logger.debug(f"Failed to delete {filepath}: {e}")
