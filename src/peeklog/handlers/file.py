# -*- coding: utf-8 -*-
"""
普通文件输出目标

以追加模式写入单个日志文件，不做轮转。
"""

import os
from typing import BinaryIO, Optional

from ..errors import DestinationIOError
from .base import Destination


def make_parent_dirs(name: str) -> None:
    """递归创建日志文件所在目录

    Raises:
        DestinationIOError: 目录创建失败
    """
    dirname = os.path.dirname(name)
    if not dirname:
        return
    try:
        os.makedirs(dirname, mode=0o755, exist_ok=True)
    except OSError as e:
        raise DestinationIOError(f"failed to create log dir {dirname}: {e}", dirname) from e


def open_file(name: str, mode: str = "ab") -> BinaryIO:
    """打开日志文件

    Raises:
        DestinationIOError: 打开失败
    """
    try:
        return open(name, mode)
    except OSError as e:
        raise DestinationIOError(f"failed to open log file {name}: {e}", name) from e


class FileHandler(Destination):
    """普通文件输出目标

    Args:
        name: 日志文件路径，父目录不存在时自动创建
    """

    def __init__(self, name: str):
        self.name = name
        make_parent_dirs(name)
        self._fd: Optional[BinaryIO] = open_file(name)

    def write(self, data: bytes) -> int:
        if self._fd is None:
            return 0
        n = self._fd.write(data)
        self._fd.flush()
        return n

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            fd.close()
