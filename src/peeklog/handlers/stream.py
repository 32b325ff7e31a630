# -*- coding: utf-8 -*-
"""
流输出目标

- StreamHandle: 写入任意 writer（stdout、stderr、BytesIO ...）
- NullHandler: 丢弃所有日志
"""

import sys
from typing import IO, Optional

from .base import Destination


class StreamHandle(Destination):
    """写入指定 writer 的输出目标

    优先写入文本流的底层二进制缓冲区（sys.stdout.buffer），
    否则按 UTF-8 解码后写入文本。close 不会关闭 writer。
    """

    def __init__(self, writer: Optional[IO] = None):
        if writer is None:
            writer = sys.stdout
        self.writer = writer

    def write(self, data: bytes) -> int:
        w = self.writer
        buffer = getattr(w, "buffer", None)
        if buffer is not None:
            # 文本层可能还有未刷出的内容
            w.flush()
            n = buffer.write(data)
            buffer.flush()
            return len(data) if n is None else n

        try:
            n = w.write(data)
        except TypeError:
            # 纯文本 writer，例如 io.StringIO
            w.write(bytes(data).decode("utf-8", errors="replace"))
            n = len(data)

        flush = getattr(w, "flush", None)
        if flush is not None:
            flush()
        return len(data) if n is None else n

    def close(self) -> None:
        pass


class NullHandler(Destination):
    """丢弃所有日志"""

    def write(self, data: bytes) -> int:
        return len(data)

    def close(self) -> None:
        pass
