# -*- coding: utf-8 -*-
"""
格式化缓冲区池

日志热路径上复用 bytearray，减少内存分配。池容量有上限，
超出容量归还的缓冲区直接丢弃。
"""

import threading
from typing import List

# 池中最多保留的缓冲区数量
MAX_BUF_POOL_SIZE = 16


class BufferPool:
    """有界缓冲区池

    缓冲区要么被某次写日志操作借出，要么在池中空闲，不会同时处于两种状态。
    """

    def __init__(self, capacity: int = MAX_BUF_POOL_SIZE):
        if capacity < 0:
            raise ValueError(f"invalid pool capacity: {capacity}")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._bufs: List[bytearray] = []

    def get(self) -> bytearray:
        """借出一个空缓冲区，池空时新分配"""
        with self._lock:
            if self._bufs:
                return self._bufs.pop()
        return bytearray()

    def put(self, buf: bytearray) -> None:
        """归还缓冲区，池满时丢弃"""
        buf.clear()
        with self._lock:
            if len(self._bufs) >= self.capacity:
                return
            # 重复归还同一个缓冲区会产生别名
            if any(b is buf for b in self._bufs):
                return
            self._bufs.append(buf)

    def reset(self) -> None:
        """清空池"""
        with self._lock:
            self._bufs = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._bufs)
