#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
pytest 配置文件

提供测试夹具和配置
"""

import sys
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import List

import pytest

# 将 src 目录添加到 Python 路径
ROOT_DIR = Path(__file__).parent.parent
SRC_DIR = ROOT_DIR / "src"
sys.path.insert(0, str(SRC_DIR))

from peeklog.handlers import Destination  # noqa: E402


class FakeClock:
    """可手动推进的时钟"""

    def __init__(self, start: datetime):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self.now

    def advance(self, **kwargs) -> datetime:
        with self._lock:
            self.now = self.now + timedelta(**kwargs)
            return self.now


class RecordingDestination(Destination):
    """记录写入内容和 close 次数的输出目标"""

    def __init__(self, fail: bool = False):
        self.chunks: List[bytes] = []
        self.close_count = 0
        self.fail = fail

    def write(self, data: bytes) -> int:
        if self.fail:
            raise OSError("disk full")
        # data 会被缓冲区池复用，必须拷贝
        self.chunks.append(bytes(data))
        return len(data)

    def close(self) -> None:
        self.close_count += 1

    @property
    def lines(self) -> List[str]:
        return [c.decode("utf-8") for c in self.chunks]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """项目根目录"""
    return ROOT_DIR


@pytest.fixture(scope="function")
def temp_dir(tmp_path: Path) -> Path:
    """临时目录（每个测试函数独立）"""
    return tmp_path


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    """固定起点的假时钟"""
    return FakeClock(datetime(2021, 9, 17, 23, 0, 30))


@pytest.fixture(scope="function")
def recorder() -> RecordingDestination:
    return RecordingDestination()
