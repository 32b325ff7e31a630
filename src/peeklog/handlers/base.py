# -*- coding: utf-8 -*-
"""Destination - 日志输出目标抽象基类

Logger 只通过 write / close 两个方法与输出目标交互。
"""

from abc import ABC, abstractmethod


class Destination(ABC):
    """日志输出目标抽象基类

    实现类独占自己的文件句柄。Logger 在持有输出目标锁时才会调用
    write / close，因此实现类本身不需要加锁。
    """

    @abstractmethod
    def write(self, data: bytes) -> int:
        """写入一条完整的日志

        Args:
            data: 格式化好的日志字节，返回后会被缓冲区池复用，不能保留引用

        Returns:
            int: 写入的字节数
        """

    @abstractmethod
    def close(self) -> None:
        """关闭输出目标，重复调用无副作用"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
