# -*- coding: utf-8 -*-
"""
错误类型

- InvalidConfigurationError: 初始化参数非法（级别、大小阈值、轮转粒度等）
- DestinationIOError: 初始化时打开文件或创建目录失败

运行期的写入和轮转错误不会抛给调用方。
"""


class LogError(Exception):
    """日志库错误基类"""

    pass


class InvalidConfigurationError(LogError, ValueError):
    """配置错误"""

    pass


class DestinationIOError(LogError):
    """输出目标 IO 错误"""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
