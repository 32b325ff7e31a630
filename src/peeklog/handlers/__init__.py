# -*- coding: utf-8 -*-
"""日志输出目标"""

from .base import Destination
from .file import FileHandler
from .rotate import (
    RotatingFileHandler,
    TimedFileHandler,
    TimedRotatingFileHandler,
    When,
    parse_when,
)
from .stream import NullHandler, StreamHandle

__all__ = [
    "Destination",
    "StreamHandle",
    "NullHandler",
    "FileHandler",
    "RotatingFileHandler",
    "TimedFileHandler",
    "TimedRotatingFileHandler",
    "When",
    "parse_when",
]
