# -*- coding: utf-8 -*-
"""
日志配置模块

提供：
- Pydantic 配置模型
- YAML 配置文件加载
- 按配置创建 Logger

示例 YAML 配置:
```yaml
log:
  handler: timed_rotating   # stdout | null | file | rotating | timed | timed_rotating
  filename: ./log/app.log
  level: debug
  flags: [level, time, file]
  when: hour
  interval: 1
  backup_count: 72
```
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import InvalidConfigurationError
from .handlers import NullHandler, When, parse_when
from .level import Flag, Level, parse_flags, parse_level
from .logger import Logger

logger = logging.getLogger(__name__)

HANDLER_TYPES = ("stdout", "null", "file", "rotating", "timed", "timed_rotating")

# 需要文件路径的输出类型
FILE_HANDLER_TYPES = ("file", "rotating", "timed", "timed_rotating")


def parse_size(value: Union[str, int, float, None]) -> int:
    """
    解析大小字符串为字节数

    支持格式:
    - 纯数字: 直接作为字节数
    - "512B": 512 字节
    - "10KB" / "10K": 10 * 1024 字节
    - "2MB" / "2M": 2 * 1024 * 1024 字节
    - "1GB" / "1G": 1024 ** 3 字节
    - "1.5MB"

    Args:
        value: 大小字符串或数字

    Returns:
        字节数（int）

    Raises:
        InvalidConfigurationError: 无法解析
    """
    if value is None:
        return 0

    if isinstance(value, bool):
        raise InvalidConfigurationError(f"invalid size: {value!r}")

    if isinstance(value, (int, float)):
        return int(value)

    if not isinstance(value, str):
        raise InvalidConfigurationError(f"invalid size: {value!r}")

    text = value.strip().upper()
    match = re.fullmatch(r"(\d+(?:\.\d+)?)\s*([KMG]?)B?", text)
    if not match:
        raise InvalidConfigurationError(f"invalid size: {value!r}")

    unit_multipliers = {
        "": 1,
        "K": 1024,
        "M": 1024 ** 2,
        "G": 1024 ** 3,
    }
    num, unit = match.groups()
    return int(float(num) * unit_multipliers[unit])


class LogConfig(BaseModel):
    """日志配置

    Attributes:
        handler: 输出类型
        filename: 日志文件路径（文件类输出必填）
        level: 日志级别阈值
        flags: 日志头部字段（仅 stdout/null 生效，文件类输出固定为全部字段）
        max_bytes: 按大小轮转的阈值
        backup_count: 最大保留备份数
        when: 时间轮转粒度
        interval: 时间轮转粒度倍数
    """

    handler: str = Field(default="stdout", description="输出类型")
    filename: str = Field(default="", description="日志文件路径")
    level: Level = Field(default=Level.INFO, description="日志级别")
    flags: int = Field(default=int(Flag.ALL), description="日志头部字段")
    max_bytes: int = Field(default=100 * 1024 * 1024, gt=0, description="单个文件最大字节数")
    backup_count: int = Field(default=0, ge=0, description="最大保留备份数")
    when: When = Field(default=When.DAY, description="时间轮转粒度")
    interval: int = Field(default=1, gt=0, description="时间轮转粒度倍数")

    @field_validator("handler", mode="before")
    @classmethod
    def validate_handler(cls, v):
        """校验输出类型"""
        name = str(v).strip().lower()
        if name not in HANDLER_TYPES:
            raise ValueError(f"invalid handler: {v!r}, must be one of {HANDLER_TYPES}")
        return name

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v):
        """解析日志级别"""
        return parse_level(v)

    @field_validator("flags", mode="before")
    @classmethod
    def validate_flags(cls, v):
        """解析头部字段"""
        return int(parse_flags(v))

    @field_validator("max_bytes", mode="before")
    @classmethod
    def validate_max_bytes(cls, v):
        """解析大小"""
        return parse_size(v)

    @field_validator("when", mode="before")
    @classmethod
    def validate_when(cls, v):
        """解析轮转粒度"""
        return parse_when(v)

    @model_validator(mode="after")
    def check_filename(self):
        """文件类输出必须指定路径"""
        if self.handler in FILE_HANDLER_TYPES and not self.filename:
            raise ValueError(f"filename is required for handler {self.handler!r}")
        return self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LogConfig":
        """从字典创建配置，支持 log 根节点

        Raises:
            InvalidConfigurationError: 配置非法
        """
        data = data or {}
        if isinstance(data.get("log"), dict):
            data = data["log"]
        try:
            return cls(**data)
        except ValidationError as e:
            raise InvalidConfigurationError(f"invalid log config: {e}") from e


def load_config(file_path: Union[str, Path]) -> LogConfig:
    """从 YAML 文件加载日志配置

    Raises:
        FileNotFoundError: 文件不存在
        InvalidConfigurationError: 配置非法
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigurationError(f"invalid yaml in {file_path}: {e}") from e

    if raw is not None and not isinstance(raw, dict):
        raise InvalidConfigurationError(f"invalid log config in {file_path}")

    config = LogConfig.from_dict(raw)
    logger.info(f"Loaded log config from {file_path}")
    return config


def new_logger(config: Optional[LogConfig] = None) -> Logger:
    """按配置创建 Logger

    Args:
        config: 日志配置，为 None 时使用默认配置（输出到 stdout）

    Raises:
        InvalidConfigurationError: 配置非法
        DestinationIOError: 打开日志文件失败
    """
    if config is None:
        config = LogConfig()

    log = Logger()
    handler = config.handler
    if handler == "stdout":
        log.init_std(config.level, config.flags)
    elif handler == "null":
        log.init(NullHandler(), config.level, config.flags)
    elif handler == "file":
        log.init_file(config.filename, config.level)
    elif handler == "rotating":
        log.init_rotating(
            config.filename, config.max_bytes, config.backup_count, config.level
        )
    elif handler == "timed":
        log.init_timed(config.filename, config.when, config.interval, config.level)
    else:
        log.init_timed_rotating(
            config.filename,
            config.when,
            config.interval,
            config.backup_count,
            config.level,
        )

    logger.info(
        f"日志初始化完成: handler={handler}, level={config.level.name}, "
        f"filename={config.filename}"
    )
    return log
