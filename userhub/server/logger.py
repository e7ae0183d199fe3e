"""
统一的日志配置模块

使用 loguru 提供灵活的日志配置，支持：
- 统一的日志格式
- 可配置的日志级别
- 输出到控制台、文件或两者
- 与服务配置共用同一个 .env 文件（LOG_* 变量）
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import find_env_file

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class LogSettings(BaseSettings):
    """日志配置，来源于环境变量或 .env 文件"""

    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/userhub-server.log"

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def setup_logger(settings: Optional[LogSettings] = None):
    """
    设置 loguru 日志器

    会先移除已有的 handler，可重复调用以按新配置重建输出。
    """
    if settings is None:
        settings = LogSettings()
    level = settings.log_level.upper()

    logger.remove()

    # 控制台输出
    if settings.log_to_console:
        logger.add(
            sys.stdout,
            format=settings.log_format,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    # 文件输出
    if settings.log_to_file:
        # 确保日志目录存在
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            settings.log_file_path,
            format=settings.log_format,
            level=level,
            rotation="10 MB",  # 日志轮转
            retention="30 days",  # 保留30天
            compression="zip",  # 压缩旧日志
            backtrace=True,
            diagnose=False
        )

    logger.debug(f"日志系统已初始化 - 级别: {level}, 控制台: {settings.log_to_console}, 文件: {settings.log_to_file}")


def get_logger(name: str = None):
    """
    获取 logger 实例

    Args:
        name: 模块名称，用于日志标识

    Returns:
        loguru.Logger: 配置好的 logger 实例
    """
    if name:
        return logger.bind(name=name)
    return logger


# 初始化日志系统（导入时自动执行）
setup_logger()

# 导出主要接口
__all__ = ["logger", "get_logger", "setup_logger", "LogSettings"]
