"""
日志工具模块
提供统一的日志配置和获取方法
"""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime


# 日志目录，可通过环境变量覆盖
LOG_DIR = Path(os.getenv('RPI_MONITOR_LOG_DIR', './logs'))

# 日志格式
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 全局日志级别
LOG_LEVEL = logging.getLevelName(os.getenv('RPI_MONITOR_LOG_LEVEL', 'INFO').upper())
if not isinstance(LOG_LEVEL, int):
    LOG_LEVEL = logging.INFO

# 用于存储已创建的 logger，避免重复配置
_loggers = {}


def getLogger(name: str, level: int | None = None) -> logging.Logger:
    """
    获取配置好的 logger 实例

    Args:
        name: logger 名称，通常使用模块名
        level: 日志级别，默认使用全局配置的 LOG_LEVEL

    Returns:
        logging.Logger: 配置好的 logger 实例
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else LOG_LEVEL)

    # 防止日志向上传播到根 logger（避免重复输出）
    logger.propagate = False
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(console_handler)

    # 每个 logger 一个独立的日志文件
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        safe_name = name.replace('.', '_').replace('/', '_').replace('\\', '_')
        file_handler = RotatingFileHandler(
            LOG_DIR / f'{safe_name}.log',
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        # 只读文件系统（例如 SD 卡挂载为只读）时只输出到控制台
        logger.warning('Log directory %s is not writable; logging to stdout only', LOG_DIR)

    _loggers[name] = logger
    return logger


def set_global_log_level(level: int):
    """
    设置全局日志级别

    Args:
        level: 日志级别 (logging.DEBUG, logging.INFO, logging.WARNING, ...)
    """
    global LOG_LEVEL
    LOG_LEVEL = level

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def clear_old_logs(days: int = 7):
    """
    清理指定天数之前的日志文件

    Args:
        days: 保留最近多少天的日志，默认 7 天
    """
    if not LOG_DIR.exists():
        return

    current_time = datetime.now()
    for log_file in LOG_DIR.glob('*.log*'):
        if not log_file.is_file():
            continue
        age_days = (current_time - datetime.fromtimestamp(log_file.stat().st_mtime)).days
        if age_days > days:
            try:
                log_file.unlink()
            except OSError:
                getLogger(__name__).warning('Failed to delete old log file %s', log_file, exc_info=True)
