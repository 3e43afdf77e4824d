"""
File: app/core/logging.py
Description: 全局日志配置模块 (Loguru)

本模块负责：
1. 接管 Python 标准库 logging (Uvicorn / FastAPI / SQLAlchemy)
2. 配置控制台与文件 Sink（开发环境文本，生产环境 JSON）
3. 确保所有日志包含 request_id（由中间件注入）

Author: jinmozhe
Created: 2025-11-24
Updated: 2026-03-02 (Sink builder, intercept sqlalchemy.engine)
"""

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from app.core.config import settings

# 需要被接管的第三方 logger 前缀
INTERCEPTED_PREFIXES: tuple[str, ...] = ("uvicorn.", "fastapi.", "sqlalchemy.")


class InterceptHandler(logging.Handler):
    """
    将标准库 logging 记录转发到 Loguru。
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 跳过 logging 模块自身的栈帧，保证行号指向真正的调用方
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            if frame.f_back:
                frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def format_record(record: dict[str, Any]) -> str:
    """文本格式；存在 request_id / user_id 时追加到行尾。"""
    format_string = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    extra = record["extra"]
    if extra.get("request_id"):
        format_string += " | <magenta>req_id={extra[request_id]}</magenta>"
    if extra.get("user_id"):
        format_string += " | <blue>user_id={extra[user_id]}</blue>"

    format_string += "\n{exception}"
    return format_string


def _sink_config(colorize: bool) -> dict[str, Any]:
    """构造单个 Sink 的公共参数"""
    config: dict[str, Any] = {
        "level": settings.LOG_LEVEL,
        "enqueue": True,
        "backtrace": True,
        "diagnose": settings.LOG_DIAGNOSE,
    }
    if settings.LOG_JSON_FORMAT:
        config["serialize"] = True
    else:
        config["format"] = format_record
        config["colorize"] = colorize
    return config


def setup_logging() -> None:
    """
    初始化日志配置。
    应在 main.py 的 lifespan 启动阶段调用。
    """
    # 1. 拦截标准库日志
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(settings.LOG_LEVEL)

    for name in list(logging.root.manager.loggerDict.keys()):
        if name.startswith(INTERCEPTED_PREFIXES):
            logging.getLogger(name).handlers = []
            logging.getLogger(name).propagate = True

    # 2. 重建 Loguru Sink
    logger.remove()
    logger.add(sys.stdout, **_sink_config(colorize=True))

    if settings.LOG_FILE_ENABLED:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_config = _sink_config(colorize=False)
        file_config.update(
            {
                "rotation": settings.LOG_ROTATION,
                "retention": settings.LOG_RETENTION,
                "compression": settings.LOG_COMPRESSION,
            }
        )
        logger.add(str(log_dir / "profile_fields_{time:YYYY-MM-DD_HH}.log"), **file_config)

    logger.info("Logging configured successfully")
