"""depwrap 日志配置

支持人类可读文本和结构化 JSON 两种输出，JSON 便于 CI 收集配置日志。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

HUMAN_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出字段: timestamp, level, logger, message, module, function, line,
    以及有异常时的 exception。
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            # 记录事件发生时间，而不是格式化时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器：单个 stderr handler

    参数:
        level: 日志级别字符串，无法识别时退回 INFO
        json_output: True 时使用 JSONFormatter

    示例:
        >>> setup_logging("DEBUG")
        >>> setup_logging("INFO", json_output=True)  # CI
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(HUMAN_FORMAT))
    root.addHandler(handler)


def reset_logging() -> None:
    """清理根日志器上已注册的 handlers，避免重复输出"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
