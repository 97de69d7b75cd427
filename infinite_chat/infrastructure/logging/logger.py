import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from infinite_chat.config.settings import settings

LOGGER_NAME = "infinite_chat"


class JsonFormatter(logging.Formatter):
    """每条日志一行 JSON，结构化字段通过 extra={"extra": {...}} 传入。"""

    def __init__(self, redact_content: bool = False):
        super().__init__()
        self._redact = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self._redact:
            msg = (msg or "")[:64]
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(log_dir=None, redact_content=None) -> logging.Logger:
    """挂上 JSON 文件 handler；已有 handler 时只在显式传入目录后替换。"""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    existing = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    if existing and log_dir is None:
        return logger
    for h in existing:
        logger.removeHandler(h)
        h.close()
    log_dir = Path(log_dir if log_dir is not None else settings.log_dir)
    if redact_content is None:
        redact_content = settings.log_redact_content
    log_dir.mkdir(parents=True, exist_ok=True)
    # delay=True：首条日志写入前不创建文件
    fh = logging.FileHandler(log_dir / "infinite_chat.log", encoding="utf-8", delay=True)
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter(redact_content=redact_content))
    logger.addHandler(fh)
    return logger


logger = setup_logger()
