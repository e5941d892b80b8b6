# logging_config.py
import logging
import logging.config
import logging.handlers
from pathlib import Path
from datetime import datetime
import json
import contextvars

from config import settings

# per-request identifier (kept in a ContextVar)
_request_id_ctx = contextvars.ContextVar("request_id", default="-")

class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get("-")
        return True

def set_request_id(req_id: str):
    _request_id_ctx.set(req_id)

def get_logger(name: str = __name__) -> logging.Logger:
    return logging.getLogger(name)


def _file_handler(filename: Path) -> dict:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "level": "INFO",
        "formatter": "default",
        "filters": ["request_id"],
        "filename": str(filename),
        "when": "midnight",
        "interval": 1,
        "backupCount": 30,
        "encoding": "utf-8",
    }


def build_dict_config(json_fmt: bool = False, to_files: bool = True, log_dir: str | None = None) -> dict:
    fmt = (
        '{"ts":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s",'
        '"request_id":"%(request_id)s","msg":"%(message)s"}'
        if json_fmt
        else '%(asctime)s | %(levelname)s | %(name)s | rid=%(request_id)s | %(message)s'
    )

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "filters": ["request_id"],
        },
    }
    root_handlers = ["console"]
    matching_handlers = ["console"]
    if to_files:
        log_path = Path(log_dir or settings.LOG_DIR)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers["file_app"] = _file_handler(log_path / "app.log")
        handlers["file_matching"] = _file_handler(log_path / "matching.log")
        root_handlers.append("file_app")
        matching_handlers.append("file_matching")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "default": {
                "format": fmt,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": handlers,
        "loggers": {
            # root logger: whole app
            "": {
                "level": "INFO",
                "handlers": root_handlers,
            },
            # match passes and notification fan-out
            "matching": {
                "level": "INFO",
                "handlers": matching_handlers,
                "propagate": False,
            },
            "uvicorn": {"level": "INFO"},
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {"level": "INFO"},
        },
    }

def setup_logging(json_fmt: bool = False, to_files: bool = True):
    logging.config.dictConfig(build_dict_config(json_fmt=json_fmt, to_files=to_files))


def log_match_event(event_type: str, details: dict, logger: logging.Logger | None = None):
    logger = logger or get_logger("matching")
    logger.info("MATCH_EVENT: %s", json.dumps({
        "timestamp": datetime.now().isoformat(),
        "event_type": event_type,
        "details": details
    }, ensure_ascii=False, default=str))
