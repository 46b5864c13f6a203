import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yaml

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message', 'client_ip', 'lookup_kind', 'component',
])


class JsonFormatter(logging.Formatter):
    """JSON formatter with structured fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "client_ip": getattr(record, 'client_ip', None),
            "lookup_kind": getattr(record, 'lookup_kind', None),
            "component": getattr(record, 'component', 'maxmind'),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def default_config(log_format: str, log_level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": log_format,
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            "maxmind": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False
            },
            "uvicorn": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False
            }
        },
        "root": {
            "level": log_level,
            "handlers": ["console"]
        }
    }


def setup_logging(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Setup logging configuration from YAML file or environment"""
    log_format = os.getenv("LOG_FORMAT", "json")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    config_path = config_path or os.getenv("LOGGING_CONFIG", "LOGGING.yaml")

    config = None
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logging.getLogger("maxmind").warning(f"Could not load {config_path}: {e}")

    if not config:
        config = default_config(log_format, log_level)

    if log_format == "text":
        for handler in config.get("handlers", {}).values():
            if "formatter" in handler:
                handler["formatter"] = "text"

    for logger in config.get("loggers", {}).values():
        logger["level"] = log_level

    logging.config.dictConfig(config)
    return config
