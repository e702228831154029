# core/logger.py
import json
import logging
import os

from contextvars import ContextVar
from logging import LogRecord
from logging.handlers import RotatingFileHandler

from dlmm_lab.core.settings import settings

run_id_ctx_var = ContextVar("run_id", default=None)

LOG_DIR = settings.LOG_DIR
LOG_FILE = os.path.join(LOG_DIR, "dlmm_lab.log")
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5

class JsonFormatter(logging.Formatter):
    def format(self, record: LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "run_id", None):
            log_entry["run_id"] = record.run_id
        return json.dumps(log_entry)

class RunIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        record.run_id = run_id_ctx_var.get()
        return True

def get_logger(name: str) -> logging.Logger:
    os.makedirs(LOG_DIR, exist_ok=True)

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger  # Already configured

    logger.setLevel(logging.DEBUG)

    # Console Handler
    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter("[%(asctime)s] %(levelname)s - %(message)s")
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(settings.LOG_LEVEL)
    logger.addHandler(console_handler)

    # File Handler (JSON)
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
    file_handler.setFormatter(JsonFormatter())
    file_handler.setLevel(logging.DEBUG)
    logger.addHandler(file_handler)

    logger.addFilter(RunIdFilter())

    return logger
