"""Logging setup shared by the complaint service and its helpers."""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional


class ServiceLogger:
    """Service logger writing to stdout and logs/<service>.log.

    Recent entries are also kept in memory so the ``/logs`` endpoint can
    return them without reading the file.
    """

    def __init__(self, service_name: str, level: str = "INFO", log_dir: str = "logs",
                 max_buffer_size: int = 100):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(logging.DEBUG)

        # Handlers are attached once per logger name; app factories may run repeatedly.
        if not self.logger.handlers:
            formatter = logging.Formatter(
                '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.getLevelName(level.upper()))
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

            Path(log_dir).mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(Path(log_dir) / f"{service_name}.log", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        self.log_buffer: List[dict] = []
        self.max_buffer_size = max_buffer_size

    def _add_to_buffer(self, level: str, message: str, extra: Optional[dict] = None):
        self.log_buffer.append({
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "service": self.service_name,
            "message": message,
            "extra": extra or {}
        })
        if len(self.log_buffer) > self.max_buffer_size:
            self.log_buffer.pop(0)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message)
        self._add_to_buffer("DEBUG", message, kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message)
        self._add_to_buffer("INFO", message, kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message)
        self._add_to_buffer("WARNING", message, kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message)
        self._add_to_buffer("ERROR", message, kwargs)

    def get_recent_logs(self, limit: int = 50):
        """Most recent buffered entries, oldest first."""
        if limit <= 0:
            return []
        return self.log_buffer[-limit:]
