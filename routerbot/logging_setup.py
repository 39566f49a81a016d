import logging
import sys
import threading
from collections import deque
from datetime import datetime

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class BufferedLogHandler(logging.Handler):
    """Keeps the most recent records in memory for the /api/logs endpoint."""

    def __init__(self, maxlen: int = 500):
        super().__init__()
        self._buffer: deque[dict] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": self.format(record),
        }
        with self._lock:
            self._buffer.append(entry)

    def get_buffer(self, level: str | None = None) -> list[dict]:
        with self._lock:
            entries = list(self._buffer)
        if level:
            threshold = logging.getLevelName(level.upper())
            if isinstance(threshold, int):
                entries = [
                    e for e in entries
                    if logging.getLevelName(e["level"]) >= threshold
                ]
        return entries

    def clear(self):
        with self._lock:
            self._buffer.clear()


log_handler = BufferedLogHandler()
log_handler.setFormatter(logging.Formatter("%(message)s"))


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)
    root = logging.getLogger()
    if log_handler not in root.handlers:
        root.addHandler(log_handler)
