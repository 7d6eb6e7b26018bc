"""Append-only JSON-lines file writer with size-based numbered rotation."""

import logging
import os
import threading

logger = logging.getLogger(__name__)


class FileWriter:
    def __init__(
        self,
        log_file: str,
        enable_rotation: bool = True,
        max_file_size_kb: int = 10240,
        max_log_files: int = 5,
    ):
        if max_log_files < 1:
            raise ValueError("max_log_files must be at least 1")
        self._filepath = log_file
        self._enable_rotation = enable_rotation
        self._max_bytes = max_file_size_kb * 1024
        self._max_log_files = max_log_files
        self._lock = threading.Lock()
        self._file = None

    @property
    def filepath(self) -> str:
        return self._filepath

    def _open(self):
        directory = os.path.dirname(self._filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._file = open(self._filepath, "a", encoding="utf-8")

    def _close(self):
        if self._file and not self._file.closed:
            self._file.close()
        self._file = None

    def _should_rotate(self) -> bool:
        if not self._enable_rotation:
            return False
        try:
            return os.path.getsize(self._filepath) > self._max_bytes
        except OSError:
            return False

    def _rotate(self):
        """Shift app.log -> app.log.1 -> ... -> app.log.N, dropping the oldest."""
        self._close()
        for i in range(self._max_log_files, -1, -1):
            src = self._filepath if i == 0 else f"{self._filepath}.{i}"
            if not os.path.exists(src):
                continue
            if i == self._max_log_files:
                os.remove(src)
            else:
                os.replace(src, f"{self._filepath}.{i + 1}")
        logger.debug("Rotated %s", self._filepath)

    def rotated_files(self) -> list[str]:
        """Existing rotated files, newest first."""
        paths = []
        for i in range(1, self._max_log_files + 1):
            path = f"{self._filepath}.{i}"
            if os.path.exists(path):
                paths.append(path)
        return paths

    def write(self, text: str) -> bool:
        """Append text (newline-terminated). Returns True if rotation occurred."""
        with self._lock:
            if self._file is None or self._file.closed:
                self._open()
            self._file.write(text if text.endswith("\n") else text + "\n")
            self._file.flush()

            if self._should_rotate():
                self._rotate()
                return True
            return False

    def close(self):
        with self._lock:
            self._close()
