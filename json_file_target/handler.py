"""JsonFileHandler: stdlib logging handler that feeds a JsonFileTarget."""

import logging
from collections.abc import Mapping

from json_file_target.models import Level, LogRecord
from json_file_target.target import JsonFileTarget

# Records from this package are never fed back into the target.
_OWN_PREFIX = "json_file_target"


def level_from_levelno(levelno: int) -> Level:
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARNING
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


def _message_of(record: logging.LogRecord):
    msg = record.msg
    if not record.args and isinstance(msg, (Mapping, BaseException)):
        return msg
    return record.getMessage()


class ForeignRecordFilter(logging.Filter):
    """Rejects records logged by this package itself."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not (
            record.name == _OWN_PREFIX or record.name.startswith(_OWN_PREFIX + ".")
        )


class JsonFileHandler(logging.Handler):
    """Logging handler that buffers records in a JsonFileTarget.

    Every emitted record is collected non-final; flush() and close() force
    the buffered batch out.
    """

    def __init__(self, target: JsonFileTarget, level=logging.NOTSET):
        super().__init__(level)
        self._target = target
        self._formatter = logging.Formatter()
        self.addFilter(ForeignRecordFilter())

    @property
    def target(self) -> JsonFileTarget:
        return self._target

    def to_log_record(self, record: logging.LogRecord) -> LogRecord:
        trace = None
        if record.exc_info:
            trace = self._formatter.formatException(record.exc_info)
        elif record.stack_info:
            trace = self._formatter.formatStack(record.stack_info)
        return LogRecord(
            message=_message_of(record),
            level=level_from_levelno(record.levelno),
            category=record.name,
            timestamp=record.created,
            trace=trace,
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._target.collect([self.to_log_record(record)], final=False)
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            self._target.collect([], final=True)
        finally:
            self.release()

    def close(self) -> None:
        self.acquire()
        try:
            self._target.close()
        finally:
            self.release()
            super().close()
