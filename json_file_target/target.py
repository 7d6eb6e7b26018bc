"""JsonFileTarget: buffers log records and flushes them as JSON lines to a file."""

import logging
import threading

from json_file_target.context import ContextProvider, process_variables
from json_file_target.filters import RecordFilter
from json_file_target.formatter import format_message, merge, parse_text
from json_file_target.models import LogRecord
from json_file_target.writer import FileWriter

logger = logging.getLogger(__name__)


class JsonFileTarget:
    """Collects records until export_interval is reached (or a final
    collect arrives), enriches them with context and exports the batch.

    A record that cannot be formatted is skipped and counted. A failed
    write drops the batch. Neither is raised back to the code that emitted
    the log record.
    """

    def __init__(
        self,
        writer: FileWriter,
        context_provider: ContextProvider | None = None,
        export_interval: int = 1000,
        levels=(),
        categories=(),
        except_=(),
        utc_timestamps: bool = False,
    ):
        self._writer = writer
        self._context_provider = context_provider
        self._export_interval = export_interval
        self._filter = RecordFilter(levels, categories, except_)
        self._utc = utc_timestamps

        self._messages: list[LogRecord] = []
        self._lock = threading.RLock()
        self._flushing = False

        self._flush_count = 0
        self._exported_count = 0
        self._failed_exports = 0
        self._dropped_records = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def collect(self, records, final: bool = False):
        """Buffer the records that pass the filter and flush if due."""
        with self._lock:
            self._messages.extend(self._filter.apply(records))

            if self._flushing or not self._should_flush(final):
                return

            batch, self._messages = self._messages, []
            self._flushing = True
            try:
                self._add_context(batch)
                written = self.export(batch)
                self._flush_count += 1
                self._exported_count += written
            except Exception:
                self._failed_exports += 1
                logger.exception("Export of %d log records failed", len(batch))
            finally:
                self._flushing = False

    def export(self, batch: list[LogRecord]) -> int:
        """Format every record and append them to the log file in one write.

        Records that fail to format are logged and skipped. Write errors
        propagate. Returns the number of records written.
        """
        lines = []
        for record in batch:
            try:
                lines.append(format_message(record, self._utc))
            except Exception:
                self._dropped_records += 1
                logger.exception(
                    "Skipping log record that could not be formatted (category %r)",
                    record.category,
                )
        if not lines:
            return 0
        self._writer.write("\n".join(lines) + "\n")
        return len(lines)

    def get_context(self) -> dict | None:
        if self._context_provider is None:
            return None
        return self._context_provider.get_context()

    def close(self):
        """Flush whatever is buffered and close the file."""
        self.collect([], final=True)
        self._writer.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _should_flush(self, final: bool) -> bool:
        count = len(self._messages)
        return count > 0 and (
            final or (self._export_interval > 0 and count >= self._export_interval)
        )

    def _add_context(self, batch: list[LogRecord]):
        """Merge one context snapshot into the message of every record."""
        context = self.get_context()
        if context is None:
            return
        for record in batch:
            record.message = merge(parse_text(record.message), context)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def export_interval(self) -> int:
        return self._export_interval

    @export_interval.setter
    def export_interval(self, value: int):
        self._export_interval = value

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    @property
    def pending_count(self) -> int:
        """Number of records currently waiting in the buffer."""
        with self._lock:
            return len(self._messages)

    @property
    def flush_count(self) -> int:
        return self._flush_count

    @property
    def exported_count(self) -> int:
        return self._exported_count

    @property
    def failed_exports(self) -> int:
        return self._failed_exports

    @property
    def dropped_records(self) -> int:
        return self._dropped_records

    @property
    def writer(self) -> FileWriter:
        return self._writer


def create_target(config, user_resolver=None, variables=None) -> JsonFileTarget:
    """Build a JsonFileTarget and its FileWriter from a TargetConfig.

    variables defaults to the process snapshot (env, argv, pid) filtered by
    config.log_vars.
    """
    writer = FileWriter(
        config.log_file,
        enable_rotation=config.enable_rotation,
        max_file_size_kb=config.max_file_size_kb,
        max_log_files=config.max_log_files,
    )
    provider = None
    if config.include_context:
        provider = ContextProvider(
            config.application,
            user_resolver=user_resolver,
            variables=variables if variables is not None else process_variables,
            log_vars=config.log_vars,
        )
    return JsonFileTarget(
        writer,
        context_provider=provider,
        export_interval=config.export_interval,
        levels=config.levels,
        categories=config.categories,
        except_=config.except_,
        utc_timestamps=config.utc_timestamps,
    )
