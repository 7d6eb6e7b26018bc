"""RecordFilter: level, category and exclusion filtering of log records."""

from json_file_target.models import Level, LogRecord


def category_matches(category: str, pattern: str) -> bool:
    """Exact match, or prefix match when the pattern ends with "*"."""
    if category == pattern:
        return True
    if pattern.endswith("*"):
        return category.startswith(pattern.rstrip("*"))
    return False


class RecordFilter:
    def __init__(self, levels=(), categories=(), except_=()):
        self._mask = 0
        for level in levels:
            self._mask |= Level(level)
        self._categories = list(categories)
        self._except = list(except_)

    def should_include(self, record: LogRecord) -> bool:
        """Check if a record passes the filter.

        Level: if a level set is configured, the record's level must be in it.
        Categories: if any exist, at least one must match.
        Except: if any match, reject.
        """
        if self._mask and not (self._mask & record.level):
            return False

        if self._categories and not any(
            category_matches(record.category, p) for p in self._categories
        ):
            return False

        for pattern in self._except:
            if category_matches(record.category, pattern):
                return False

        return True

    def apply(self, records) -> list[LogRecord]:
        return [r for r in records if self.should_include(r)]


def filter_records(records, levels=(), categories=(), except_=()) -> list[LogRecord]:
    """Return the records that pass the level, category and exclusion rules."""
    return RecordFilter(levels, categories, except_).apply(records)
