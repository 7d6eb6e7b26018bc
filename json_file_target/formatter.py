"""Turn log records into flat field maps and serialize them as JSON lines."""

import dataclasses
import gettext
import json
import traceback
from collections.abc import Mapping
from datetime import datetime, timezone

from json_file_target.models import LogRecord, get_level_name

TEXT_DOMAIN = "json_file_target"


def merge(base: dict, override: dict) -> dict:
    """Recursively merge override dict into base dict.

    Nested dicts are merged, lists are concatenated, anything else is
    replaced by the later value.
    """
    result = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = merge(result[key], value)
        elif (
            key in result
            and isinstance(result[key], list)
            and isinstance(value, list)
        ):
            result[key] = result[key] + value
        else:
            result[key] = value
    return result


def stringify_error(exc: BaseException) -> str:
    """Render an exception as its "ExcType: message" line."""
    return "".join(traceback.format_exception_only(type(exc), exc)).strip()


def _is_scalar(value) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def parse_text(text) -> dict:
    """Convert any type of log message to a dict.

    Exceptions become their string form, mappings and plain objects keep
    their fields, strings and numbers are wrapped under "message". Anything
    else is replaced by a warning naming its type.
    """
    if isinstance(text, BaseException):
        return {"message": stringify_error(text)}

    if isinstance(text, Mapping):
        return dict(text)

    if dataclasses.is_dataclass(text) and not isinstance(text, type):
        return {f.name: getattr(text, f.name) for f in dataclasses.fields(text)}

    if (
        hasattr(text, "__dict__")
        and not isinstance(text, type)
        and not isinstance(text, (str, bytes, int, float))
    ):
        return {k: v for k, v in vars(text).items() if not k.startswith("_")}

    if _is_scalar(text):
        return {"message": text}

    warning = gettext.dgettext(
        TEXT_DOMAIN, "Warning, wrong log message type '{type}'"
    )
    return {"message": warning.format(type=type(text).__name__)}


def format_timestamp(timestamp: float, utc: bool = False) -> str:
    """ISO-8601 with offset, e.g. 2023-11-14T22:13:20+00:00."""
    if utc:
        dt = datetime.fromtimestamp(timestamp, timezone.utc)
    else:
        dt = datetime.fromtimestamp(timestamp).astimezone()
    return dt.isoformat(timespec="seconds")


def prepare_message(record: LogRecord, utc: bool = False) -> dict:
    """Flatten a record into the dict that gets written as one JSON line."""
    result = merge(
        _sanitize_value(parse_text(record.message)),
        {
            "level": get_level_name(record.level),
            "category": _sanitize_value(record.category),
            "@timestamp": format_timestamp(record.timestamp, utc),
        },
    )
    if record.trace is not None:
        result["trace"] = _sanitize_value(record.trace)
    return result


def _sanitize_value(value):
    if isinstance(value, str):
        return value.encode("utf-8", errors="replace").decode("utf-8")
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {_sanitize_value(k): _sanitize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize_value(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_sanitize_value(v) for v in value)
    return value


def sanitize_message(record: LogRecord) -> LogRecord:
    """Replace invalid UTF-8 in every string leaf of the record.

    Lone surrogates (e.g. from surrogateescape-decoded input) are replaced
    with "?", bytes are decoded with U+FFFD for bad sequences. Valid text
    is returned unchanged.
    """
    return dataclasses.replace(
        record,
        message=_sanitize_value(record.message),
        category=_sanitize_value(record.category),
        trace=_sanitize_value(record.trace),
    )


def format_message(record: LogRecord, utc: bool = False) -> str:
    """Serialize a record to one line of JSON. Encoding errors propagate."""
    return json.dumps(
        prepare_message(sanitize_message(record), utc), ensure_ascii=False
    )
