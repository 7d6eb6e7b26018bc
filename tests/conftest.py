"""Shared pytest fixtures for the json-file-target test suite."""

from __future__ import annotations

import json

import pytest

from json_file_target.context import ContextProvider
from json_file_target.models import Level, LogRecord
from json_file_target.target import JsonFileTarget
from json_file_target.writer import FileWriter

# 2023-11-14T22:13:20+00:00
FIXED_TS = 1700000000


class RecordingWriter:
    """In-memory stand-in for FileWriter that keeps every written block."""

    def __init__(self, on_write=None, error=None):
        self.blocks: list[str] = []
        self._on_write = on_write
        self._error = error
        self.closed = False

    def write(self, text: str) -> bool:
        if self._error is not None:
            raise self._error
        self.blocks.append(text)
        if self._on_write is not None:
            self._on_write(text)
        return False

    def close(self):
        self.closed = True

    @property
    def lines(self) -> list[dict]:
        return [
            json.loads(line)
            for block in self.blocks
            for line in block.splitlines()
            if line
        ]


def make_record(message="disk full", level=Level.ERROR, category="app", trace=None):
    return LogRecord(
        message=message,
        level=level,
        category=category,
        timestamp=FIXED_TS,
        trace=trace,
    )


def read_lines(path) -> list[dict]:
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.fixture()
def log_path(tmp_path):
    return tmp_path / "logs" / "app.log"


@pytest.fixture()
def provider() -> ContextProvider:
    return ContextProvider(
        "billing-api",
        user_resolver=lambda: 42,
        variables={"request": {"method": "GET", "path": "/invoices"}},
        log_vars=["request"],
    )


@pytest.fixture()
def file_target(log_path, provider) -> JsonFileTarget:
    """Target writing to a real file under tmp_path, export every 3 records."""
    target = JsonFileTarget(
        FileWriter(str(log_path)),
        context_provider=provider,
        export_interval=3,
        utc_timestamps=True,
    )
    yield target
    target.writer.close()
