"""NDJSON request log parsing with per-line error accounting."""
from __future__ import annotations
import json
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, TextIO

from .config import BODY_FIELD, URL_FIELD, SizeField
from .exceptions import (
    LogFileNotFoundError,
    LogFileUnreadableError,
    LogLineError,
    MalformedJsonError,
    MissingUrlError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestRecord:
    """One parsed log line."""
    url: str
    request_size: int = 0
    response_size: int = 0

    @property
    def bandwidth(self) -> int:
        return self.request_size + self.response_size


@dataclass
class ScanSummary:
    """Counters collected while scanning a log."""
    lines_read: int = 0
    blank_lines: int = 0
    records: int = 0
    malformed_json: int = 0
    missing_url: int = 0

    @property
    def skipped(self) -> int:
        return self.malformed_json + self.missing_url

    def count_error(self, error: LogLineError) -> None:
        if isinstance(error, MalformedJsonError):
            self.malformed_json += 1
        else:
            self.missing_url += 1

    def as_dict(self) -> dict:
        return {
            "lines_read": self.lines_read,
            "blank_lines": self.blank_lines,
            "records": self.records,
            "malformed_json": self.malformed_json,
            "missing_url": self.missing_url,
            "skipped": self.skipped,
        }


def parse_size(value: Any) -> int:
    """Byte count from a size field; anything but a non-negative int is 0."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def parse_line(line: str, line_number: int = 0) -> Optional[RequestRecord]:
    """Parse one NDJSON line.

    Returns None for a blank line. Raises MalformedJsonError for invalid JSON
    and MissingUrlError when body.url is absent, not a string or empty.
    """
    if not line.strip():
        return None

    try:
        obj = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(f"invalid JSON: {e.msg}", line_number) from e
    except (ValueError, RecursionError) as e:
        # oversized integer literals, nesting deeper than the decoder allows
        raise MalformedJsonError(f"invalid JSON: {e}", line_number) from e

    body = obj.get(BODY_FIELD) if isinstance(obj, dict) else None
    if not isinstance(body, dict):
        raise MissingUrlError("no body object", line_number)

    url = body.get(URL_FIELD)
    if not isinstance(url, str) or not url:
        raise MissingUrlError("body.url missing or not a non-empty string", line_number)

    return RequestRecord(
        url=url,
        request_size=parse_size(body.get(SizeField.REQUEST_SIZE.value)),
        response_size=parse_size(body.get(SizeField.RESPONSE_SIZE.value)),
    )


def scan_lines(lines: Iterable[str], summary: ScanSummary) -> Iterator[RequestRecord]:
    """Yield request records from raw lines, counting skips into summary."""
    for line_number, line in enumerate(lines, start=1):
        try:
            record = parse_line(line, line_number)
        except LogLineError as e:
            summary.lines_read += 1
            summary.count_error(e)
            logger.debug(f"Skipping line {line_number} ({e.kind}): {e}")
            continue

        if record is None:
            summary.blank_lines += 1
            continue

        summary.lines_read += 1
        summary.records += 1
        yield record


def open_log(file_path: pathlib.Path) -> TextIO:
    """Open a request log for reading, translating OS errors."""
    file_path = pathlib.Path(file_path)
    if not file_path.exists():
        raise LogFileNotFoundError(file_path, "no such file")
    if file_path.is_dir():
        raise LogFileUnreadableError(file_path, "is a directory")
    try:
        return file_path.open("r", encoding="utf-8", errors="replace")
    except OSError as e:
        raise LogFileUnreadableError(file_path, e.strerror or str(e)) from e


def read_log(file_path: pathlib.Path, summary: ScanSummary) -> Iterator[RequestRecord]:
    """Stream request records from a log file.

    The file is opened before the first record is requested, so a missing or
    unreadable file raises at call time rather than on iteration.
    """
    handle = open_log(file_path)
    return _read_and_close(handle, file_path, summary)


def _read_and_close(handle: TextIO, file_path: pathlib.Path, summary: ScanSummary) -> Iterator[RequestRecord]:
    with handle:
        try:
            yield from scan_lines(handle, summary)
        except OSError as e:
            raise LogFileUnreadableError(file_path, e.strerror or str(e)) from e
