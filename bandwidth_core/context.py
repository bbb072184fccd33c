"""The run context: everything derived from one log file, built once at startup."""
from __future__ import annotations
import logging
import pathlib
import time
from dataclasses import dataclass, field
from typing import Optional

from .aggregator import AggregateTables, Aggregator
from .config import Settings
from .record_parser import ScanSummary, read_log

logger = logging.getLogger(__name__)


@dataclass
class ExplorerContext:
    """Immutable-after-load snapshot handed to the controller and renderer."""
    source: pathlib.Path
    settings: Settings
    tables: AggregateTables
    summary: ScanSummary = field(default_factory=ScanSummary)
    load_seconds: float = 0.0

    def as_dict(self) -> dict:
        return {
            "source": str(self.source),
            "summary": self.summary.as_dict(),
            "total_requests": self.tables.total_requests,
            "total_bandwidth": self.tables.total_bandwidth,
            "unclassified_requests": self.tables.unclassified_requests,
            "load_s": self.load_seconds,
        }


def load_context(file_path: pathlib.Path, settings: Optional[Settings] = None) -> ExplorerContext:
    """Read and fold the whole log. Raises LogFileError if it cannot be opened."""
    file_path = pathlib.Path(file_path)
    settings = settings or Settings()
    summary = ScanSummary()

    start = time.time()
    tables = Aggregator().fold(read_log(file_path, summary))
    elapsed = round(time.time() - start, 3)

    logger.info(
        f"Loaded {file_path}: {summary.records} records, {summary.skipped} skipped "
        f"({summary.malformed_json} malformed JSON, {summary.missing_url} missing url), "
        f"{len(tables.assets)} assets in {elapsed}s"
    )
    return ExplorerContext(
        source=file_path,
        settings=settings,
        tables=tables,
        summary=summary,
        load_seconds=elapsed,
    )
