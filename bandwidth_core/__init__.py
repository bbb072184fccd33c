"""Bandwidth explorer core: classify, parse, aggregate and sort CDN request logs."""

from .path_classifier import classify, resolve_url
from .record_parser import parse_line, read_log
from .aggregator import fold
from .sorting import sort_rows
from .context import load_context

__all__ = [
    "classify",
    "resolve_url",
    "parse_line",
    "read_log",
    "fold",
    "sort_rows",
    "load_context",
]
