"""URL path classification into typed asset references."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from urllib.parse import urljoin, urlparse

from .config import AssetKind, DEFAULT_BASE_URL


@dataclass(frozen=True)
class ImageRef:
    project_id: str
    dataset: str
    id: str
    dimensions: str
    extension: str

    kind = AssetKind.IMAGE

    @property
    def key(self) -> Tuple[str, ...]:
        return (self.project_id, self.dataset, self.id)

    @property
    def label(self) -> str:
        return self.id


@dataclass(frozen=True)
class FileRef:
    project_id: str
    dataset: str
    id: str
    extension: str

    kind = AssetKind.FILE

    @property
    def key(self) -> Tuple[str, ...]:
        return (self.project_id, self.dataset, self.id)

    @property
    def label(self) -> str:
        return self.id


@dataclass(frozen=True)
class QueryRef:
    version: str
    dataset: str

    kind = AssetKind.QUERY
    extension = ""

    @property
    def key(self) -> Tuple[str, ...]:
        return (self.version, self.dataset)

    @property
    def label(self) -> str:
        return f"GROQ {self.dataset} ({self.version})"


@dataclass(frozen=True)
class UnclassifiedRef:
    raw_path: str

    kind = AssetKind.OTHER

    @property
    def key(self) -> Tuple[str, ...]:
        return (path_only(self.raw_path),)

    @property
    def label(self) -> str:
        return path_only(self.raw_path).strip("/") or "/"

    @property
    def extension(self) -> str:
        last = path_only(self.raw_path).rsplit("/", 1)[-1]
        return split_extension(last)[1].lower()


AssetRef = Union[ImageRef, FileRef, QueryRef, UnclassifiedRef]


def path_only(raw: str) -> str:
    """Strip scheme/host, query string and fragment, keeping the path."""
    if "://" in raw:
        try:
            return urlparse(raw).path or "/"
        except ValueError:
            # e.g. an unbalanced IPv6 bracket in the host
            return raw
    return raw.split("#", 1)[0].split("?", 1)[0]


def split_extension(name: str) -> Tuple[str, str]:
    """Split 'stem.ext' at the final dot; no dot means an empty extension."""
    if "." not in name:
        return name, ""
    stem, ext = name.rsplit(".", 1)
    return stem, ext


def _asset_segments(segments: list[str]) -> Optional[Tuple[str, str, str]]:
    # projectId/dataset/name, optionally followed by a vanity filename
    if len(segments) not in (3, 4) or not all(segments):
        return None
    return segments[0], segments[1], segments[2]


def _classify_image(segments: list[str]) -> Optional[ImageRef]:
    parts = _asset_segments(segments)
    if parts is None:
        return None
    project_id, dataset, name = parts
    stem, ext = split_extension(name)
    if "-" in stem:
        asset_id, dimensions = stem.rsplit("-", 1)
    else:
        asset_id, dimensions = stem, ""
    if not asset_id:
        return None
    return ImageRef(project_id, dataset, asset_id, dimensions, ext)


def _classify_file(segments: list[str]) -> Optional[FileRef]:
    parts = _asset_segments(segments)
    if parts is None:
        return None
    project_id, dataset, name = parts
    asset_id, ext = split_extension(name)
    if not asset_id:
        return None
    return FileRef(project_id, dataset, asset_id, ext)


def classify(path: str) -> AssetRef:
    """Classify a request URL or path. Total: unknown shapes are Unclassified."""
    clean = path_only(path)
    if not clean.startswith("/"):
        return UnclassifiedRef(path)

    segments = clean[1:].split("/")
    head, rest = segments[0], segments[1:]

    ref: Optional[AssetRef] = None
    if head == "images":
        ref = _classify_image(rest)
    elif head == "files":
        ref = _classify_file(rest)
    elif len(segments) == 4 and segments[1] == "data" and segments[2] == "query":
        if segments[0] and segments[3]:
            ref = QueryRef(segments[0], segments[3])

    return ref if ref is not None else UnclassifiedRef(path)


def resolve_url(url: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Turn a logged URL into an absolute one suitable for a browser."""
    url = url.strip()
    if not url or "://" in url:
        return url
    return urljoin(base_url.rstrip("/") + "/", url.lstrip("/"))
