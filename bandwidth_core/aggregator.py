"""Streaming aggregation of request records into per-asset and per-type tables."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .config import AssetKind
from .path_classifier import AssetRef, classify
from .record_parser import RequestRecord

AssetKey = Tuple[str, ...]
ExtensionKey = Tuple[AssetKind, str]


def average(total: int, count: int) -> float:
    return total / count if count else 0.0


@dataclass
class AssetAggregate:
    """One row of the by-asset table."""
    kind: AssetKind
    identity: AssetKey
    label: str
    extension: str
    sample_url: str
    request_count: int = 0
    request_size_total: int = 0
    total_bandwidth: int = 0

    @property
    def key(self) -> AssetKey:
        return (self.kind.value,) + self.identity

    @property
    def key_string(self) -> str:
        return "/".join(self.identity)

    @property
    def average_size(self) -> float:
        return average(self.total_bandwidth, self.request_count)

    @property
    def tie_break(self) -> Tuple[str, str]:
        return (self.key_string, self.kind.value)

    def add(self, record: RequestRecord) -> None:
        self.request_count += 1
        self.request_size_total += record.request_size
        self.total_bandwidth += record.bandwidth

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "id": self.key_string,
            "label": self.label,
            "extension": self.extension,
            "request_count": self.request_count,
            "request_size_total": self.request_size_total,
            "total_bandwidth": self.total_bandwidth,
            "average_size": self.average_size,
            "sample_url": self.sample_url,
        }


@dataclass
class ExtensionAggregate:
    """One row of the by-type table: all requests of a kind sharing an extension."""
    kind: AssetKind
    extension: str
    sample_url: str
    request_count: int = 0
    request_size_total: int = 0
    total_bandwidth: int = 0
    distinct_asset_count: int = 0
    _seen: Set[AssetKey] = field(default_factory=set, repr=False, compare=False)

    @property
    def key(self) -> ExtensionKey:
        return (self.kind, self.extension)

    @property
    def label(self) -> str:
        return "(no ext)" if not self.extension else ""

    @property
    def key_string(self) -> str:
        return self.extension

    @property
    def average_size(self) -> float:
        return average(self.total_bandwidth, self.request_count)

    @property
    def tie_break(self) -> Tuple[str, str]:
        return (self.extension.lower(), self.kind.value)

    def add(self, record: RequestRecord, asset_key: AssetKey) -> None:
        self.request_count += 1
        self.request_size_total += record.request_size
        self.total_bandwidth += record.bandwidth
        if asset_key not in self._seen:
            self._seen.add(asset_key)
            self.distinct_asset_count += 1

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "extension": self.extension,
            "request_count": self.request_count,
            "request_size_total": self.request_size_total,
            "total_bandwidth": self.total_bandwidth,
            "average_size": self.average_size,
            "distinct_asset_count": self.distinct_asset_count,
        }


@dataclass
class TypeGroup:
    """Totals for one asset kind across its extension buckets."""
    kind: AssetKind
    request_count: int = 0
    request_size_total: int = 0
    total_bandwidth: int = 0
    distinct_asset_count: int = 0
    extension: str = ""
    sample_url: Optional[str] = None

    @property
    def label(self) -> str:
        return self.kind.group_label

    @property
    def key_string(self) -> str:
        return self.kind.group_label

    @property
    def average_size(self) -> float:
        return average(self.total_bandwidth, self.request_count)

    @property
    def tie_break(self) -> Tuple[str, str]:
        return (self.kind.group_label.lower(), self.kind.value)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "label": self.label,
            "request_count": self.request_count,
            "request_size_total": self.request_size_total,
            "total_bandwidth": self.total_bandwidth,
            "average_size": self.average_size,
            "distinct_asset_count": self.distinct_asset_count,
        }


@dataclass
class AggregateTables:
    """The two aggregate tables, in first-seen order."""
    assets: Dict[AssetKey, AssetAggregate] = field(default_factory=dict)
    extensions: Dict[ExtensionKey, ExtensionAggregate] = field(default_factory=dict)

    def asset_rows(self) -> List[AssetAggregate]:
        return list(self.assets.values())

    def extension_rows(self, kind: Optional[AssetKind] = None) -> List[ExtensionAggregate]:
        return [row for row in self.extensions.values() if kind is None or row.kind is kind]

    def type_groups(self) -> List[TypeGroup]:
        """One group per kind present, in AssetKind order."""
        groups: Dict[AssetKind, TypeGroup] = {}
        for row in self.extensions.values():
            group = groups.setdefault(row.kind, TypeGroup(row.kind))
            group.request_count += row.request_count
            group.request_size_total += row.request_size_total
            group.total_bandwidth += row.total_bandwidth
        # an asset seen under two extensions still counts once for its kind
        for asset in self.assets.values():
            if asset.kind in groups:
                groups[asset.kind].distinct_asset_count += 1
        return [groups[kind] for kind in AssetKind if kind in groups]

    @property
    def total_requests(self) -> int:
        return sum(row.request_count for row in self.assets.values())

    @property
    def total_bandwidth(self) -> int:
        return sum(row.total_bandwidth for row in self.assets.values())

    @property
    def total_average_size(self) -> float:
        return average(self.total_bandwidth, self.total_requests)

    @property
    def unclassified_requests(self) -> int:
        return sum(row.request_count for row in self.extension_rows(AssetKind.OTHER))


class Aggregator:
    """Folds request records into AggregateTables one record at a time."""

    def __init__(self, tables: Optional[AggregateTables] = None):
        self.tables = tables if tables is not None else AggregateTables()

    def add(self, record: RequestRecord) -> AssetRef:
        ref = classify(record.url)
        asset_key = (ref.kind.value,) + ref.key

        asset = self.tables.assets.get(asset_key)
        if asset is None:
            asset = AssetAggregate(
                kind=ref.kind,
                identity=ref.key,
                label=ref.label,
                extension=ref.extension.lower(),
                sample_url=record.url,
            )
            self.tables.assets[asset_key] = asset
        asset.add(record)

        ext_key = (ref.kind, ref.extension.lower() if ref.kind.has_extensions else "")
        bucket = self.tables.extensions.get(ext_key)
        if bucket is None:
            bucket = ExtensionAggregate(kind=ext_key[0], extension=ext_key[1], sample_url=record.url)
            self.tables.extensions[ext_key] = bucket
        bucket.add(record, asset_key)

        return ref

    def fold(self, records: Iterable[RequestRecord]) -> AggregateTables:
        for record in records:
            self.add(record)
        return self.tables


def fold(records: Iterable[RequestRecord]) -> AggregateTables:
    """Aggregate a record stream into fresh tables."""
    return Aggregator().fold(records)
