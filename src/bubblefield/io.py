# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# JSON Lines I/O for pipeline records.

"""
JSON Lines codec for spaces, edges, presence, config and layout records.

Each line is one JSON object with a ``"type"`` field:

    {"type": "space", "id": "s1", "name": "Jazz", "tags": ["music"], ...}
    {"type": "edge", "space_a": "s1", "space_b": "s2", "weight": 0.42}
    {"type": "presence", "space_id": "s1", "last_seen": 1700000000.0}
    {"type": "config", "key": "similarity_threshold", "value": 0.3}
    {"type": "layout", "space_id": "s1", "position": {"x": 0, "y": 0}, "cluster_id": 0}

Usage:
    from bubblefield.io import read_records, write_records

    for record in read_records(sys.stdin):
        ...
    write_records(result.updates, sys.stdout)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, TextIO, Union

from .models import LayoutUpdate, PresenceRecord, SimilarityEdge, SpaceNode

logger = logging.getLogger(__name__)


@dataclass
class ConfigEntry:
    """A key/value configuration record."""
    key: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "config", "key": self.key, "value": self.value}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ConfigEntry':
        return cls(key=d["key"], value=d.get("value"))


Record = Union[SpaceNode, SimilarityEdge, PresenceRecord, LayoutUpdate, ConfigEntry]

RECORD_TYPES = {
    "space": SpaceNode,
    "edge": SimilarityEdge,
    "presence": PresenceRecord,
    "layout": LayoutUpdate,
    "config": ConfigEntry,
}


def decode_record(obj: Dict[str, Any]) -> Record:
    """Build a record from its JSON object."""
    record_type = obj.get("type")
    cls = RECORD_TYPES.get(record_type)
    if cls is None:
        raise ValueError(f"unknown record type: {record_type!r}")
    return cls.from_dict(obj)


def read_records(stream: TextIO) -> Iterator[Record]:
    """
    Read records from a JSON Lines stream.

    Blank lines are skipped. Malformed lines raise ValueError naming the
    line number.
    """
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
            yield decode_record(obj)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"line {lineno}: {e}") from e


def write_record(record: Record, stream: TextIO) -> None:
    stream.write(json.dumps(record.to_dict(), ensure_ascii=False))
    stream.write("\n")


def write_records(records: Iterable[Record], stream: TextIO) -> int:
    """Write records, one per line. Returns the number written."""
    count = 0
    for record in records:
        write_record(record, stream)
        count += 1
    stream.flush()
    return count
