"""Serializable snapshots of histogram state."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

import bson
from bson.errors import BSONError
from bson.int64 import Int64


def _as_int(name: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"field {name!r} must be an integer, not a boolean")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"field {name!r} must be an integer, got {value!r}")


@dataclass
class Snapshot:
    """An exported view of a histogram, suitable for serialization."""

    lowest_trackable_value: int = 0
    highest_trackable_value: int = 0
    significant_figures: int = 0
    counts: list[int] = field(default_factory=list)

    def to_document(self) -> dict[str, Any]:
        """Return the snapshot as a BSON-ready document."""
        return {
            "lowest": Int64(self.lowest_trackable_value),
            "highest": Int64(self.highest_trackable_value),
            "figures": Int64(self.significant_figures),
            "counts": [Int64(c) for c in self.counts],
        }

    def to_bson(self) -> bytes:
        """Encode the snapshot as BSON."""
        return bson.encode(self.to_document())

    def to_json(self) -> str:
        """Encode the snapshot as compact JSON."""
        return json.dumps(
            {
                "lowest": self.lowest_trackable_value,
                "highest": self.highest_trackable_value,
                "figures": self.significant_figures,
                "counts": list(self.counts),
            },
            separators=(",", ":"),
        )

    @staticmethod
    def _from_mapping(doc: Mapping[str, Any]) -> "Snapshot":
        counts = doc.get("counts")
        if counts is None:
            counts = []
        if not isinstance(counts, (list, tuple)):
            raise ValueError(f"field 'counts' must be an array, got {counts!r}")
        return Snapshot(
            lowest_trackable_value=_as_int("lowest", doc.get("lowest")),
            highest_trackable_value=_as_int("highest", doc.get("highest")),
            significant_figures=_as_int("figures", doc.get("figures")),
            counts=[_as_int("counts", c) for c in counts],
        )

    @staticmethod
    def from_bson(data: bytes) -> "Snapshot":
        """Decode a snapshot from BSON; raises ValueError on bad input."""
        try:
            doc = bson.decode(bytes(data))
        except (BSONError, TypeError, ValueError, IndexError, struct.error) as exc:
            raise ValueError(f"invalid snapshot document: {exc}") from exc
        return Snapshot._from_mapping(doc)

    @staticmethod
    def from_json(data: Union[str, bytes]) -> "Snapshot":
        """Decode a snapshot from JSON; raises ValueError on bad input."""
        doc = json.loads(data)
        if not isinstance(doc, dict):
            raise ValueError("snapshot JSON must be an object")
        return Snapshot._from_mapping(doc)