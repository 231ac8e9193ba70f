"""Random sample documents and helpers that count metric fields."""

from __future__ import annotations

import datetime as _dt
import random
from collections.abc import Mapping, Sequence
from typing import Any

from bson.int64 import Int64
from bson.timestamp import Timestamp


def create_event_record(count: int, duration: int, size: int, workers: int) -> dict[str, Any]:
    """Build a document shaped like a recorded event."""
    return {
        "count": Int64(count),
        "duration": Int64(duration),
        "size": Int64(size),
        "workers": Int64(workers),
    }


def rand_flat_document(num_keys: int) -> dict[str, Any]:
    """Build a flat document of ``num_keys`` random 64-bit integers."""
    return {str(i): Int64(random.randrange(num_keys)) for i in range(num_keys)}


def rand_flat_document_with_floats(num_keys: int) -> dict[str, Any]:
    """Build a flat document of random doubles and 64-bit integers."""
    doc: dict[str, Any] = {}
    for i in range(num_keys):
        doc[f"{i}_float"] = random.random()
        doc[f"{i}_long"] = Int64(random.getrandbits(63))
    return doc


def rand_complex_document(num_keys: int, other_num: int) -> dict[str, Any]:
    """Build a random document with nested arrays and sub-documents.

    Every pass writes the same keys, so later passes replace earlier values.
    Filling the array advances the pass counter as well.
    """
    doc: dict[str, Any] = {}
    suffix = f"{num_keys} {other_num}\n"
    i = 0
    while i < num_keys:
        doc[suffix] = Int64(random.randrange(num_keys))
        doc[f"float {suffix}"] = random.random()

        if other_num % 5 == 0:
            array = []
            while i < other_num:
                array.append(Int64(0))
                i += 1
            doc[f"first {suffix}"] = array

        if other_num % 3 == 0:
            doc[f"second {suffix}"] = rand_flat_document(other_num)

        if other_num % 12 == 0:
            doc[f"third {suffix}"] = rand_complex_document(other_num, 10)

        i += 1
    return doc


def is_metrics_document(key: str, doc: Mapping[str, Any]) -> tuple[list[str], int]:
    """Return the metric keys found in ``doc`` and the number of metrics."""
    keys: list[str] = []
    seen = 0
    for name, value in doc.items():
        found, num = is_metrics_value(f"{key}/{name}", value)
        if num > 0:
            seen += num
            keys.extend(found)
    return keys, seen


def is_metrics_array(key: str, array: Sequence[Any]) -> tuple[list[str], int]:
    """Return the metric keys found in ``array`` and the number of metrics."""
    keys: list[str] = []
    seen = 0
    for idx, value in enumerate(array):
        found, num = is_metrics_value(f"{key}{idx}", value)
        if num > 0:
            seen += num
            keys.extend(found)
    return keys, seen


def is_metrics_value(key: str, value: Any) -> tuple[list[str], int]:
    """Return the metric keys that ``value`` contributes and how many metrics.

    Booleans, numbers and datetimes count once, timestamps twice; documents
    and arrays are searched recursively; everything else counts for nothing.
    """
    if isinstance(value, Mapping):
        return is_metrics_document(key, value)
    if isinstance(value, (list, tuple)):
        return is_metrics_array(key, value)
    if isinstance(value, Timestamp):
        return [key], 2
    if isinstance(value, (bool, int, float, _dt.datetime)):
        return [key], 1
    return [], 0