"""Shared helpers for the JSON record store."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from app.utils.clock import parse_iso

_EPOCH = datetime.min.replace(tzinfo=UTC)


def merge_fields(
    existing: Mapping[str, Any],
    patch: Mapping[str, Any],
    protected: Iterable[str] = (),
    replace: Iterable[str] = (),
) -> dict[str, Any]:
    """Field-level merge where the patch wins.

    When both sides hold a mapping under the same key the merge recurses, so
    a shallow patch object keeps sibling fields of the nested record.
    Keys listed in ``protected`` are never taken from the patch; keys listed
    in ``replace`` are taken whole, without recursing.
    """
    skip = set(protected)
    whole = set(replace)
    merged = copy.deepcopy(dict(existing))
    for key, value in patch.items():
        if key in skip:
            continue
        current = merged.get(key)
        if key not in whole and isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_fields(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def newest_first(records: list[dict[str, Any]], field: str, limit: int) -> list[dict[str, Any]]:
    """Order by an ISO timestamp field, newest first, truncated to ``limit``.

    Equal timestamps keep reverse insertion order so that back-to-back writes
    within one millisecond still read newest first.
    """
    if limit <= 0:
        return []
    ordered = sorted(
        reversed(records),
        key=lambda record: parse_iso(record.get(field)) or _EPOCH,
        reverse=True,
    )
    return copy.deepcopy(ordered[:limit])
