"""Diff utilities for Cloud DNS record-sets."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Sequence, Tuple

from .models import Change, RecordSet


def records_equal(a: RecordSet, b: RecordSet) -> bool:
    """Return True when two record-sets publish the same data."""
    if a.type != b.type or a.name != b.name or a.ttl != b.ttl:
        return False
    if len(a.values) != len(b.values):
        return False
    return Counter(a.values) == Counter(b.values)


def _index(records: Sequence[RecordSet]) -> Dict[Tuple[str, str], RecordSet]:
    """Index record-sets by (name, type), first occurrence wins."""
    index: Dict[Tuple[str, str], RecordSet] = {}
    for record in records:
        index.setdefault(record.key(), record)
    return index


def reconcile(actual: Sequence[RecordSet], desired: Sequence[RecordSet], prune_missing: bool) -> Change:
    """Produce the change that turns ``actual`` into ``desired``."""
    actual_map = _index(actual)
    desired_map = _index(desired)
    additions: list[RecordSet] = []
    deletions: list[RecordSet] = []

    for record in desired:
        current = actual_map.get(record.key())
        if current is None:
            additions.append(record)
        elif not records_equal(current, record):
            deletions.append(current)
            additions.append(record)

    if prune_missing:
        for current in actual:
            if current.is_protected():
                continue
            if current.key() not in desired_map:
                deletions.append(current)

    return Change(additions=tuple(additions), deletions=tuple(deletions))
