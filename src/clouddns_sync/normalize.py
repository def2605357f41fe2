"""Fold desired-state entries into canonical record-sets."""

from __future__ import annotations

import logging
from typing import Iterable

from .models import PROTECTED_TYPES, RawEntry, RecordSet, TaskInfo

LOG = logging.getLogger("clouddns_sync.normalize")

ZONE_ROOT = {"@", ""}


def qualify(name: str, zone_domain: str) -> str:
    """Return ``name`` fully qualified against ``zone_domain``."""
    if name.endswith("."):
        return name
    if name in ZONE_ROOT:
        return zone_domain
    return f"{name}.{zone_domain}"


def normalize(entries: Iterable[RawEntry], zone_domain: str, default_ttl: int) -> list[RecordSet]:
    """Merge raw entries into one record-set per (name, type)."""
    merged: dict[tuple[str, str], RecordSet] = {}
    for entry in entries:
        if entry.is_control:
            LOG.debug("Ignoring control entry: %s", entry.command)
            continue
        if entry.type in PROTECTED_TYPES:
            LOG.debug("Ignoring %s entry for %s", entry.type, entry.domain)
            continue

        name = qualify(entry.domain, zone_domain)
        if entry.type == "CNAME":
            values = [qualify(value, zone_domain) for value in entry.values]
        else:
            values = list(entry.values)

        key = (name, entry.type)
        record = merged.get(key)
        if record is None:
            ttl = entry.ttl if entry.ttl is not None else default_ttl
            record = RecordSet(name=name, type=entry.type, ttl=ttl)
            merged[key] = record
        record.type = entry.type
        record.rclass = entry.rclass
        for value in values:
            record.add_value(value)

    return list(merged.values())


def records_from_tasks(tasks: Iterable[TaskInfo], zone_domain: str, default_ttl: int) -> list[RecordSet]:
    """Build one A record-set per job from running task locations."""
    merged: dict[str, RecordSet] = {}
    for task in tasks:
        name = qualify(task.job_id, zone_domain)
        record = merged.get(name)
        if record is None:
            record = RecordSet(name=name, type="A", ttl=default_ttl)
            merged[name] = record
        record.add_value(task.ip)
    return list(merged.values())
