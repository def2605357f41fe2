"""Utilities to serialise actual zone state."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import yaml

from .models import RecordSet


def zone_file_fragment(record: RecordSet) -> str:
    """Render a record-set as zonefile lines, one per value."""
    if record.type == "SOA" and record.values:
        return f"{record.name} IN {record.type} {record.values[0]}"
    ttl = f"{record.ttl} " if record.ttl else ""
    return "\n".join(f"{record.name} {ttl}IN {record.type} {value}" for value in record.values)


def _record_to_dict(record: RecordSet) -> dict[str, Any]:
    """Convert a record-set into a serialisable dictionary."""
    entry: dict[str, Any] = {
        "name": record.name,
        "type": record.type,
        "values": list(record.values),
    }
    if record.ttl:
        entry["ttl"] = record.ttl
    return entry


def records_to_dict(zone: str, records: Sequence[RecordSet]) -> dict[str, Any]:
    """Create a dictionary describing the zone."""
    return {
        "zone": zone,
        "records": [_record_to_dict(record) for record in records],
    }


def records_to_zonefile(records: Sequence[RecordSet]) -> str:
    """Return zonefile text for the record-sets."""
    fragments = [zone_file_fragment(record) for record in records]
    return "\n".join(fragment for fragment in fragments if fragment)


def records_to_yaml(zone: str, records: Sequence[RecordSet]) -> str:
    """Return YAML representation of a zone, loadable as desired state."""
    return yaml.safe_dump(records_to_dict(zone, records), sort_keys=False)


def records_to_json(zone: str, records: Sequence[RecordSet]) -> str:
    """Return JSON representation of a zone."""
    return json.dumps(records_to_dict(zone, records), indent=2)


def write_zone_state(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
