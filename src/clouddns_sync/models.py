"""Core data models used by clouddns-sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

PROTECTED_TYPES = frozenset({"SOA", "NS"})
RRSET_KIND = "dns#resourceRecordSet"


@dataclass
class RecordSet:
    """All values published under one (name, type) pair."""

    name: str
    type: str
    ttl: int = 0
    values: list[str] = field(default_factory=list)
    rclass: str = "IN"

    def key(self) -> tuple[str, str]:
        """Return the identity used for matching record-sets."""
        return (self.name, self.type)

    def is_protected(self) -> bool:
        """Return True for zone bookkeeping types managed by the service."""
        return self.type in PROTECTED_TYPES

    def add_value(self, value: str) -> bool:
        """Append a value unless an identical one is already present."""
        if value in self.values:
            return False
        self.values.append(value)
        return True

    def describe(self) -> str:
        """Return a single-line description of the record-set."""
        return f"{self.name} ({self.type}) TTL {self.ttl} : {', '.join(self.values)}"

    def to_api(self) -> dict[str, Any]:
        """Return the Cloud DNS REST representation."""
        payload: dict[str, Any] = {
            "kind": RRSET_KIND,
            "name": self.name,
            "type": self.type,
            "rrdatas": list(self.values),
        }
        if self.ttl:
            payload["ttl"] = self.ttl
        return payload


@dataclass(frozen=True)
class RawEntry:
    """A desired-state entry as produced by an entry source."""

    type: str
    domain: str
    values: tuple[str, ...] = ()
    ttl: int | None = None
    rclass: str = "IN"
    command: str | None = None

    @property
    def is_control(self) -> bool:
        """Return True for directives that are not records."""
        return self.command is not None


@dataclass(frozen=True)
class TaskInfo:
    """One running workload instance reported by the cluster scheduler."""

    job_id: str
    ip: str


@dataclass(frozen=True)
class Change:
    """Record-sets to add and delete in one commit."""

    additions: tuple[RecordSet, ...] = ()
    deletions: tuple[RecordSet, ...] = ()

    def is_noop(self) -> bool:
        """Return True when there is nothing to send."""
        return not (self.additions or self.deletions)

    def describe(self) -> Iterator[str]:
        """Yield one sign-prefixed audit line per record-set."""
        for record in self.additions:
            yield f"+ {record.name} ({record.type}) {record.ttl} {' '.join(record.values)}"
        for record in self.deletions:
            yield f"- {record.name} ({record.type}) {record.ttl} {' '.join(record.values)}"

    def to_api(self) -> dict[str, Any]:
        """Return the Cloud DNS REST representation."""
        return {
            "kind": "dns#change",
            "additions": [record.to_api() for record in self.additions],
            "deletions": [record.to_api() for record in self.deletions],
        }


@dataclass(frozen=True)
class CommitResult:
    """Counts acknowledged by the remote service for one commit."""

    added: int
    deleted: int
    change_id: str | None = None
    status: str | None = None


class CloudDnsSyncError(Exception):
    """Base exception for clouddns-sync."""


class ConfigError(CloudDnsSyncError):
    """Raised when configuration values are missing or invalid."""


class FetchError(CloudDnsSyncError):
    """Raised when listing remote state fails."""


class ParseError(CloudDnsSyncError):
    """Raised when a desired-state source is malformed."""


class CommitError(CloudDnsSyncError):
    """Raised when the remote service rejects a change."""
