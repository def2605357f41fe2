"""Read BIND zonefiles into raw desired-state entries using dnspython."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

import dns.exception
import dns.name
import dns.rdataclass
import dns.rdatatype
import dns.tokenizer
import dns.zonefile

from .models import ParseError, RawEntry

LOG = logging.getLogger("clouddns_sync.zonefile")


class _LineTransaction(dns.zonefile.RRsetsReaderTransaction):
    """Reader transaction that also keeps every record line in file order."""

    def __init__(self, manager, replacement, read_only):
        super().__init__(manager, replacement, read_only)
        self.lines: list[tuple[dns.name.Name, int, Any]] = []

    def add(self, *args: Any) -> None:
        name, ttl, rdata = args
        self.lines.append((name, ttl, rdata))
        super().add(*args)


class _LineManager(dns.zonefile.RRSetsReaderManager):
    """Hands out a single line-keeping transaction."""

    def writer(self, replacement=False):
        return _LineTransaction(self, True, False)


def _control_entries(text: str) -> List[RawEntry]:
    """Return the directive lines of a zonefile as control entries."""
    entries: List[RawEntry] = []
    for line in text.splitlines():
        stripped = line.split(";", 1)[0].strip()
        if stripped.startswith("$"):
            entries.append(RawEntry(type="", domain="", command=stripped))
    return entries


def read_entries(text: str, zone_domain: str, default_ttl: int) -> List[RawEntry]:
    """Parse zonefile text into entries, directives first, then one per record line."""
    controls = _control_entries(text)
    manager = _LineManager(origin=dns.name.from_text(zone_domain), relativize=False)

    try:
        with manager.writer(True) as txn:
            tok = dns.tokenizer.Tokenizer(text, "<zonefile>")
            reader = dns.zonefile.Reader(tok, dns.rdataclass.IN, txn, default_ttl=default_ttl)
            reader.read()
    except dns.exception.DNSException as exc:
        raise ParseError(f"Failed to parse zonefile: {exc}") from exc

    entries = list(controls)
    for name, ttl, rdata in txn.lines:
        entries.append(
            RawEntry(
                type=dns.rdatatype.to_text(rdata.rdtype),
                domain=name.to_text(),
                values=(rdata.to_text(),),
                ttl=ttl,
                rclass=dns.rdataclass.to_text(rdata.rdclass),
            )
        )
    LOG.debug("Read %d entries (%d directives) for %s", len(entries), len(controls), zone_domain)
    return entries


def load_zonefile(path: Path, zone_domain: str, default_ttl: int) -> List[RawEntry]:
    """Read a zonefile from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Error opening zonefile {path}: {exc}") from exc
    return read_entries(text, zone_domain, default_ttl)
