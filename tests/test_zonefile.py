"""Tests for reading BIND zonefiles."""

import pytest

from clouddns_sync.models import ParseError, RecordSet
from clouddns_sync.normalize import normalize
from clouddns_sync.zonefile import load_zonefile, read_entries

DOMAIN = "example.com."

ZONE_TEXT = """\
$ORIGIN example.com.
@ 3600 IN SOA ns1.example.com. hostmaster.example.com. 1 7200 3600 1209600 300
@ 3600 IN NS ns1.example.com.
www 60 IN A 1.2.3.4
api IN A 5.6.7.8 ; no explicit ttl
alias 60 IN CNAME www
"""


def by_key(records):
    return {record.key(): record for record in records}


def test_directives_become_control_entries():
    entries = read_entries(ZONE_TEXT, DOMAIN, 300)
    controls = [entry for entry in entries if entry.is_control]
    assert [entry.command for entry in controls] == ["$ORIGIN example.com."]


def test_records_are_read_with_absolute_names():
    entries = read_entries(ZONE_TEXT, DOMAIN, 300)
    records = {(entry.domain, entry.type): entry for entry in entries if not entry.is_control}
    assert records[("www.example.com.", "A")].values == ("1.2.3.4",)
    assert records[("www.example.com.", "A")].ttl == 60
    assert records[("www.example.com.", "A")].rclass == "IN"
    assert records[("alias.example.com.", "CNAME")].values == ("www.example.com.",)


def test_default_ttl_applies_without_ttl_directive():
    entries = read_entries(ZONE_TEXT, DOMAIN, 300)
    records = {(entry.domain, entry.type): entry for entry in entries if not entry.is_control}
    assert records[("api.example.com.", "A")].ttl == 300


def test_ttl_directive_in_file_is_respected():
    text = "$TTL 3600\napi IN A 5.6.7.8\n"
    entries = read_entries(text, DOMAIN, 300)
    (record,) = [entry for entry in entries if not entry.is_control]
    assert record.ttl == 3600


def test_zonefile_normalises_without_soa_and_ns():
    records = by_key(normalize(read_entries(ZONE_TEXT, DOMAIN, 300), DOMAIN, 300))
    assert set(records) == {
        ("www.example.com.", "A"),
        ("api.example.com.", "A"),
        ("alias.example.com.", "CNAME"),
    }
    assert records[("alias.example.com.", "CNAME")] == RecordSet(
        name="alias.example.com.", type="CNAME", ttl=60, values=["www.example.com."]
    )


def test_multiple_values_share_a_record_set():
    text = "www 60 IN A 1.2.3.4\nwww 60 IN A 5.6.7.8\n"
    (record,) = normalize(read_entries(text, DOMAIN, 300), DOMAIN, 300)
    assert sorted(record.values) == ["1.2.3.4", "5.6.7.8"]


def test_first_line_sets_ttl_for_merged_record_set():
    text = "www 600 IN A 1.2.3.4\nwww 60 IN A 5.6.7.8\n"
    entries = [entry for entry in read_entries(text, DOMAIN, 300) if not entry.is_control]
    assert [(entry.values, entry.ttl) for entry in entries] == [(("1.2.3.4",), 600), (("5.6.7.8",), 60)]
    (record,) = normalize(entries, DOMAIN, 300)
    assert record == RecordSet(name="www.example.com.", type="A", ttl=600, values=["1.2.3.4", "5.6.7.8"])


def test_out_of_zone_names_are_kept():
    text = "www 60 IN A 1.2.3.4\nhost.other.org. 60 IN A 5.6.7.8\n"
    records = by_key(normalize(read_entries(text, DOMAIN, 300), DOMAIN, 300))
    assert set(records) == {("www.example.com.", "A"), ("host.other.org.", "A")}
    assert records[("host.other.org.", "A")].values == ["5.6.7.8"]


def test_malformed_zonefile_raises_parse_error():
    with pytest.raises(ParseError):
        read_entries("www IN A not-an-address\n", DOMAIN, 300)


def test_missing_zonefile_raises_parse_error(tmp_path):
    with pytest.raises(ParseError):
        load_zonefile(tmp_path / "missing.zone", DOMAIN, 300)


def test_load_zonefile_reads_from_disk(tmp_path):
    path = tmp_path / "example.zone"
    path.write_text(ZONE_TEXT, encoding="utf-8")
    entries = load_zonefile(path, DOMAIN, 300)
    assert ("www.example.com.", "A") in {(entry.domain, entry.type) for entry in entries}
