"""Tests for reading task locations from Nomad."""

import logging

import pytest

from conftest import FakeResponse, FakeSession

from clouddns_sync.models import FetchError, TaskInfo
from clouddns_sync.nomad import NomadClient

ADDR = "http://nomad.local:4646"
ALLOCS = f"{ADDR}/v1/allocations"
NODES = f"{ADDR}/v1/nodes"


def make_client(allocs, nodes, token=None):
    session = FakeSession({ALLOCS: [FakeResponse(allocs)], NODES: [FakeResponse(nodes)]})
    return NomadClient(ADDR + "/", token=token, session=session), session


def test_running_allocations_map_to_node_addresses(caplog):
    client, _ = make_client(
        [
            {"ID": "a1", "JobID": "web", "NodeName": "node1", "ClientStatus": "running", "TaskGroup": "g"},
            {"ID": "a2", "JobID": "web", "NodeName": "node2", "ClientStatus": "running"},
            {"ID": "a3", "JobID": "batch", "NodeName": "node1", "ClientStatus": "complete"},
            {"ID": "a4", "JobID": "api", "NodeName": "ghost", "ClientStatus": "running"},
        ],
        [
            {"Name": "node1", "Address": "10.0.0.1", "Status": "ready"},
            {"Name": "node2", "Address": "10.0.0.2"},
        ],
    )
    with caplog.at_level(logging.WARNING, logger="clouddns_sync.nomad"):
        tasks = client.task_locations()
    assert tasks == [TaskInfo(job_id="web", ip="10.0.0.1"), TaskInfo(job_id="web", ip="10.0.0.2")]
    assert "Unknown node ghost" in caplog.text


def test_node_without_address_is_an_error():
    client, _ = make_client([], [{"Name": "node1", "Address": ""}])
    with pytest.raises(FetchError):
        client.task_locations()


def test_token_is_sent_as_header():
    client, session = make_client([], [], token="secret")
    assert session.headers["X-Nomad-Token"] == "secret"
    assert client.task_locations() == []


def test_http_failure_raises_fetch_error():
    session = FakeSession({ALLOCS: [FakeResponse({}, status_code=500)]})
    client = NomadClient(ADDR, session=session)
    with pytest.raises(FetchError):
        client.task_locations()


def test_non_list_payload_raises_fetch_error():
    client, _ = make_client({"oops": True}, [])
    with pytest.raises(FetchError):
        client.task_locations()


def test_malformed_allocation_raises_fetch_error():
    client, _ = make_client([{"ID": "a1"}], [])
    with pytest.raises(FetchError):
        client.task_locations()


@pytest.mark.parametrize(
    "allocs, nodes",
    [
        pytest.param(["x"], [], id="string-allocation"),
        pytest.param([], [["node1", "10.0.0.1"]], id="list-node"),
    ],
)
def test_non_object_items_raise_fetch_error(allocs, nodes):
    client, _ = make_client(allocs, nodes)
    with pytest.raises(FetchError):
        client.task_locations()
