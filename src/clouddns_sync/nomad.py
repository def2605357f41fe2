"""Read running task locations from the Nomad HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from .config import AppConfig
from .models import FetchError, TaskInfo

LOG = logging.getLogger("clouddns_sync.nomad")


class AllocationStub(BaseModel):
    """Subset of an allocation list entry."""

    model_config = ConfigDict(extra="ignore")

    ID: str
    JobID: str
    NodeName: str = ""
    ClientStatus: str = ""


class NodeStub(BaseModel):
    """Subset of a node list entry."""

    model_config = ConfigDict(extra="ignore")

    Name: str
    Address: str = ""


class NomadClient:
    """Query allocations and nodes from a Nomad agent."""

    def __init__(
        self,
        address: str,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 30,
    ):
        """Prepare a session against the agent address."""
        self.address = address.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers.update({"X-Nomad-Token": token})

    @classmethod
    def from_config(cls, config: AppConfig) -> "NomadClient":
        """Build a client from application configuration."""
        return cls(config.nomad_addr, token=config.nomad_token, timeout=config.http_timeout)

    def _get(self, path: str) -> list[dict[str, Any]]:
        """Send a GET request and return the parsed JSON list."""
        url = f"{self.address}{path}"
        LOG.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise FetchError(f"Talking to Nomad at {url} failed: {exc}") from exc
        if not isinstance(data, list):
            raise FetchError(f"Unexpected response from {url}: expected a list")
        return data

    def allocations(self) -> list[AllocationStub]:
        """Return all allocations known to the cluster."""
        try:
            return [AllocationStub.model_validate(item) for item in self._get("/v1/allocations")]
        except ValidationError as exc:
            raise FetchError(f"Malformed allocation list from Nomad: {exc}") from exc

    def node_addresses(self) -> dict[str, str]:
        """Return node name to IP address."""
        try:
            nodes = [NodeStub.model_validate(item) for item in self._get("/v1/nodes")]
        except ValidationError as exc:
            raise FetchError(f"Malformed node list from Nomad: {exc}") from exc

        addresses: dict[str, str] = {}
        for node in nodes:
            if not node.Address:
                raise FetchError(f"Found nomad node {node.Name} with unknown IP")
            addresses[node.Name] = node.Address
        return addresses

    def task_locations(self) -> list[TaskInfo]:
        """Return one TaskInfo per running allocation on a known node."""
        allocs = self.allocations()
        nodes = self.node_addresses()
        tasks: list[TaskInfo] = []
        for alloc in allocs:
            if alloc.ClientStatus != "running":
                continue
            ip = nodes.get(alloc.NodeName)
            if ip is None:
                LOG.warning("Unknown node %s for running alloc %s", alloc.NodeName, alloc.ID)
                continue
            tasks.append(TaskInfo(job_id=alloc.JobID, ip=ip))
        return tasks
