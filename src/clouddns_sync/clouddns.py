"""Google Cloud DNS client: zone lookup, paginated listing and change commits."""

from __future__ import annotations

import logging
from typing import Any, Iterator

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
from pydantic import BaseModel, Field, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import AppConfig
from .models import Change, CommitError, CommitResult, ConfigError, FetchError, RecordSet

LOG = logging.getLogger("clouddns_sync.clouddns")

API_ROOT = "https://dns.googleapis.com/dns/v1"
SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class ApiRecordSet(BaseModel):
    """Resource record-set as returned by the REST API."""

    name: str
    type: str
    ttl: int = 0
    rrdatas: list[str] = Field(default_factory=list)

    def to_record_set(self) -> RecordSet:
        """Convert into the engine's record-set model."""
        return RecordSet(name=self.name, type=self.type, ttl=self.ttl, values=list(self.rrdatas))


class ApiManagedZone(BaseModel):
    """Managed zone as returned by the REST API."""

    name: str
    dnsName: str
    description: str | None = None


class RecordSetPage(BaseModel):
    """One page of ``rrsets.list``."""

    rrsets: list[ApiRecordSet] = Field(default_factory=list)
    nextPageToken: str | None = None


class ManagedZonePage(BaseModel):
    """One page of ``managedZones.list``."""

    managedZones: list[ApiManagedZone] = Field(default_factory=list)
    nextPageToken: str | None = None


class ApiChange(BaseModel):
    """Change resource returned by ``changes.create``."""

    id: str | None = None
    status: str | None = None
    additions: list[ApiRecordSet] = Field(default_factory=list)
    deletions: list[ApiRecordSet] = Field(default_factory=list)


def build_session(keyfile_path: str) -> requests.Session:
    """Return an authorised session for the service-account keyfile."""
    try:
        credentials = service_account.Credentials.from_service_account_file(keyfile_path, scopes=SCOPES)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot load credentials from {keyfile_path}: {exc}") from exc

    session = AuthorizedSession(credentials)
    retry = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    return session


class CloudDnsClient:
    """Thin wrapper over the Cloud DNS v1 REST API for one managed zone."""

    def __init__(
        self,
        session: requests.Session,
        project: str,
        zone: str,
        domain: str | None = None,
        timeout: float = 30,
        api_root: str = API_ROOT,
    ):
        """Store the session and zone coordinates."""
        self.session = session
        self.project = project
        self.zone = zone
        self.timeout = timeout
        self._domain = domain
        self._base = f"{api_root.rstrip('/')}/projects/{project}/managedZones"

    @classmethod
    def from_config(cls, config: AppConfig) -> "CloudDnsClient":
        """Build a client with credentials from the configured keyfile."""
        session = build_session(str(config.json_keyfile))
        return cls(
            session,
            project=config.cloud_project,
            zone=config.cloud_dns_zone,
            domain=config.dns_domain,
            timeout=config.http_timeout,
        )

    def _get(self, url: str, page_token: str | None) -> dict[str, Any]:
        """Send a GET request and return the parsed JSON response."""
        params = {"pageToken": page_token} if page_token else None
        LOG.debug("GET %s (page %s)", url, page_token or "first")
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, GoogleAuthError, ValueError) as exc:
            raise FetchError(f"Listing {url} failed: {exc}") from exc

    def _pages(self, url: str, model: type[BaseModel]) -> Iterator[Any]:
        """Yield validated pages until no page token is returned."""
        page_token: str | None = None
        while True:
            data = self._get(url, page_token)
            try:
                page = model.model_validate(data)
            except ValidationError as exc:
                raise FetchError(f"Unexpected response from {url}: {exc}") from exc
            yield page
            if not page.nextPageToken:
                break
            page_token = page.nextPageToken

    def list_managed_zones(self) -> list[ApiManagedZone]:
        """Return every managed zone in the project."""
        zones: list[ApiManagedZone] = []
        for page in self._pages(self._base, ManagedZonePage):
            zones.extend(page.managedZones)
        return zones

    def zone_domain(self) -> str:
        """Return the DNS name served by the configured zone."""
        if self._domain:
            return self._domain
        for zone in self.list_managed_zones():
            if zone.name == self.zone:
                self._domain = zone.dnsName
                return zone.dnsName
        raise FetchError(f"Managed zone not found in project {self.project}: {self.zone}")

    def fetch_record_sets(self) -> list[RecordSet]:
        """Return all record-sets currently published in the zone."""
        url = f"{self._base}/{self.zone}/rrsets"
        records: list[RecordSet] = []
        for page in self._pages(url, RecordSetPage):
            records.extend(rrset.to_record_set() for rrset in page.rrsets)
        LOG.debug("Fetched %d record-sets from %s", len(records), self.zone)
        return records

    def commit(self, change: Change) -> CommitResult:
        """Send a change to Cloud DNS."""
        if change.is_noop():
            raise CommitError("Refusing to send an empty change.")
        url = f"{self._base}/{self.zone}/changes"
        LOG.debug("POST %s", url)
        try:
            resp = self.session.post(url, json=change.to_api(), timeout=self.timeout)
            resp.raise_for_status()
            payload = ApiChange.model_validate(resp.json())
        except requests.HTTPError as exc:
            body = exc.response.text if exc.response is not None else ""
            raise CommitError(f"Error updating Cloud DNS: {exc} {body}".strip()) from exc
        except (requests.RequestException, GoogleAuthError, ValueError) as exc:
            raise CommitError(f"Error updating Cloud DNS: {exc}") from exc
        return CommitResult(
            added=len(payload.additions),
            deleted=len(payload.deletions),
            change_id=payload.id,
            status=payload.status,
        )
