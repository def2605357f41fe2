"""High-level orchestration for clouddns-sync."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol, Sequence

from .config import AppConfig
from .diffing import reconcile
from .metrics import MetricsSink, NullMetrics
from .models import Change, CloudDnsSyncError, CommitResult, ConfigError, RawEntry, RecordSet, TaskInfo
from .normalize import normalize, records_from_tasks
from .yaml_loader import read_entries as read_yaml_entries
from .zonefile import load_zonefile

LOG = logging.getLogger("clouddns_sync")


class DnsService(Protocol):
    """Remote authoritative DNS operations used by the controller."""

    def zone_domain(self) -> str:
        ...

    def fetch_record_sets(self) -> list[RecordSet]:
        ...

    def commit(self, change: Change) -> CommitResult:
        ...


class TaskSource(Protocol):
    """Cluster registry producing running task locations."""

    def task_locations(self) -> list[TaskInfo]:
        ...


@dataclass
class PlanResult:
    """Holds everything needed to apply a change."""

    zone_domain: str
    actual: list[RecordSet]
    desired: list[RecordSet]
    change: Change


class SyncController:
    """Coordinates dump, plan and apply operations against one zone."""

    def __init__(
        self,
        config: AppConfig,
        dns: DnsService,
        tasks: TaskSource | None = None,
        metrics: MetricsSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Store configuration and collaborators for subsequent runs."""
        self.config = config
        self.dns = dns
        self.tasks = tasks
        self.metrics = metrics or NullMetrics()
        self._sleep = sleep

    def dump(self) -> tuple[str, list[RecordSet]]:
        """Return the zone domain and its current record-sets."""
        return self.dns.zone_domain(), self.dns.fetch_record_sets()

    def plan_records(self, zone_domain: str, desired: Sequence[RecordSet]) -> PlanResult:
        """Fetch actual state and diff it against ``desired``."""
        actual = self.dns.fetch_record_sets()
        change = reconcile(actual, desired, self.config.prune_missing)
        return PlanResult(zone_domain=zone_domain, actual=actual, desired=list(desired), change=change)

    def plan_entries(self, zone_domain: str, entries: Iterable[RawEntry]) -> PlanResult:
        """Normalise raw entries and plan against the zone."""
        desired = normalize(entries, zone_domain, self.config.default_ttl)
        LOG.info("Desired state holds %d record-sets", len(desired))
        return self.plan_records(zone_domain, desired)

    def plan_zonefile(self, path: Path) -> PlanResult:
        """Plan from a BIND zonefile."""
        zone_domain = self.dns.zone_domain()
        entries = load_zonefile(path, zone_domain, self.config.default_ttl)
        return self.plan_entries(zone_domain, entries)

    def plan_desired(self, path: Path, template_vars: dict[str, Any] | None = None) -> PlanResult:
        """Plan from a desired-state YAML document."""
        zone_domain = self.dns.zone_domain()
        entries = read_yaml_entries(path, zone_domain, template_vars)
        return self.plan_entries(zone_domain, entries)

    def plan_tasks(self) -> PlanResult:
        """Plan from the running tasks reported by the cluster registry."""
        if self.tasks is None:
            raise ConfigError("No task source configured.")
        task_list = self.tasks.task_locations()
        LOG.info("Found %d running tasks", len(task_list))
        zone_domain = self.dns.zone_domain()
        desired = records_from_tasks(task_list, zone_domain, self.config.default_ttl)
        return self.plan_records(zone_domain, desired)

    def apply(self, plan: PlanResult) -> CommitResult | None:
        """Report the change and commit it unless it is empty or a dry run."""
        change = plan.change
        report_change(change)
        if change.is_noop():
            LOG.info("No changes to apply for %s", plan.zone_domain)
            return None
        if self.config.dry_run:
            LOG.info("Dry run: not sending change to Cloud DNS")
            return None
        result = self.dns.commit(change)
        LOG.info("Added [%d] and deleted [%d] records.", result.added, result.deleted)
        self.metrics.record_commit(result)
        return result

    def sync_tasks(self) -> CommitResult | None:
        """Run one registry reconciliation pass."""
        plan = self.plan_tasks()
        result = self.apply(plan)
        self.metrics.record_desired(len(plan.desired))
        return result

    def run_periodic(self, interval: int, passes: int | None = None) -> None:
        """Sync repeatedly, ``interval`` seconds apart; once when negative."""
        if interval < 0:
            self.sync_tasks()
            return
        completed = 0
        while passes is None or completed < passes:
            if completed:
                LOG.info("Waiting %d seconds.", interval)
                self._sleep(interval)
            try:
                self.sync_tasks()
            except CloudDnsSyncError as exc:
                LOG.error("Sync pass failed: %s", exc)
            completed += 1


def report_change(change: Change) -> None:
    """Log every addition and deletion of a change."""
    LOG.info("Adding %d record-sets to Cloud DNS", len(change.additions))
    LOG.info("Removing %d record-sets from Cloud DNS", len(change.deletions))
    for line in change.describe():
        LOG.info(" %s", line)


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
