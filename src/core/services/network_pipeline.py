"""Local network setup orchestration (`up` / `down`).

This module sequences the reconciliation engine, the certificate lifecycle
and the hosts manager so the CLI (or any future entry-point) only deals with
presentation. Steps run strictly in order:

1. reconcile the project against the registry (fatal on failure)
2. clean up certificates of SSL domains that were dropped
3. generate missing certificates
4. rewrite the project's hosts records
5. install certificates into the trust store

Nothing touches the hosts file or the trust store until step 1 succeeded.
Hosts and trust failures are reported as warnings, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence

from adapters.hosts_file import SystemHostsFile
from adapters.registry_store import JsonProjectStore
from adapters.system_commands import SubprocessRunner
from adapters.trust_stores import resolve_trust_store
from core.config import AppSettings
from core.domain.models import ContainerInfo, HostsRecord, ProjectChanges, ProjectInfo
from core.domain.subnet import SubnetAllocator
from core.errors import BootappError
from core.interfaces.commands import CommandRunner
from core.services.certificates import CertificateLifecycleManager, CertificateReport
from core.services.hosts_entries import HostsEntryManager
from core.services.reconciliation import ReconciliationEngine
from core.services.registry import ProjectRegistry


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    step: Callable[[str], None] | None = None


@dataclass
class NetworkServices:
    """The collaborators one invocation works with."""

    settings: AppSettings
    registry: ProjectRegistry
    engine: ReconciliationEngine
    hosts: HostsEntryManager
    certificates: CertificateLifecycleManager


def build_services(
    settings: AppSettings | None = None,
    *,
    runner: CommandRunner | None = None,
) -> NetworkServices:
    """Wire the system-backed implementations from settings."""

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(use_sudo=settings.use_sudo)

    registry = ProjectRegistry(JsonProjectStore(settings.registry_path))
    allocator = SubnetAllocator(
        settings.subnet_first_slot,
        settings.subnet_last_slot,
        settings.subnet_template,
    )
    hosts = HostsEntryManager(
        SystemHostsFile(settings.hosts_file, runner),
        marker=settings.hosts_marker,
    )
    certificates = CertificateLifecycleManager.from_settings(
        settings,
        resolve_trust_store(runner),
    )
    return NetworkServices(
        settings=settings,
        registry=registry,
        engine=ReconciliationEngine(registry, allocator),
        hosts=hosts,
        certificates=certificates,
    )


@dataclass
class UpRequest:
    """Already-validated project description from the compose parser."""

    project_name: str
    project_path: str
    service_domains: Mapping[str, Sequence[str]] = field(default_factory=dict)
    ssl_domains: Sequence[str] = ()
    # None: containers were not inspected, hosts records are left alone.
    container_addresses: Mapping[str, str] | None = None
    force_recreate: bool = False
    trust: bool = True
    cert_dir: Path | None = None


@dataclass
class UpResult:
    project: ProjectInfo
    changes: ProjectChanges
    domains: list[str]
    containers: dict[str, ContainerInfo] = field(default_factory=dict)
    hosts_records: list[HostsRecord] = field(default_factory=list)
    certificates: CertificateReport = field(default_factory=CertificateReport)
    warnings: list[str] = field(default_factory=list)


@dataclass
class DownRequest:
    project_name: str
    keep_hosts: bool = False
    remove_config: bool = False


@dataclass
class DownResult:
    project: ProjectInfo | None
    hosts_removed: bool = False
    config_removed: bool = False
    warnings: list[str] = field(default_factory=list)


def collect_all_domains(service_domains: Mapping[str, Sequence[str]]) -> list[str]:
    """Unique domains across services, first occurrence wins."""

    seen: dict[str, None] = {}
    for name in sorted(service_domains):
        for domain in service_domains[name]:
            domain = domain.strip()
            if domain:
                seen.setdefault(domain, None)
    return list(seen)


def default_domain(project_name: str) -> str:
    return f"{project_name}.local"


def build_container_info(
    addresses: Mapping[str, str],
    service_domains: Mapping[str, Sequence[str]],
) -> dict[str, ContainerInfo]:
    """Pair discovered addresses with the domains configured per service.

    Services without a domain configuration get an address-only entry.
    """

    containers: dict[str, ContainerInfo] = {}
    for name, address in addresses.items():
        containers[name] = ContainerInfo(address=address, domains=list(service_domains.get(name, ())))
    return containers


def _warn(hooks: PipelineHooks, warnings: list[str], message: str) -> None:
    warnings.append(message)
    if hooks.warning:
        hooks.warning(message)


def _step(hooks: PipelineHooks, message: str) -> None:
    if hooks.step:
        hooks.step(message)


def run_up(
    *,
    services: NetworkServices,
    request: UpRequest,
    hooks: PipelineHooks | None = None,
) -> UpResult:
    hooks = hooks or PipelineHooks()
    warnings: list[str] = []

    domains = collect_all_domains(request.service_domains) or [default_domain(request.project_name)]
    ssl_domains = list(dict.fromkeys(d.strip() for d in request.ssl_domains if d.strip()))
    cert_dir = request.cert_dir or services.settings.project_cert_dir(request.project_path)

    # Registry/allocation errors propagate: nothing has been mutated yet.
    project, changes = services.engine.reconcile(
        request.project_name,
        request.project_path,
        domains,
        ssl_domains,
    )
    _step(hooks, f"Subnet: {project.subnet}")

    report = CertificateReport()
    if changes.removed_ssl_domains:
        _step(hooks, "Cleaning up removed SSL domains")
        report.extend(services.certificates.cleanup(changes.removed_ssl_domains, cert_dir))

    if ssl_domains:
        _step(hooks, "Setting up SSL certificates")
        report.extend(
            services.certificates.ensure(
                ssl_domains,
                cert_dir,
                force_recreate=request.force_recreate,
                trust=False,
            )
        )

    containers: dict[str, ContainerInfo] = {}
    records: list[HostsRecord] = []
    if changes.domain_changed and changes.previous_domain:
        _step(hooks, f"Domain changed: {changes.previous_domain} -> {', '.join(domains)}")
        try:
            services.hosts.remove_project_entries(request.project_name)
        except BootappError as exc:
            _warn(hooks, warnings, f"Failed to remove old hosts entries: {exc}")

    if request.container_addresses is not None:
        containers = build_container_info(request.container_addresses, request.service_domains)
        _step(hooks, "Setting up hosts entries")
        try:
            records = services.hosts.add_entries(request.project_name, containers)
        except BootappError as exc:
            _warn(hooks, warnings, f"Failed to update hosts file: {exc}")

    if request.trust and ssl_domains:
        ready = [d for d in ssl_domains if services.certificates.exists(d, cert_dir)]
        _step(hooks, "Installing certificates to system trust store")
        report.extend(services.certificates.trust(ready, cert_dir, force=request.force_recreate))

    for message in report.warnings:
        _warn(hooks, warnings, message)

    return UpResult(
        project=project,
        changes=changes,
        domains=domains,
        containers=containers,
        hosts_records=records,
        certificates=report,
        warnings=warnings,
    )


def run_down(
    *,
    services: NetworkServices,
    request: DownRequest,
    hooks: PipelineHooks | None = None,
) -> DownResult:
    hooks = hooks or PipelineHooks()
    result = DownResult(project=services.registry.get(request.project_name))

    if not request.keep_hosts:
        _step(hooks, "Cleaning up hosts entries")
        try:
            result.hosts_removed = services.hosts.remove_project_entries(request.project_name)
        except BootappError as exc:
            _warn(hooks, result.warnings, f"Failed to clean hosts file: {exc}")

    if request.remove_config:
        _step(hooks, "Removing project configuration")
        # Registry errors are structural: let them propagate.
        result.config_removed = services.registry.remove(request.project_name)

    return result
