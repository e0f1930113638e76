"""Reconciliation of a project's requested state against the registry.

The engine is the only writer of project records during `up`. It allocates a
subnet for unknown projects and, for known ones, computes what changed since
the previous run so the caller can clean up hosts entries and certificates.
No default values are applied here: an empty domain list is stored as-is.
"""

from __future__ import annotations

from typing import Sequence

from core.domain.models import ProjectChanges, ProjectInfo
from core.domain.subnet import SubnetAllocator
from core.services.registry import ProjectRegistry


def same_domains(a: Sequence[str], b: Sequence[str]) -> bool:
    """Order-independent comparison of two domain lists."""

    return set(a) == set(b)


def removed_domains(old: Sequence[str], new: Sequence[str]) -> list[str]:
    """Domains in `old` that are absent from `new`, keeping `old` order."""

    keep = set(new)
    removed: list[str] = []
    for domain in old:
        if domain not in keep and domain not in removed:
            removed.append(domain)
    return removed


class ReconciliationEngine:
    def __init__(self, registry: ProjectRegistry, allocator: SubnetAllocator) -> None:
        self.registry = registry
        self.allocator = allocator

    def reconcile(
        self,
        name: str,
        path: str,
        domains: Sequence[str],
        ssl_domains: Sequence[str],
    ) -> tuple[ProjectInfo, ProjectChanges]:
        """Return the (possibly new) record for `name` and the detected changes.

        Raises `SubnetExhausted` for a new project when the pool is full; in
        that case the registry is left untouched.
        """

        domains = list(domains)
        ssl_domains = list(ssl_domains)

        info = self.registry.get(name)
        if info is None:
            return self._create(name, path, domains, ssl_domains), ProjectChanges()

        previous = info.effective_domains()
        changes = ProjectChanges(
            previous_domains=previous,
            previous_ssl_domains=list(info.ssl_domains),
            domain_changed=not same_domains(previous, domains),
            removed_ssl_domains=removed_domains(info.ssl_domains, ssl_domains),
        )

        updated = False
        if info.path != path:
            info.path = path
            updated = True
        if not same_domains(info.domains, domains) or info.domain is not None:
            info.domains = domains
            info.domain = None
            updated = True
        if not same_domains(info.ssl_domains, ssl_domains):
            info.ssl_domains = ssl_domains
            updated = True

        if updated:
            self.registry.put(name, info)
        return info, changes

    def _create(
        self,
        name: str,
        path: str,
        domains: list[str],
        ssl_domains: list[str],
    ) -> ProjectInfo:
        used = self.allocator.used_slots(self.registry.subnets())
        slot = self.allocator.allocate(used)
        info = ProjectInfo(
            path=path,
            subnet=self.allocator.format(slot),
            domains=domains,
            ssl_domains=ssl_domains,
        )
        self.registry.put(name, info)
        return info
