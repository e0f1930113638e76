"""Shared fixtures: fake command runner, temporary hosts file, in-memory registry."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Sequence

import pytest

from adapters.hosts_file import LocalHostsFile
from adapters.registry_store import InMemoryProjectStore
from core.domain.subnet import SubnetAllocator
from core.errors import ExternalToolFailure
from core.services.hosts_entries import HostsEntryManager
from core.services.reconciliation import ReconciliationEngine
from core.services.registry import ProjectRegistry

Responder = Callable[[list[str]], "subprocess.CompletedProcess[str] | None"]


class FakeRunner:
    """Records invocations instead of running anything."""

    def __init__(self, tools: Sequence[str] = ()) -> None:
        self.calls: list[tuple[list[str], bool, str | None]] = []
        self.tools = set(tools)
        self.responders: list[Responder] = []

    def run(
        self,
        args: Sequence[str],
        *,
        privileged: bool = False,
        input: str | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        argv = list(args)
        self.calls.append((argv, privileged, input))
        result: subprocess.CompletedProcess[str] | None = None
        for responder in self.responders:
            result = responder(argv)
            if result is not None:
                break
        if result is None:
            result = subprocess.CompletedProcess(argv, 0, "", "")
        if check and result.returncode != 0:
            raise ExternalToolFailure(argv, result.returncode, result.stderr)
        return result

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.tools else None

    def commands(self) -> list[list[str]]:
        return [argv for argv, _, _ in self.calls]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def hosts_path(tmp_path: Path) -> Path:
    path = tmp_path / "hosts"
    path.write_text("127.0.0.1\tlocalhost\n::1\tlocalhost\n", encoding="utf-8")
    return path


@pytest.fixture
def hosts(hosts_path: Path) -> HostsEntryManager:
    return HostsEntryManager(LocalHostsFile(hosts_path))


@pytest.fixture
def store() -> InMemoryProjectStore:
    return InMemoryProjectStore()


@pytest.fixture
def registry(store: InMemoryProjectStore) -> ProjectRegistry:
    return ProjectRegistry(store)


@pytest.fixture
def engine(registry: ProjectRegistry) -> ReconciliationEngine:
    return ReconciliationEngine(registry, SubnetAllocator())


class FakeTrustStore:
    """Trust store kept in a dict; `fail_install` domains raise on install."""

    platform_id = "fake"

    def __init__(self) -> None:
        self.trusted: dict[str, Path] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_install: set[str] = set()

    def install(self, domain: str, cert_path: Path) -> None:
        self.calls.append(("install", domain))
        self.uninstall(domain)
        if domain in self.fail_install:
            raise ExternalToolFailure(["security"], 1, "denied")
        self.trusted[domain] = cert_path

    def uninstall(self, domain: str) -> None:
        self.calls.append(("uninstall", domain))
        self.trusted.pop(domain, None)

    def is_trusted(self, domain: str) -> bool:
        return domain in self.trusted


@pytest.fixture
def trust() -> FakeTrustStore:
    return FakeTrustStore()
