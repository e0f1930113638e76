"""Idempotent management of bootapp-owned records in the shared hosts file.

Only lines tagged with the marker belong to us; everything else in the file
is left byte-for-byte untouched. Rewriting a project's records is a
remove-then-append sequence: two separate privileged writes, not atomic.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.domain.hosts_format import KNOWN_RECORD_MATCHERS, RecordMatcher, render_record
from core.domain.models import ContainerInfo, HostsRecord
from core.errors import NotFound
from core.interfaces.stores import HostsFile

DEFAULT_MARKER = "## bootapp"


class HostsEntryManager:
    def __init__(
        self,
        hosts_file: HostsFile,
        *,
        marker: str = DEFAULT_MARKER,
        matchers: Sequence[RecordMatcher] = KNOWN_RECORD_MATCHERS,
    ) -> None:
        self.hosts_file = hosts_file
        self.marker = marker
        self.matchers = tuple(matchers)

    def add_entries(self, project: str, containers: Mapping[str, ContainerInfo]) -> list[HostsRecord]:
        """Replace every record of `project` with one record per (address, hostname).

        Containers without an address or without hostnames are skipped, as
        are blank hostnames. Returns the records written.
        """

        self.remove_project_entries(project)

        records: list[HostsRecord] = []
        lines: list[str] = []
        for name in sorted(containers):
            info = containers[name]
            address = info.address.strip()
            if not address or not info.domains:
                continue
            for domain in info.domains:
                hostname = domain.strip()
                if not hostname:
                    continue
                records.append(HostsRecord(address=address, hostname=hostname, project=project))
                lines.extend(render_record(self.marker, project, address, hostname))

        if lines:
            self.hosts_file.append_lines(lines)
        return records

    def remove_project_entries(self, project: str) -> bool:
        """Delete `project` records in every known format. Returns whether any existed."""

        original = self.hosts_file.read_lines()
        lines = original
        for matcher in self.matchers:
            lines = matcher.strip(lines, self.marker, project)
        if lines == original:
            return False
        self.hosts_file.write_lines(lines)
        return True

    def list_entries(self) -> list[HostsRecord]:
        """Every bootapp-owned record, in file order."""

        lines = self.hosts_file.read_lines()
        found: list[tuple[int, HostsRecord]] = []
        for matcher in self.matchers:
            found.extend(matcher.parse(lines, self.marker))
        found.sort(key=lambda item: item[0])
        return [record for _, record in found]

    def project_entries(self, project: str) -> list[HostsRecord]:
        return [record for record in self.list_entries() if record.project == project]

    def entry_exists(self, hostname: str) -> bool:
        return any(record.hostname == hostname for record in self.list_entries())

    def get_address_for_hostname(self, hostname: str) -> str:
        """Address of the first resolution line naming `hostname` (owned or not)."""

        for line in self.hosts_file.read_lines():
            stripped = line.split("#", 1)[0].strip()
            fields = stripped.split()
            if len(fields) >= 2 and hostname in fields[1:]:
                return fields[0]
        raise NotFound(f"domain {hostname} not found in hosts file")
