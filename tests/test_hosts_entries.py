"""Tests for hosts record formats and HostsEntryManager."""

import subprocess
from pathlib import Path

import pytest

from adapters.hosts_file import LocalHostsFile, SystemHostsFile
from core.domain.hosts_format import InlineMatcher, TwoLineMatcher, render_record
from core.domain.models import ContainerInfo, HostsRecord
from core.errors import ExternalToolFailure, NotFound
from core.services.hosts_entries import HostsEntryManager

MARKER = "## bootapp"


class TestRecordFormat:
    def test_render_record(self) -> None:
        assert render_record(MARKER, "myproject", "172.18.0.2", "myapp.local") == [
            "## bootapp:myproject",
            "172.18.0.2\tmyapp.local",
        ]

    def test_two_line_parse_skips_orphans(self) -> None:
        lines = [
            "## bootapp:shop",
            "## bootapp:shop",
            "172.18.0.2\tshop.local",
            "## bootapp:ghost",
            "",
            "## bootapp:tail",
        ]
        records = [r for _, r in TwoLineMatcher().parse(lines, MARKER)]
        assert records == [HostsRecord(address="172.18.0.2", hostname="shop.local", project="shop")]

    def test_two_line_strip_only_touches_project(self) -> None:
        lines = [
            "127.0.0.1 localhost",
            "## bootapp:shop",
            "172.18.0.2\tshop.local",
            "## bootapp:shopfront",
            "172.19.0.2\tfront.local",
        ]
        assert TwoLineMatcher().strip(lines, MARKER, "shop") == [
            "127.0.0.1 localhost",
            "## bootapp:shopfront",
            "172.19.0.2\tfront.local",
        ]

    def test_orphan_marker_is_stripped_without_eating_next_comment(self) -> None:
        lines = ["## bootapp:shop", "# user comment", "10.0.0.1 db"]
        assert TwoLineMatcher().strip(lines, MARKER, "shop") == ["# user comment", "10.0.0.1 db"]

    def test_inline_legacy(self) -> None:
        lines = [
            "172.18.0.2\tshop.local\t## bootapp:shop",
            "172.18.0.3 api.shop.local ## bootapp:shop",
            "172.19.0.2\tother.local\t## bootapp:other",
        ]
        matcher = InlineMatcher()
        parsed = [r for _, r in matcher.parse(lines, MARKER)]
        assert [r.project for r in parsed] == ["shop", "shop", "other"]
        assert matcher.strip(lines, MARKER, "shop") == ["172.19.0.2\tother.local\t## bootapp:other"]


class TestHostsEntryManager:
    def test_add_then_list_then_remove(self, hosts: HostsEntryManager) -> None:
        hosts.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})

        assert hosts.list_entries() == [HostsRecord(address="10.0.0.2", hostname="shop.local", project="shop")]

        assert hosts.remove_project_entries("shop") is True
        assert hosts.project_entries("shop") == []

    def test_foreign_lines_untouched(self, hosts: HostsEntryManager, hosts_path: Path) -> None:
        before = hosts_path.read_text(encoding="utf-8")
        hosts.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})
        hosts.remove_project_entries("shop")
        assert hosts_path.read_text(encoding="utf-8") == before

    def test_add_is_idempotent(self, hosts: HostsEntryManager, hosts_path: Path) -> None:
        containers = {
            "app": ContainerInfo(address="172.18.0.2", domains=["myapp.local", "www.myapp.local"]),
            "api": ContainerInfo(address="172.18.0.3", domains=["api.local"]),
        }
        hosts.add_entries("myproject", containers)
        first = hosts_path.read_text(encoding="utf-8")
        hosts.add_entries("myproject", containers)

        assert hosts_path.read_text(encoding="utf-8") == first
        assert len(hosts.project_entries("myproject")) == 3

    def test_skips_unqualified_containers_and_blank_domains(self, hosts: HostsEntryManager) -> None:
        records = hosts.add_entries(
            "myproject",
            {
                "app": ContainerInfo(address="172.18.0.2", domains=["myapp.local", "", "  "]),
                "db": ContainerInfo(address="172.18.0.4", domains=[]),
                "redis": ContainerInfo(address="", domains=["redis.local"]),
            },
        )
        assert [r.hostname for r in records] == ["myapp.local"]
        assert len(hosts.list_entries()) == 1

    def test_no_qualifying_container_writes_nothing(self, hosts_path: Path) -> None:
        class Recording(LocalHostsFile):
            appended = 0

            def append_lines(self, lines) -> None:
                Recording.appended += 1
                super().append_lines(lines)

        manager = HostsEntryManager(Recording(hosts_path))
        assert manager.add_entries("p", {"db": ContainerInfo(address="10.0.0.4")}) == []
        assert Recording.appended == 0

    def test_add_replaces_legacy_records(self, hosts: HostsEntryManager, hosts_path: Path) -> None:
        with hosts_path.open("a", encoding="utf-8") as fh:
            fh.write("172.18.0.2\told.local\t## bootapp:shop\n")

        hosts.add_entries("shop", {"web": ContainerInfo(address="172.18.0.2", domains=["new.local"])})

        text = hosts_path.read_text(encoding="utf-8")
        assert "old.local" not in text
        assert [r.hostname for r in hosts.project_entries("shop")] == ["new.local"]

    def test_remove_absent_project(self, hosts: HostsEntryManager) -> None:
        assert hosts.remove_project_entries("ghost") is False

    def test_entry_exists_and_address_lookup(self, hosts: HostsEntryManager) -> None:
        hosts.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})

        assert hosts.entry_exists("shop.local")
        assert not hosts.entry_exists("localhost")
        assert hosts.get_address_for_hostname("shop.local") == "10.0.0.2"
        assert hosts.get_address_for_hostname("localhost") == "127.0.0.1"
        with pytest.raises(NotFound):
            hosts.get_address_for_hostname("missing.local")

    def test_list_preserves_file_order_across_formats(self, hosts_path: Path) -> None:
        hosts_path.write_text(
            "10.0.0.9\tlegacy.local\t## bootapp:old\n## bootapp:new\n10.0.0.2\tnew.local\n",
            encoding="utf-8",
        )
        manager = HostsEntryManager(LocalHostsFile(hosts_path))
        assert [r.hostname for r in manager.list_entries()] == ["legacy.local", "new.local"]

    def test_missing_trailing_newline_is_respected(self, hosts_path: Path) -> None:
        hosts_path.write_text("127.0.0.1 localhost", encoding="utf-8")
        manager = HostsEntryManager(LocalHostsFile(hosts_path))
        manager.add_entries("p", {"web": ContainerInfo(address="10.0.0.2", domains=["p.local"])})
        assert hosts_path.read_text(encoding="utf-8").splitlines()[0] == "127.0.0.1 localhost"


class TestSystemHostsFile:
    def test_writes_go_through_privileged_tee(self, runner, hosts_path: Path) -> None:
        manager = HostsEntryManager(SystemHostsFile(hosts_path, runner))
        manager.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})

        assert runner.calls == [
            (["tee", "-a", str(hosts_path)], True, "## bootapp:shop\n10.0.0.2\tshop.local\n"),
        ]

    def test_rewrite_uses_tee_without_append(self, runner, hosts_path: Path) -> None:
        hosts_path.write_text("127.0.0.1 localhost\n## bootapp:shop\n10.0.0.2\tshop.local\n", encoding="utf-8")
        manager = HostsEntryManager(SystemHostsFile(hosts_path, runner))

        assert manager.remove_project_entries("shop") is True
        argv, privileged, payload = runner.calls[0]
        assert argv == ["tee", str(hosts_path)]
        assert privileged is True
        assert payload == "127.0.0.1 localhost\n"

    def test_failure_surfaces(self, runner, hosts_path: Path) -> None:
        runner.responders.append(
            lambda argv: subprocess.CompletedProcess(argv, 1, "", "permission denied")
        )
        manager = HostsEntryManager(SystemHostsFile(hosts_path, runner))
        with pytest.raises(ExternalToolFailure):
            manager.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})


class TestForeignBytes:
    LATIN1 = b"127.0.0.1 localhost # caf\xe9\n"

    def test_non_utf8_bytes_survive_add_and_remove(self, hosts_path: Path) -> None:
        hosts_path.write_bytes(self.LATIN1)
        manager = HostsEntryManager(LocalHostsFile(hosts_path))

        manager.add_entries("shop", {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])})
        assert hosts_path.read_bytes() == self.LATIN1 + b"## bootapp:shop\n10.0.0.2\tshop.local\n"
        assert manager.get_address_for_hostname("shop.local") == "10.0.0.2"

        assert manager.remove_project_entries("shop") is True
        assert hosts_path.read_bytes() == self.LATIN1

    def test_rewrite_through_tee_keeps_foreign_bytes(self, runner, hosts_path: Path) -> None:
        hosts_path.write_bytes(self.LATIN1 + b"## bootapp:shop\n10.0.0.2\tshop.local\n")
        manager = HostsEntryManager(SystemHostsFile(hosts_path, runner))

        manager.remove_project_entries("shop")

        _, _, payload = runner.calls[0]
        assert payload.encode("utf-8", "surrogateescape") == self.LATIN1


def test_project_name_with_spaces_is_replaced_not_duplicated(hosts: HostsEntryManager, hosts_path: Path) -> None:
    containers = {"web": ContainerInfo(address="10.0.0.2", domains=["shop.local"])}

    hosts.add_entries("my shop", containers)
    hosts.add_entries("my shop", containers)

    assert hosts_path.read_text(encoding="utf-8").count("## bootapp:my shop\n") == 1
    assert [r.project for r in hosts.list_entries()] == ["my shop"]
    assert hosts.remove_project_entries("my shop") is True
    assert hosts.list_entries() == []
