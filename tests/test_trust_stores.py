"""Tests for per-platform trust stores."""

import subprocess
from pathlib import Path

import pytest

from adapters.trust_stores import (
    DarwinTrustStore,
    LinuxAnchor,
    LinuxTrustStore,
    UnsupportedTrustStore,
    parse_darwin_trust_settings,
    resolve_trust_store,
)
from core.errors import ExternalToolFailure, UnsupportedPlatform

DUMP = """\
Number of trusted certs = 3
Cert 0: other.local
   Number of trust settings : 1
Cert 1: shop.local
   Number of trust settings : 0
Cert 2: api.local
   Number of trust settings : 2
"""


def _ok(stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess([], 0, stdout, "")


class TestDarwinTrustSettings:
    def test_parse(self) -> None:
        assert parse_darwin_trust_settings(DUMP, "other.local") is True
        assert parse_darwin_trust_settings(DUMP, "shop.local") is False
        assert parse_darwin_trust_settings(DUMP, "api.local") is True
        assert parse_darwin_trust_settings(DUMP, "missing.local") is False

    def test_suffix_is_not_a_match(self) -> None:
        dump = "Cert 0: www.shop.local\n   Number of trust settings : 1\n"
        assert parse_darwin_trust_settings(dump, "shop.local") is False


class TestDarwinTrustStore:
    def test_install_removes_previous_then_adds(self, runner, tmp_path: Path) -> None:
        cert = tmp_path / "shop.local.crt"
        cert.write_text("PEM", encoding="utf-8")
        runner.responders.append(
            lambda argv: _ok("SHA-1 hash: ABC123\nSHA-1 hash: DEF456\n") if argv[:2] == ["security", "find-certificate"] else None
        )

        DarwinTrustStore(runner).install("shop.local", cert)

        commands = runner.commands()
        assert commands[0] == ["security", "find-certificate", "-a", "-Z", "-c", "shop.local"]
        assert commands[1][:4] == ["security", "delete-certificate", "-Z", "ABC123"]
        assert commands[2][:4] == ["security", "delete-certificate", "-Z", "DEF456"]
        add = commands[3]
        assert add[:2] == ["security", "add-trusted-cert"]
        assert "-p" in add and "ssl" in add
        assert not Path(add[-1]).exists()
        assert all(privileged for argv, privileged, _ in runner.calls if "delete-certificate" in argv or "add-trusted-cert" in argv)

    def test_failed_delete_does_not_block_install(self, runner, tmp_path: Path) -> None:
        cert = tmp_path / "shop.local.crt"
        cert.write_text("PEM", encoding="utf-8")

        def respond(argv):
            if argv[:2] == ["security", "find-certificate"]:
                return _ok("SHA-1 hash: ABC123\n")
            if argv[:2] == ["security", "delete-certificate"]:
                return subprocess.CompletedProcess(argv, 1, "", "in use")
            return None

        runner.responders.append(respond)
        DarwinTrustStore(runner).install("shop.local", cert)

        assert runner.commands()[-1][:2] == ["security", "add-trusted-cert"]

    def test_uninstall_when_nothing_found(self, runner) -> None:
        runner.responders.append(lambda argv: subprocess.CompletedProcess(argv, 44, "", "not found"))
        DarwinTrustStore(runner).uninstall("shop.local")
        assert len(runner.calls) == 1

    def test_is_trusted_uses_trust_settings(self, runner) -> None:
        runner.responders.append(lambda argv: _ok(DUMP))
        store = DarwinTrustStore(runner)
        assert store.is_trusted("api.local")
        assert not store.is_trusted("shop.local")


@pytest.fixture
def anchors(tmp_path: Path) -> tuple[LinuxAnchor, LinuxAnchor]:
    debian = LinuxAnchor(
        tool="update-ca-certificates",
        directory=tmp_path / "ca-certificates",
        refresh=("update-ca-certificates",),
        refresh_after_remove=("update-ca-certificates", "--fresh"),
    )
    rhel = LinuxAnchor(
        tool="update-ca-trust",
        directory=tmp_path / "anchors",
        refresh=("update-ca-trust", "extract"),
        refresh_after_remove=("update-ca-trust", "extract"),
    )
    debian.directory.mkdir()
    rhel.directory.mkdir()
    return debian, rhel


class TestLinuxTrustStore:
    def test_install_uses_first_available_tool(self, runner, anchors, tmp_path: Path) -> None:
        runner.tools = {"update-ca-trust"}
        cert = tmp_path / "shop.local.crt"
        cert.write_text("PEM", encoding="utf-8")

        LinuxTrustStore(runner, anchors).install("shop.local", cert)

        assert runner.commands() == [
            ["cp", str(cert), str(anchors[1].path_for("shop.local"))],
            ["update-ca-trust", "extract"],
        ]
        assert all(privileged for _, privileged, _ in runner.calls)

    def test_install_removes_stale_anchor_first(self, runner, anchors, tmp_path: Path) -> None:
        runner.tools = {"update-ca-certificates"}
        stale = anchors[0].path_for("shop.local")
        stale.write_text("OLD", encoding="utf-8")

        LinuxTrustStore(runner, anchors).install("shop.local", tmp_path / "shop.local.crt")

        assert runner.commands()[:2] == [
            ["rm", "-f", str(stale)],
            ["update-ca-certificates", "--fresh"],
        ]

    def test_install_without_tooling(self, runner, anchors, tmp_path: Path) -> None:
        with pytest.raises(ExternalToolFailure):
            LinuxTrustStore(runner, anchors).install("shop.local", tmp_path / "shop.local.crt")

    def test_uninstall_nothing_to_remove(self, runner, anchors) -> None:
        LinuxTrustStore(runner, anchors).uninstall("shop.local")
        assert runner.calls == []

    def test_is_trusted_checks_anchor_presence(self, runner, anchors) -> None:
        store = LinuxTrustStore(runner, anchors)
        assert not store.is_trusted("shop.local")
        anchors[1].path_for("shop.local").write_text("PEM", encoding="utf-8")
        assert store.is_trusted("shop.local")


class TestResolve:
    def test_known_platforms(self, runner) -> None:
        assert isinstance(resolve_trust_store(runner, "darwin"), DarwinTrustStore)
        assert isinstance(resolve_trust_store(runner, "linux"), LinuxTrustStore)

    def test_unknown_platform_fails_every_operation(self, runner, tmp_path: Path) -> None:
        store = resolve_trust_store(runner, "win32")
        assert isinstance(store, UnsupportedTrustStore)
        with pytest.raises(UnsupportedPlatform):
            store.install("a.local", tmp_path / "a.crt")
        with pytest.raises(UnsupportedPlatform):
            store.uninstall("a.local")
        with pytest.raises(UnsupportedPlatform):
            store.is_trusted("a.local")
