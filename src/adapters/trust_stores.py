"""Trust stores por plataforma.

- macOS: System keychain vía `security` (metadatos de confianza reales).
- Linux: anclas de CA (Debian/Ubuntu o RHEL/Fedora); la confianza se infiere
  de la presencia del certificado en el directorio de anclas.

La plataforma se resuelve una sola vez con `resolve_trust_store`; un sistema
desconocido obtiene `UnsupportedTrustStore`, que falla en cada operación.
"""

from __future__ import annotations

import logging
import os
import re
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from core.errors import ExternalToolFailure, UnsupportedPlatform
from core.interfaces.commands import CommandRunner
from core.interfaces.trust_store import TrustStore

logger = logging.getLogger(__name__)

SYSTEM_KEYCHAIN = "/Library/Keychains/System.keychain"

_SHA1_LINE = re.compile(r"SHA-1 hash:\s*([0-9A-Fa-f]+)")
_TRUST_COUNT = re.compile(r"Number of trust settings\s*:\s*(\d+)")


class DarwinTrustStore:
    platform_id = "darwin"

    def __init__(self, runner: CommandRunner, keychain: str = SYSTEM_KEYCHAIN) -> None:
        self.runner = runner
        self.keychain = keychain

    def _hashes(self, domain: str) -> list[str]:
        result = self.runner.run(["security", "find-certificate", "-a", "-Z", "-c", domain], check=False)
        if result.returncode != 0:
            return []
        return _SHA1_LINE.findall(result.stdout)

    def uninstall(self, domain: str) -> None:
        for sha1 in self._hashes(domain):
            result = self.runner.run(
                ["security", "delete-certificate", "-Z", sha1, self.keychain],
                privileged=True,
                check=False,
            )
            if result.returncode != 0:
                logger.debug("delete-certificate %s failed (%s): %s", sha1, result.returncode, result.stderr.strip())

    def install(self, domain: str, cert_path: Path) -> None:
        self.uninstall(domain)

        # Copia temporal: `security` falla con algunas rutas (espacios, volúmenes).
        fd, tmp_name = tempfile.mkstemp(prefix=f"bootapp-cert-{domain}-", suffix=".crt")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(Path(cert_path).read_bytes())
            self.runner.run(
                [
                    "security",
                    "add-trusted-cert",
                    "-d",
                    "-r",
                    "trustRoot",
                    "-p",
                    "ssl",
                    "-k",
                    self.keychain,
                    tmp_name,
                ],
                privileged=True,
            )
        finally:
            os.unlink(tmp_name)

    def is_trusted(self, domain: str) -> bool:
        result = self.runner.run(["security", "dump-trust-settings", "-d"], check=False)
        if result.returncode != 0:
            return False
        return parse_darwin_trust_settings(result.stdout, domain)


def parse_darwin_trust_settings(output: str, domain: str) -> bool:
    """True si `domain` aparece con al menos un trust setting activo.

    Formato de `security dump-trust-settings -d`:

        Cert 0: shop.local
           Number of trust settings : 1
    """

    found = False
    for raw in output.splitlines():
        line = raw.strip()
        if line.startswith("Cert ") and ":" in line:
            found = line.split(":", 1)[1].strip() == domain
            continue
        if found:
            match = _TRUST_COUNT.search(line)
            if match:
                return int(match.group(1)) > 0
    return False


@dataclass(frozen=True)
class LinuxAnchor:
    """Directorio de anclas de CA y los comandos que lo refrescan."""

    tool: str
    directory: Path
    refresh: tuple[str, ...]
    refresh_after_remove: tuple[str, ...]

    def path_for(self, domain: str) -> Path:
        return self.directory / f"{domain}.crt"


LINUX_ANCHORS: tuple[LinuxAnchor, ...] = (
    LinuxAnchor(
        tool="update-ca-certificates",
        directory=Path("/usr/local/share/ca-certificates"),
        refresh=("update-ca-certificates",),
        refresh_after_remove=("update-ca-certificates", "--fresh"),
    ),
    LinuxAnchor(
        tool="update-ca-trust",
        directory=Path("/etc/pki/ca-trust/source/anchors"),
        refresh=("update-ca-trust", "extract"),
        refresh_after_remove=("update-ca-trust", "extract"),
    ),
)


class LinuxTrustStore:
    platform_id = "linux"

    def __init__(self, runner: CommandRunner, anchors: Sequence[LinuxAnchor] = LINUX_ANCHORS) -> None:
        self.runner = runner
        self.anchors = tuple(anchors)

    def uninstall(self, domain: str) -> None:
        for anchor in self.anchors:
            path = anchor.path_for(domain)
            if not path.exists():
                continue
            self.runner.run(["rm", "-f", str(path)], privileged=True)
            self.runner.run(list(anchor.refresh_after_remove), privileged=True)

    def install(self, domain: str, cert_path: Path) -> None:
        self.uninstall(domain)

        for anchor in self.anchors:
            if self.runner.which(anchor.tool) is None:
                continue
            self.runner.run(["cp", str(cert_path), str(anchor.path_for(domain))], privileged=True)
            self.runner.run(list(anchor.refresh), privileged=True)
            return

        raise ExternalToolFailure(
            [anchor.tool for anchor in self.anchors],
            message="no supported certificate trust mechanism found",
        )

    def is_trusted(self, domain: str) -> bool:
        return any(anchor.path_for(domain).exists() for anchor in self.anchors)


class UnsupportedTrustStore:
    """Trust store para sistemas sin soporte: todas las operaciones fallan."""

    def __init__(self, platform_id: str) -> None:
        self.platform_id = platform_id

    def install(self, domain: str, cert_path: Path) -> None:
        raise UnsupportedPlatform(self.platform_id)

    def uninstall(self, domain: str) -> None:
        raise UnsupportedPlatform(self.platform_id)

    def is_trusted(self, domain: str) -> bool:
        raise UnsupportedPlatform(self.platform_id)


TRUST_STORES: dict[str, Callable[[CommandRunner], TrustStore]] = {
    "darwin": DarwinTrustStore,
    "linux": LinuxTrustStore,
}


def detect_platform() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def resolve_trust_store(runner: CommandRunner, platform_id: str | None = None) -> TrustStore:
    platform_id = platform_id or detect_platform()
    factory = TRUST_STORES.get(platform_id)
    if factory is None:
        return UnsupportedTrustStore(platform_id)
    return factory(runner)
