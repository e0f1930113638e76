"""Backends del archivo hosts.

- `LocalHostsFile`: escribe directamente (archivos temporales, tests, hosts
  de usuario sin privilegios).
- `SystemHostsFile`: lee directamente pero escribe vía `tee` con privilegios,
  porque `/etc/hosts` pertenece a root.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from core.errors import ConfigIOError
from core.interfaces.commands import CommandRunner

# Bytes ajenos (comentarios Latin-1, etc.) se conservan tal cual al reescribir.
HOSTS_ERRORS = "surrogateescape"


def _render(lines: Sequence[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


class LocalHostsFile:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_text(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8", errors=HOSTS_ERRORS)
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeError) as exc:
            raise ConfigIOError(f"cannot read {self.path}: {exc}") from exc

    def read_lines(self) -> list[str]:
        return self.read_text().splitlines()

    def _append_payload(self, lines: Sequence[str]) -> str:
        current = self.read_text()
        prefix = "\n" if current and not current.endswith("\n") else ""
        return prefix + _render(lines)

    def write_lines(self, lines: Sequence[str]) -> None:
        self._write(_render(lines), append=False)

    def append_lines(self, lines: Sequence[str]) -> None:
        if not lines:
            return
        self._write(self._append_payload(lines), append=True)

    def _write(self, content: str, *, append: bool) -> None:
        try:
            with self.path.open("a" if append else "w", encoding="utf-8", errors=HOSTS_ERRORS) as fh:
                fh.write(content)
        except (OSError, UnicodeError) as exc:
            raise ConfigIOError(f"cannot write {self.path}: {exc}") from exc


class SystemHostsFile(LocalHostsFile):
    """Archivo hosts del sistema; las escrituras pasan por `sudo tee`."""

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        super().__init__(path)
        self.runner = runner

    def _write(self, content: str, *, append: bool) -> None:
        args = ["tee", "-a", str(self.path)] if append else ["tee", str(self.path)]
        try:
            self.runner.run(args, privileged=True, input=content)
        except UnicodeError as exc:
            raise ConfigIOError(f"cannot write {self.path}: {exc}") from exc
