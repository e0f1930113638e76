"""Persistencia JSON del registro de proyectos.

Por qué JSON:
- Formato indentado y estable, fácil de revisar con `diff`.
- Compatible con el `~/.bootapp/projects.json` que ya existe en las máquinas.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from core.domain.models import ProjectInfo
from core.errors import ConfigIOError, ParseError


class JsonProjectStore:
    """Lee/escribe `{nombre: ProjectInfo}` en un archivo JSON."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, ProjectInfo]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            raise ParseError(f"malformed registry {self.path}: {exc}") from exc
        except OSError as exc:
            raise ConfigIOError(f"cannot read registry {self.path}: {exc}") from exc

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"malformed registry {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseError(f"malformed registry {self.path}: expected an object")

        try:
            return {name: ProjectInfo.model_validate(info) for name, info in data.items()}
        except ValidationError as exc:
            raise ParseError(f"malformed registry {self.path}: {exc}") from exc

    def save(self, projects: dict[str, ProjectInfo]) -> None:
        payload = {
            name: info.model_dump(mode="json", exclude_none=True)
            for name, info in projects.items()
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise ConfigIOError(f"cannot write registry {self.path}: {exc}") from exc


class InMemoryProjectStore:
    """Store volátil; cuenta las escrituras para verificar idempotencia."""

    def __init__(self, projects: dict[str, ProjectInfo] | None = None) -> None:
        self._projects = {k: v.model_copy(deep=True) for k, v in (projects or {}).items()}
        self.save_count = 0

    def load(self) -> dict[str, ProjectInfo]:
        return {k: v.model_copy(deep=True) for k, v in self._projects.items()}

    def save(self, projects: dict[str, ProjectInfo]) -> None:
        self._projects = {k: v.model_copy(deep=True) for k, v in projects.items()}
        self.save_count += 1
