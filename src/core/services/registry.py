"""Project registry service.

Wraps a `ProjectStore` with the in-memory view used during one invocation.
There is no locking: the registry assumes a single operator at a time.
"""

from __future__ import annotations

from core.domain.models import ProjectInfo
from core.interfaces.stores import ProjectStore


class ProjectRegistry:
    """One `ProjectInfo` per project name, persisted as a whole."""

    def __init__(self, store: ProjectStore) -> None:
        self._store = store
        self._projects: dict[str, ProjectInfo] = {}
        self.load()

    def load(self) -> dict[str, ProjectInfo]:
        """Reload from the store; a missing file yields an empty registry."""

        self._projects = self._store.load()
        return self.list()

    def save(self) -> None:
        self._store.save(self._projects)

    def get(self, name: str) -> ProjectInfo | None:
        info = self._projects.get(name)
        return info.model_copy(deep=True) if info is not None else None

    def list(self) -> dict[str, ProjectInfo]:
        """Deep copy of every record."""

        return {name: info.model_copy(deep=True) for name, info in self._projects.items()}

    def put(self, name: str, info: ProjectInfo) -> None:
        """Store `info` under `name` and persist."""

        self._projects[name] = info.model_copy(deep=True)
        self.save()

    def remove(self, name: str) -> bool:
        """Delete the record and persist immediately. Returns whether it existed."""

        existed = self._projects.pop(name, None) is not None
        self.save()
        return existed

    def subnets(self) -> list[str]:
        return [info.subnet for info in self._projects.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __len__(self) -> int:
        return len(self._projects)
