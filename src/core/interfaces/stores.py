"""Contratos de almacenamiento para estado global mutable.

Por qué Protocol:
- El registro de proyectos y el archivo hosts son estado global compartido;
  modelarlos como stores inyectados evita singletons a nivel de paquete.
- Permite que los tests usen implementaciones en memoria o archivos temporales.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import ProjectInfo


@runtime_checkable
class ProjectStore(Protocol):
    """Persistencia completa del registro de proyectos.

    Reglas de diseño:
    - `load` devuelve un mapa vacío si aún no hay nada persistido.
    - `save` siempre escribe el registro completo (nunca deltas).
    """

    def load(self) -> dict[str, ProjectInfo]:
        ...

    def save(self, projects: dict[str, ProjectInfo]) -> None:
        ...


@runtime_checkable
class HostsFile(Protocol):
    """Archivo de resolución de nombres orientado a líneas.

    Las lecturas no requieren privilegios; las escrituras pueden requerirlos.
    """

    def read_lines(self) -> list[str]:
        ...

    def write_lines(self, lines: Sequence[str]) -> None:
        """Reemplaza el contenido completo del archivo."""

        ...

    def append_lines(self, lines: Sequence[str]) -> None:
        ...
