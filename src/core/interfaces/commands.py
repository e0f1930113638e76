"""Contrato para invocar herramientas externas del sistema.

Por qué Protocol:
- Hosts y trust store dependen de comandos privilegiados (`sudo`, `security`,
  `update-ca-certificates`); los tests inyectan un runner falso.
"""

from __future__ import annotations

import subprocess
from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class CommandRunner(Protocol):
    """Ejecuta herramientas externas (bloqueante, sin timeout)."""

    def run(
        self,
        args: Sequence[str],
        *,
        privileged: bool = False,
        input: str | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        """Lanza `ExternalToolFailure` si `check` y el comando falla."""

        ...

    def which(self, name: str) -> str | None:
        ...
