"""Contratos del trust store del sistema operativo.

Por qué Protocol:
- Cada plataforma (macOS keychain, anclas de Linux) tiene su propia
  implementación, elegida una sola vez por detección de plataforma.
- Evita `if sys.platform == ...` repartidos por cada operación.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class TrustStore(Protocol):
    """Membresía de certificados en el trust store del sistema, por dominio."""

    platform_id: str

    def install(self, domain: str, cert_path: Path) -> None:
        """Confía en `cert_path` para autenticación de servidor.

        Siempre elimina primero cualquier entrada previa del dominio.
        """

        ...

    def uninstall(self, domain: str) -> None:
        """Elimina las entradas del dominio; no falla si no hay nada."""

        ...

    def is_trusted(self, domain: str) -> bool:
        ...
