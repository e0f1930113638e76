"""Taxonomía de errores del Core.

Por qué un módulo propio:
- Los adaptadores traducen `OSError`, errores de parseo y subprocesos fallidos
  a estas clases; la CLI solo necesita conocer `BootappError`.
- Separa los fallos estructurales (registro, pool de subredes) de los
  fallos por dominio que se reportan como warnings.
"""

from __future__ import annotations

from typing import Sequence


class BootappError(Exception):
    """Base común de todos los errores de la aplicación."""


class ConfigIOError(BootappError):
    """El archivo de registro no se puede leer o escribir."""


class ParseError(BootappError):
    """El registro persistido está malformado."""


class SubnetExhausted(BootappError):
    """No quedan slots libres en el pool de subredes."""

    def __init__(self, first: int, last: int) -> None:
        super().__init__(f"no available subnets (all {first}-{last} in use)")
        self.first = first
        self.last = last


class UnsupportedPlatform(BootappError):
    """Operación de trust store en un sistema operativo no soportado."""

    def __init__(self, platform_id: str) -> None:
        super().__init__(f"unsupported OS: {platform_id}")
        self.platform_id = platform_id


class ExternalToolFailure(BootappError):
    """Un comando externo del sistema terminó con error."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None = None,
        stderr: str = "",
        *,
        message: str | None = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        if message is None:
            message = f"command failed ({returncode}): {' '.join(self.command)}"
            if self.stderr:
                message += f": {self.stderr}"
        super().__init__(message)


class NotFound(BootappError):
    """El certificado o registro buscado no existe."""
