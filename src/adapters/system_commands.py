"""Wrapper de subprocess para herramientas del sistema.

Por qué un wrapper:
- Estandariza sudo, captura de salida y traducción de errores a
  `ExternalToolFailure`.
- Facilita testeo: los adaptadores reciben un runner que se puede sustituir
  por uno falso que solo registra las invocaciones.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Sequence

from core.errors import ExternalToolFailure

logger = logging.getLogger(__name__)


def running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class SubprocessRunner:
    """Ejecuta comandos bloqueantes; sin timeout ni cancelación."""

    def __init__(self, *, use_sudo: bool = True) -> None:
        self.use_sudo = use_sudo

    def _argv(self, args: Sequence[str], privileged: bool) -> list[str]:
        argv = list(args)
        if privileged and self.use_sudo and not running_as_root():
            argv = ["sudo", *argv]
        return argv

    def run(
        self,
        args: Sequence[str],
        *,
        privileged: bool = False,
        input: str | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        argv = self._argv(args, privileged)
        logger.debug("exec: %s", " ".join(argv))
        try:
            result = subprocess.run(
                argv,
                input=input,
                capture_output=True,
                text=True,
                encoding="utf-8",
                # Permite reenviar a `tee` bytes no UTF-8 leídos del archivo hosts.
                errors="surrogateescape",
                check=False,
            )
        except OSError as exc:
            raise ExternalToolFailure(argv, None, str(exc)) from exc

        if check and result.returncode != 0:
            raise ExternalToolFailure(argv, result.returncode, result.stderr or "")
        return result

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def validate_sudo(self) -> None:
        """Pide la contraseña de sudo una vez y cachea las credenciales."""

        if not self.use_sudo or running_as_root():
            return
        argv = ["sudo", "-v"]
        logger.debug("exec: %s", " ".join(argv))
        try:
            # Sin captura: sudo necesita la terminal para pedir la contraseña.
            code = subprocess.call(argv)
        except OSError as exc:
            raise ExternalToolFailure(argv, None, str(exc)) from exc
        if code != 0:
            raise ExternalToolFailure(argv, code, message="sudo authentication failed")
