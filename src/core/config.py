"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (registro, hosts, certificados) lean config de forma
  consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "bootapp"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "bootapp"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "bootapp"
    return Path.home() / ".config" / "bootapp"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def default_registry_path() -> Path:
    """Ruta del registro global de proyectos (`~/.bootapp/projects.json`)."""

    return Path.home() / ".bootapp" / "projects.json"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOTAPP_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    registry_path: Path = Field(
        default_factory=default_registry_path,
        description="Archivo JSON con el registro global de proyectos.",
    )

    hosts_file: Path = Field(
        default=Path("/etc/hosts"),
        description="Archivo de resolución de nombres compartido del sistema.",
    )
    hosts_marker: str = Field(
        default="## bootapp",
        min_length=1,
        description="Marcador que identifica los registros propios en el archivo hosts.",
    )

    subnet_first_slot: int = Field(
        default=18,
        ge=0,
        le=255,
        description="Primer slot (segundo octeto) del pool de subredes.",
    )
    subnet_last_slot: int = Field(
        default=31,
        ge=0,
        le=255,
        description="Último slot (inclusive) del pool de subredes.",
    )
    subnet_template: str = Field(
        default="172.{slot}.0.0/16",
        min_length=1,
        description="Plantilla CIDR; `{slot}` se reemplaza por el número asignado.",
    )

    cert_dir: Path = Field(
        default=Path("var") / "certs",
        description="Directorio de certificados, relativo a la ruta del proyecto.",
    )
    cert_key_bits: int = Field(
        default=2048,
        ge=1024,
        le=8192,
        description="Tamaño de la clave RSA generada.",
    )
    cert_valid_years: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Años de validez de los certificados autofirmados.",
    )
    cert_country: str = Field(default="US", min_length=2, max_length=2)
    cert_state: str = Field(default="CA", min_length=1)
    cert_locality: str = Field(default="MV", min_length=1)
    cert_organization: str = Field(default="Docker Bootapp", min_length=1)
    cert_org_unit: str = Field(default="Development", min_length=1)

    use_sudo: bool = Field(
        default=True,
        description="Prefijar comandos privilegiados con `sudo` (si no somos root).",
    )

    @model_validator(mode="after")
    def _check_subnet_pool(self) -> "AppSettings":
        if self.subnet_first_slot > self.subnet_last_slot:
            raise ValueError("subnet_first_slot must be <= subnet_last_slot")
        if "{slot}" not in self.subnet_template:
            raise ValueError("subnet_template must contain '{slot}'")
        return self

    def project_cert_dir(self, project_path: str | Path) -> Path:
        """Directorio de certificados para un proyecto concreto."""

        if self.cert_dir.is_absolute():
            return self.cert_dir
        return Path(project_path) / self.cert_dir
