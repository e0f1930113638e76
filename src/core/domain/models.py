"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El registro de proyectos se serializa/deserializa directamente desde estos
  modelos (`model_dump(mode="json")` / `model_validate`).

Nota:
- Estos modelos describen *qué* es el estado de red local, no *cómo* se
  aplica al sistema operativo.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ProjectInfo(BaseModel):
    """Registro persistido de un proyecto.

    Invariantes:
    - `subnet` es único entre todos los proyectos y nunca cambia una vez asignado.
    - El orden de `domains` no tiene significado para la detección de cambios,
      pero se conserva tal cual lo entrega el llamador.
    """

    model_config = ConfigDict(extra="ignore")

    path: str = Field(
        ...,
        description="Ruta del proyecto en el filesystem.",
    )
    subnet: str = Field(
        ...,
        min_length=1,
        description="Rango de direcciones asignado (CIDR, p.ej. '172.18.0.0/16').",
    )
    domains: list[str] = Field(
        default_factory=list,
        description="Hostnames del proyecto.",
    )
    ssl_domains: list[str] = Field(
        default_factory=list,
        description="Subconjunto de `domains` que requiere certificado.",
    )
    domain: str | None = Field(
        default=None,
        description="Campo legado de dominio único (registros antiguos).",
    )

    def effective_domains(self) -> list[str]:
        """Dominios a comparar, con fallback al campo legado `domain`."""

        if not self.domains and self.domain:
            return [self.domain]
        return list(self.domains)


class ProjectChanges(BaseModel):
    """Diferencias detectadas entre el estado guardado y el pedido.

    Es transitorio: nunca se persiste.
    """

    previous_domains: list[str] = Field(
        default_factory=list,
        description="Dominios guardados antes de esta reconciliación (orden persistido).",
    )
    previous_ssl_domains: list[str] = Field(
        default_factory=list,
        description="Dominios SSL guardados antes de esta reconciliación.",
    )
    domain_changed: bool = Field(
        default=False,
        description="El conjunto de dominios pedido difiere del guardado.",
    )
    removed_ssl_domains: list[str] = Field(
        default_factory=list,
        description="Dominios SSL guardados que ya no se piden (diferencia de conjuntos).",
    )

    @property
    def previous_domain(self) -> str:
        """Primer dominio persistido; cadena vacía si no había ninguno."""

        return self.previous_domains[0] if self.previous_domains else ""


class ContainerInfo(BaseModel):
    """Contenedor en ejecución con sus dominios y su dirección descubierta."""

    address: str = Field(
        default="",
        description="Dirección IP asignada por el runtime (vacía si no se descubrió).",
    )
    domains: list[str] = Field(
        default_factory=list,
        description="Hostnames asociados al servicio.",
    )


class HostsRecord(BaseModel):
    """Registro (address, hostname, project) propiedad de bootapp en el archivo hosts."""

    model_config = ConfigDict(frozen=True)

    address: str
    hostname: str
    project: str


class CertificateSubject(BaseModel):
    """Campos de sujeto usados al generar certificados autofirmados."""

    country: str = Field(default="US", min_length=2, max_length=2)
    state: str = "CA"
    locality: str = "MV"
    organization: str = "Docker Bootapp"
    org_unit: str = "Development"
