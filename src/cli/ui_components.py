"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import HostsRecord, ProjectInfo


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("bootapp", style="bold cyan")
    subtitle = Text("Subredes • /etc/hosts • Certificados locales", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_projects_table(projects: Mapping[str, ProjectInfo]) -> Table:
    table = Table(title="Registered Projects")
    table.add_column("Project", style="cyan", no_wrap=True)
    table.add_column("Subnet", style="magenta", no_wrap=True)
    table.add_column("Domains", style="white")
    table.add_column("SSL", style="green")
    table.add_column("Path", style="dim")
    for name in sorted(projects):
        info = projects[name]
        table.add_row(
            name,
            info.subnet,
            ", ".join(info.effective_domains()),
            ", ".join(info.ssl_domains),
            info.path,
        )
    return table


def build_hosts_table(records: Iterable[HostsRecord], hosts_file: str) -> Table:
    table = Table(title=f"{hosts_file} entries (bootapp managed)")
    table.add_column("Address", style="magenta", no_wrap=True)
    table.add_column("Hostname", style="white")
    table.add_column("Project", style="cyan")
    for record in records:
        table.add_row(record.address, record.hostname, record.project)
    return table


def build_certificates_table(rows: Iterable[tuple[str, str]], cert_dir: str) -> Table:
    """Tabla (dominio, estado de confianza)."""

    table = Table(title=f"Certificates in {cert_dir}")
    table.add_column("Domain", style="cyan", no_wrap=True)
    table.add_column("Trust", style="green")
    for domain, status in rows:
        table.add_row(domain, status)
    return table
