"""CLI principal (Typer).

Por qué Typer:
- Subcomandos tipados con ayuda autogenerada.
- La lógica vive en `core.services`; aquí solo hay presentación (Rich).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.system_commands import SubprocessRunner
from adapters.trust_stores import resolve_trust_store
from cli import doctor
from cli.ui_components import (
    build_certificates_table,
    build_hosts_table,
    build_projects_table,
    print_banner,
)
from core.config import AppSettings
from core.errors import BootappError, UnsupportedPlatform
from core.services.certificates import CertificateLifecycleManager
from core.services.network_pipeline import DownRequest, PipelineHooks, build_services, run_down

app = typer.Typer(no_args_is_help=True, help="Per-project local networking for container apps.")
cert_app = typer.Typer(no_args_is_help=True, help="Manage SSL certificates.")
app.add_typer(cert_app, name="cert")
app.add_typer(doctor.app, name="doctor")

_console = Console()

CertDirOption = typer.Option(None, "--dir", help="Certificate directory (default: ./var/certs).")


def _hooks() -> PipelineHooks:
    return PipelineHooks(
        warning=lambda message: _console.print(f"  [yellow]![/yellow] {message}"),
        step=lambda message: _console.print(f"[bold]{message}[/bold]"),
    )


def _cert_dir(settings: AppSettings, cert_dir: Optional[Path]) -> Path:
    return cert_dir or settings.project_cert_dir(Path.cwd())


def _certificates(settings: AppSettings) -> CertificateLifecycleManager:
    runner = SubprocessRunner(use_sudo=settings.use_sudo)
    return CertificateLifecycleManager.from_settings(settings, resolve_trust_store(runner))


def _validate_sudo(settings: AppSettings) -> None:
    try:
        SubprocessRunner(use_sudo=settings.use_sudo).validate_sudo()
    except BootappError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show external commands."),
    banner: bool = typer.Option(False, "--banner", help="Print the welcome banner."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_console, show_path=False)],
    )
    if banner:
        print_banner(_console)


@app.command("ls")
def list_projects() -> None:
    """List registered projects and managed hosts entries."""

    try:
        services = build_services()
        projects = services.registry.list()
        records = services.hosts.list_entries()
    except BootappError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not projects and not records:
        _console.print("No projects registered")
        return

    _console.print(build_projects_table(projects))
    _console.print(build_hosts_table(records, str(services.settings.hosts_file)))
    _console.print(f"\nConfiguration: {services.settings.registry_path}")


@app.command()
def forget(
    project: str = typer.Argument(..., help="Project name."),
    keep_hosts: bool = typer.Option(False, "--keep-hosts", help="Keep hosts file entries."),
) -> None:
    """Remove a project from the registry, freeing its subnet."""

    settings = AppSettings()
    if not keep_hosts:
        _validate_sudo(settings)

    try:
        services = build_services(settings)
        result = run_down(
            services=services,
            request=DownRequest(project_name=project, keep_hosts=keep_hosts, remove_config=True),
            hooks=_hooks(),
        )
    except BootappError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if result.project is None:
        _console.print(f"Project not registered: {project}")
    else:
        _console.print(f"[green]Removed {project}[/green] (subnet {result.project.subnet} is free again)")


@cert_app.command("list")
def cert_list(cert_dir: Optional[Path] = CertDirOption) -> None:
    """List certificates and their trust status."""

    settings = AppSettings()
    certificates = _certificates(settings)
    directory = _cert_dir(settings, cert_dir)
    domains = certificates.list(directory)
    if not domains:
        _console.print(f"No certificates found in {directory}")
        return

    rows: list[tuple[str, str]] = []
    for domain in domains:
        try:
            status = "trusted" if certificates.is_trusted(domain) else "-"
        except UnsupportedPlatform:
            status = "n/a"
        rows.append((domain, status))
    _console.print(build_certificates_table(rows, str(directory)))


@cert_app.command("generate")
def cert_generate(
    domains: List[str] = typer.Argument(..., help="Domain(s) to generate."),
    cert_dir: Optional[Path] = CertDirOption,
) -> None:
    """Generate self-signed certificates (existing ones are kept)."""

    settings = AppSettings()
    certificates = _certificates(settings)
    directory = _cert_dir(settings, cert_dir)
    for domain in domains:
        if certificates.exists(domain, directory):
            _console.print(f"Certificate already exists: {domain}")
            continue
        try:
            certificates.generate(domain, directory)
        except (OSError, ValueError) as exc:
            _console.print(f"  [yellow]![/yellow] {domain}: failed to generate: {exc}")
            continue
        _console.print(f"[green]✓[/green] Generated: {directory}/{domain}.{{crt,key,pem}}")


@cert_app.command("install")
def cert_install(
    domains: List[str] = typer.Argument(..., help="Domain(s) to trust."),
    cert_dir: Optional[Path] = CertDirOption,
) -> None:
    """Install certificates into the system trust store."""

    settings = AppSettings()
    _validate_sudo(settings)
    certificates = _certificates(settings)
    directory = _cert_dir(settings, cert_dir)

    present = []
    for domain in domains:
        if certificates.exists(domain, directory):
            present.append(domain)
        else:
            _console.print(f"Certificate not found: {domain} (run 'cert generate' first)")

    report = certificates.trust(present, directory, force=True)
    for domain in report.trusted:
        _console.print(f"[green]✓[/green] Certificate trusted: {domain}")
    for message in report.warnings:
        _console.print(f"  [yellow]![/yellow] {message}")


@cert_app.command("uninstall")
def cert_uninstall(domains: List[str] = typer.Argument(..., help="Domain(s) to untrust.")) -> None:
    """Remove certificates from the system trust store."""

    settings = AppSettings()
    _validate_sudo(settings)
    certificates = _certificates(settings)

    for domain in domains:
        try:
            certificates.uninstall_from_trust_store(domain)
        except BootappError as exc:
            _console.print(f"  [yellow]![/yellow] Failed to uninstall {domain}: {exc}")
            continue
        _console.print(f"[green]✓[/green] Removed: {domain}")


def run() -> None:
    app()
