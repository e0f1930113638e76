"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from adapters.hosts_file import LocalHostsFile
from adapters.registry_store import JsonProjectStore
from adapters.system_commands import SubprocessRunner, running_as_root
from adapters.trust_stores import LINUX_ANCHORS, TRUST_STORES, detect_platform
from core.config import AppSettings
from core.errors import BootappError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_registry(settings: AppSettings) -> tuple[bool, str]:
    try:
        projects = JsonProjectStore(settings.registry_path).load()
    except BootappError as exc:
        return False, str(exc)
    return True, f"{len(projects)} project(s) in {settings.registry_path}"


def _check_hosts(settings: AppSettings) -> tuple[bool, str]:
    try:
        lines = LocalHostsFile(settings.hosts_file).read_lines()
    except BootappError as exc:
        return False, str(exc)
    return True, f"{len(lines)} line(s) in {settings.hosts_file}"


def _check_trust_tooling(platform_id: str, runner: SubprocessRunner) -> tuple[str, str]:
    if platform_id not in TRUST_STORES:
        return "FAIL", f"unsupported OS: {platform_id}"
    if platform_id == "darwin":
        found = runner.which("security")
        return ("OK", found) if found else ("FAIL", "`security` not found")
    tools = [anchor.tool for anchor in LINUX_ANCHORS if runner.which(anchor.tool)]
    if tools:
        return "OK", ", ".join(tools)
    return "FAIL", "no supported certificate trust mechanism found"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    runner = SubprocessRunner(use_sudo=settings.use_sudo)
    platform_id = detect_platform()

    table = Table(title="bootapp Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Platform", "OK" if platform_id in TRUST_STORES else "FAIL", platform_id)

    ok_registry, detail_registry = _check_registry(settings)
    table.add_row("Registry", "OK" if ok_registry else "FAIL", detail_registry)

    ok_hosts, detail_hosts = _check_hosts(settings)
    table.add_row("Hosts file", "OK" if ok_hosts else "FAIL", detail_hosts)

    status, detail = _check_trust_tooling(platform_id, runner)
    table.add_row("Trust store tooling", status, detail)

    if running_as_root():
        table.add_row("Privileges", "OK", "running as root")
    elif not settings.use_sudo:
        table.add_row("Privileges", "WARN", "sudo disabled (BOOTAPP_USE_SUDO=false)")
    else:
        found = runner.which("sudo")
        table.add_row("Privileges", "OK" if found else "FAIL", found or "`sudo` not found")

    table.add_row(
        "Subnet pool",
        "OK",
        f"{settings.subnet_template.format(slot=settings.subnet_first_slot)} .. "
        f"{settings.subnet_template.format(slot=settings.subnet_last_slot)}",
    )

    _console.print(table)

    if not ok_registry:
        _console.print(
            "\n[yellow]Note:[/yellow] Fix or move the registry file; "
            "a missing file is treated as an empty registry."
        )
