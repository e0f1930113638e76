"""Certificate lifecycle: per-domain generation, cleanup and trust.

Single-domain operations raise; batch operations (`ensure`, `cleanup`,
`trust`) never stop on a failing domain. They record one `CertificateOutcome`
per step and turn failures into warnings so the rest of the batch proceeds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from adapters.certificates import (
    build_certificate,
    cert_path,
    certificate_exists,
    list_certificates,
    remove_certificate,
    write_certificate,
)
from core.config import AppSettings
from core.domain.models import CertificateSubject
from core.errors import BootappError, NotFound
from core.interfaces.trust_store import TrustStore


@dataclass
class CertificateOutcome:
    domain: str
    action: str
    ok: bool = True
    detail: str = ""


@dataclass
class CertificateReport:
    """Result of a batch operation."""

    outcomes: list[CertificateOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def _domains(self, action: str) -> list[str]:
        return [o.domain for o in self.outcomes if o.action == action and o.ok]

    @property
    def generated(self) -> list[str]:
        return self._domains("generated")

    @property
    def trusted(self) -> list[str]:
        return self._domains("trusted")

    @property
    def failed(self) -> list[str]:
        return [o.domain for o in self.outcomes if not o.ok]

    def extend(self, other: "CertificateReport") -> None:
        self.outcomes.extend(other.outcomes)
        self.warnings.extend(other.warnings)


class CertificateLifecycleManager:
    def __init__(
        self,
        trust_store: TrustStore,
        *,
        subject: CertificateSubject | None = None,
        key_bits: int = 2048,
        valid_years: int = 10,
        warning: Callable[[str], None] | None = None,
    ) -> None:
        self.trust_store = trust_store
        self.subject = subject or CertificateSubject()
        self.key_bits = key_bits
        self.valid_years = valid_years
        self._warning = warning

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        trust_store: TrustStore,
        *,
        warning: Callable[[str], None] | None = None,
    ) -> "CertificateLifecycleManager":
        subject = CertificateSubject(
            country=settings.cert_country,
            state=settings.cert_state,
            locality=settings.cert_locality,
            organization=settings.cert_organization,
            org_unit=settings.cert_org_unit,
        )
        return cls(
            trust_store,
            subject=subject,
            key_bits=settings.cert_key_bits,
            valid_years=settings.cert_valid_years,
            warning=warning,
        )

    # -- per-domain ---------------------------------------------------------

    def generate(self, domain: str, cert_dir: Path) -> list[Path]:
        cert, key = build_certificate(
            domain,
            subject=self.subject,
            key_bits=self.key_bits,
            valid_years=self.valid_years,
        )
        return write_certificate(domain, cert_dir, cert, key)

    def exists(self, domain: str, cert_dir: Path) -> bool:
        return certificate_exists(domain, cert_dir)

    def list(self, cert_dir: Path) -> list[str]:
        return list_certificates(cert_dir)

    def remove(self, domain: str, cert_dir: Path) -> bool:
        return remove_certificate(domain, cert_dir)

    def install_to_trust_store(self, domain: str, cert_dir: Path) -> None:
        path = cert_path(domain, cert_dir)
        if not path.is_file():
            raise NotFound(f"certificate not found: {path}")
        self.trust_store.install(domain, path)

    def uninstall_from_trust_store(self, domain: str) -> None:
        self.trust_store.uninstall(domain)

    def is_trusted(self, domain: str) -> bool:
        return self.trust_store.is_trusted(domain)

    # -- batches ------------------------------------------------------------

    def _fail(self, report: CertificateReport, domain: str, action: str, exc: Exception) -> None:
        message = f"{domain}: failed to {action}: {exc}"
        report.outcomes.append(CertificateOutcome(domain, action, ok=False, detail=str(exc)))
        report.warnings.append(message)
        if self._warning:
            self._warning(message)

    def ensure(
        self,
        domains: Iterable[str],
        cert_dir: Path,
        *,
        force_recreate: bool = False,
        trust: bool = True,
    ) -> CertificateReport:
        """Generate missing certificates and trust the untrusted ones.

        With `force_recreate`, existing certificates are untrusted and deleted
        first, then regenerated and re-trusted.
        """

        report = CertificateReport()
        pending_trust: list[str] = []

        for domain in dict.fromkeys(domains):
            if force_recreate and self.exists(domain, cert_dir):
                report.extend(self.cleanup([domain], cert_dir))

            if not self.exists(domain, cert_dir):
                try:
                    self.generate(domain, cert_dir)
                except (OSError, ValueError) as exc:
                    self._fail(report, domain, "generate", exc)
                    continue
                report.outcomes.append(CertificateOutcome(domain, "generated"))

            if trust:
                pending_trust.append(domain)

        if pending_trust:
            report.extend(self.trust(pending_trust, cert_dir, force=force_recreate))
        return report

    def trust(self, domains: Iterable[str], cert_dir: Path, *, force: bool = False) -> CertificateReport:
        report = CertificateReport()
        for domain in domains:
            try:
                if not force and self.is_trusted(domain):
                    report.outcomes.append(CertificateOutcome(domain, "already-trusted"))
                    continue
                self.install_to_trust_store(domain, cert_dir)
            except BootappError as exc:
                self._fail(report, domain, "trust", exc)
                continue
            report.outcomes.append(CertificateOutcome(domain, "trusted"))
        return report

    def cleanup(self, domains: Iterable[str], cert_dir: Path) -> CertificateReport:
        """Untrust and delete the artifacts of every domain."""

        report = CertificateReport()
        for domain in domains:
            try:
                self.uninstall_from_trust_store(domain)
            except BootappError as exc:
                self._fail(report, domain, "untrust", exc)
            else:
                report.outcomes.append(CertificateOutcome(domain, "untrusted"))

            try:
                if self.remove(domain, cert_dir):
                    report.outcomes.append(CertificateOutcome(domain, "removed"))
            except OSError as exc:
                self._fail(report, domain, "remove", exc)
        return report
