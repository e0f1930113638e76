"""Generación de certificados autofirmados (cryptography).

Por qué `cryptography`:
- Genera clave RSA + certificado X.509 sin depender del binario `openssl`.

Artefactos por dominio, bajo el directorio del proyecto:
- `<domain>.crt`: certificado PEM
- `<domain>.key`: clave privada PEM (PKCS#1, permisos 0600)
- `<domain>.pem`: certificado + clave concatenados
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from core.domain.models import CertificateSubject

ARTIFACT_SUFFIXES = (".crt", ".key", ".pem")


def cert_path(domain: str, cert_dir: Path) -> Path:
    return Path(cert_dir) / f"{domain}.crt"


def artifact_paths(domain: str, cert_dir: Path) -> list[Path]:
    return [Path(cert_dir) / f"{domain}{suffix}" for suffix in ARTIFACT_SUFFIXES]


def _add_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # 29 de febrero en un año no bisiesto.
        return moment.replace(year=moment.year + years, day=28)


def build_certificate(
    domain: str,
    *,
    subject: CertificateSubject | None = None,
    key_bits: int = 2048,
    valid_years: int = 10,
    now: datetime | None = None,
) -> tuple[x509.Certificate, rsa.RSAPrivateKey]:
    """Crea un certificado autofirmado (CA) cuyo CN y SAN son `domain`."""

    subject = subject or CertificateSubject()
    now = now or datetime.now(timezone.utc)

    key = rsa.generate_private_key(public_exponent=65537, key_size=key_bits)
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, subject.country),
            x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, subject.state),
            x509.NameAttribute(NameOID.LOCALITY_NAME, subject.locality),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, subject.organization),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, subject.org_unit),
            x509.NameAttribute(NameOID.COMMON_NAME, domain),
        ]
    )

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(_add_years(now, valid_years))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(domain)]), critical=False)
        .sign(key, hashes.SHA256())
    )
    return cert, key


def write_certificate(
    domain: str,
    cert_dir: Path,
    cert: x509.Certificate,
    key: rsa.RSAPrivateKey,
) -> list[Path]:
    cert_dir = Path(cert_dir)
    cert_dir.mkdir(parents=True, exist_ok=True)

    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )

    crt, key_file, pem = artifact_paths(domain, cert_dir)
    crt.write_bytes(cert_pem)
    key_file.write_bytes(key_pem)
    os.chmod(key_file, 0o600)
    pem.write_bytes(cert_pem + key_pem)
    return [crt, key_file, pem]


def load_certificate(domain: str, cert_dir: Path) -> x509.Certificate:
    return x509.load_pem_x509_certificate(cert_path(domain, cert_dir).read_bytes())


def certificate_exists(domain: str, cert_dir: Path) -> bool:
    return cert_path(domain, cert_dir).is_file()


def list_certificates(cert_dir: Path) -> list[str]:
    """Dominios con un `.crt` en `cert_dir` (orden alfabético)."""

    cert_dir = Path(cert_dir)
    if not cert_dir.is_dir():
        return []
    return sorted(p.name[: -len(".crt")] for p in cert_dir.iterdir() if p.is_file() and p.suffix == ".crt")


def remove_certificate(domain: str, cert_dir: Path) -> bool:
    """Borra los tres artefactos. Devuelve si existía alguno."""

    removed = False
    for path in artifact_paths(domain, cert_dir):
        try:
            path.unlink()
            removed = True
        except FileNotFoundError:
            continue
    return removed
