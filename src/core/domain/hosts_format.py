"""Formatos de registro en el archivo hosts.

Formato actual (dos líneas):

    ## bootapp:<project>
    <address>\t<hostname>

La línea de marcador va separada porque algunos resolvers rechazan o
interpretan mal comentarios al final de una línea de resolución.

Formato legado (una línea):

    <address>\t<hostname>\t## bootapp:<project>

`KNOWN_RECORD_MATCHERS` es una lista ordenada: para soportar un formato nuevo
basta con añadir otro matcher al final.
"""

from __future__ import annotations

import re
from typing import Iterator, Protocol, Sequence

from core.domain.models import HostsRecord


def render_record(marker: str, project: str, address: str, hostname: str) -> list[str]:
    return [f"{marker}:{project}", f"{address}\t{hostname}"]


def is_data_line(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#") and len(stripped.split()) >= 2


class RecordMatcher(Protocol):
    name: str

    def parse(self, lines: Sequence[str], marker: str) -> Iterator[tuple[int, HostsRecord]]:
        """Registros encontrados, con el índice de la línea donde empiezan."""

        ...

    def strip(self, lines: Sequence[str], marker: str, project: str) -> list[str]:
        """Copia de `lines` sin los registros de `project`."""

        ...


class TwoLineMatcher:
    name = "two-line"

    @staticmethod
    def _owner(line: str, marker: str) -> str | None:
        stripped = line.strip()
        prefix = f"{marker}:"
        if not stripped.startswith(prefix):
            return None
        # El nombre se toma completo, tal como lo escribe `render_record`.
        return stripped[len(prefix):] or None

    def parse(self, lines: Sequence[str], marker: str) -> Iterator[tuple[int, HostsRecord]]:
        for i, line in enumerate(lines):
            project = self._owner(line, marker)
            if project is None:
                continue
            # Marcador huérfano (sin línea de datos a continuación): se ignora.
            if i + 1 >= len(lines) or not is_data_line(lines[i + 1]):
                continue
            fields = lines[i + 1].split()
            yield i, HostsRecord(address=fields[0], hostname=fields[1], project=project)

    def strip(self, lines: Sequence[str], marker: str, project: str) -> list[str]:
        out: list[str] = []
        skip_next = False
        for line in lines:
            if skip_next:
                skip_next = False
                if is_data_line(line):
                    continue
            if self._owner(line, marker) == project:
                skip_next = True
                continue
            out.append(line)
        return out


class InlineMatcher:
    name = "inline-legacy"

    @staticmethod
    def _pattern(marker: str, project: str | None = None) -> re.Pattern[str]:
        owner = re.escape(project) if project is not None else r"(\S+)"
        return re.compile(r"^\s*(\S+)\s+(\S+)\s+" + re.escape(marker) + ":" + owner + r"\s*$")

    def parse(self, lines: Sequence[str], marker: str) -> Iterator[tuple[int, HostsRecord]]:
        pattern = self._pattern(marker)
        for i, line in enumerate(lines):
            match = pattern.match(line)
            if match is None:
                continue
            address, hostname, project = match.groups()
            yield i, HostsRecord(address=address, hostname=hostname, project=project)

    def strip(self, lines: Sequence[str], marker: str, project: str) -> list[str]:
        pattern = self._pattern(marker, project)
        return [line for line in lines if not pattern.match(line)]


KNOWN_RECORD_MATCHERS: tuple[RecordMatcher, ...] = (
    TwoLineMatcher(),
    InlineMatcher(),
)
