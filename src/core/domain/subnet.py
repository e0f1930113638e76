"""Subnet pool utilities.

Each project owns one `/16` range drawn from a fixed pool of "slots". A slot
is the second octet of the range (`172.<slot>.0.0/16` by default). Keeping the
allocator pure (no registry access) makes the lowest-free policy trivially
testable; the reconciliation service passes in the slots already in use.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable

from core.errors import SubnetExhausted

DEFAULT_FIRST_SLOT = 18
DEFAULT_LAST_SLOT = 31
DEFAULT_TEMPLATE = "172.{slot}.0.0/16"


class SubnetAllocator:
    """Assigns the smallest free slot from a closed interval."""

    def __init__(
        self,
        first: int = DEFAULT_FIRST_SLOT,
        last: int = DEFAULT_LAST_SLOT,
        template: str = DEFAULT_TEMPLATE,
    ) -> None:
        if first > last:
            raise ValueError(f"empty subnet pool: {first}-{last}")
        self.first = first
        self.last = last
        self.template = template

    @property
    def capacity(self) -> int:
        return self.last - self.first + 1

    def allocate(self, used: AbstractSet[int]) -> int:
        """Return the lowest slot not in `used`.

        Freed slots become reusable immediately, so assignment is
        deterministic for a given registry.
        """

        for slot in range(self.first, self.last + 1):
            if slot not in used:
                return slot
        raise SubnetExhausted(self.first, self.last)

    def format(self, slot: int) -> str:
        return format_subnet(slot, self.template)

    def used_slots(self, subnets: Iterable[str]) -> set[int]:
        """Pool slots whose formatted subnet appears in `subnets`.

        Lookup goes through the template, so the slot may sit in any octet.
        Subnets outside the pool are ignored.
        """

        by_subnet = {self.format(slot): slot for slot in range(self.first, self.last + 1)}
        return {by_subnet[subnet] for subnet in subnets if subnet in by_subnet}


def format_subnet(slot: int, template: str = DEFAULT_TEMPLATE) -> str:
    return template.format(slot=slot)


def subnet_slot(subnet: str) -> int | None:
    """Extract the slot (second octet) from a CIDR string like `172.18.0.0/16`."""

    parts = subnet.split("/")[0].split(".")
    if len(parts) < 2:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


def container_address(subnet: str, index: int) -> str:
    """Address for the container at `index` (`x.y.0.<index + 2>`)."""

    parts = subnet.split("/")[0].split(".")
    if len(parts) != 4:
        return ""
    return f"{parts[0]}.{parts[1]}.0.{index + 2}"


def default_address(subnet: str) -> str:
    """Default app address for a subnet (`x.y.0.2`)."""

    return container_address(subnet, 0)
