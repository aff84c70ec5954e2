"""Catalogue model for XPipe connection entries."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogueFilters:
    """Filters sent with a connection query ("*" matches everything)."""

    category: str = "*"
    connection: str = "*"
    type: str = "*"

    def to_payload(self) -> dict:
        return {
            "categoryFilter": self.category,
            "connectionFilter": self.connection,
            "typeFilter": self.type,
        }


@dataclass
class Target:
    """A named connection entry and every identifier discovered for it."""

    name: str
    identifiers: list[str] = field(default_factory=list)

    @property
    def primary(self) -> str:
        return self.identifiers[0]

    @property
    def has_resources(self) -> bool:
        return len(self.identifiers) > 1


@dataclass
class Catalogue:
    """Sorted unique display names plus name -> identifiers mapping.

    Every name in ``names`` has at least one identifier in ``mapping``.
    Identifiers are kept in discovery order.
    """

    names: list[str] = field(default_factory=list)
    mapping: dict[str, list[str]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.names)

    def add(self, name: str, identifier: str):
        """Record an identifier under a display name (append only)."""
        identifiers = self.mapping.setdefault(name, [])
        if identifier not in identifiers:
            identifiers.append(identifier)
        self.names.append(name)

    def finalize(self) -> "Catalogue":
        """Sort and deduplicate the name sequence."""
        self.names = sorted(set(self.names))
        return self

    def identifiers(self, name: str) -> list[str]:
        return list(self.mapping.get(name, []))

    def primary(self, name: str) -> str | None:
        identifiers = self.mapping.get(name)
        return identifiers[0] if identifiers else None

    def has_resources(self, name: str) -> bool:
        return len(self.mapping.get(name, [])) > 1

    def target(self, name: str) -> Target | None:
        if name not in self.mapping:
            return None
        return Target(name=name, identifiers=self.identifiers(name))

    def targets(self) -> list[Target]:
        return [Target(name=name, identifiers=self.identifiers(name)) for name in self.names]
