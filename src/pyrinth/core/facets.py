"""Search facets.

A facet is a ``type<operation>value`` filter term. Facets in the same
clause are ORed together and the clauses are ANDed, so

    FacetBuilder(Facet.version("1.20.1")).and_(Facet.category("fabric"),
                                               Facet.category("quilt"))

matches projects for 1.20.1 that support Fabric or Quilt.
"""

from dataclasses import dataclass
from typing import Self

from pyrinth.core.models import ProjectType

OPERATIONS = frozenset({":", "=", "!=", ">", ">=", "<", "<="})


@dataclass(frozen=True)
class Facet:
    """A single search filter term."""

    type: str
    value: str
    operation: str = ":"

    def __post_init__(self) -> None:
        if self.operation not in OPERATIONS:
            raise ValueError(
                f"Invalid facet operation {self.operation!r}; "
                f"expected one of {sorted(OPERATIONS)}"
            )
        if not self.type:
            raise ValueError("Facet type must not be empty")

    def __str__(self) -> str:
        return f"{self.type}{self.operation}{self.value}"

    @classmethod
    def project_type(cls, project_type: ProjectType | str) -> Self:
        return cls("project_type", ProjectType(project_type).value)

    @classmethod
    def category(cls, category: str) -> Self:
        """Mod loader or category to filter by."""
        return cls("categories", category)

    @classmethod
    def version(cls, game_version: str) -> Self:
        return cls("versions", game_version)

    @classmethod
    def open_source(cls, open_source: bool = True) -> Self:
        return cls("open_source", "true" if open_source else "false")

    @classmethod
    def license(cls, license_id: str) -> Self:
        return cls("license", license_id)

    @classmethod
    def custom(cls, type_: str, operation: str, value: str) -> Self:
        """Any other searchable field, e.g. ``custom("downloads", ">", "1000")``."""
        return cls(type_, value, operation)

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse ``type<op>value`` as written on the command line."""
        # Two-character operators first so ">=" is not read as ">"
        ordered = sorted(OPERATIONS, key=lambda op: (-len(op), op))
        for index in range(1, len(text)):
            for operation in ordered:
                if text.startswith(operation, index):
                    type_ = text[:index].strip()
                    value = text[index + len(operation) :].strip()
                    return cls(type_, value, operation)
        raise ValueError(f"Cannot parse facet {text!r}")


class FacetBuilder:
    """Builds the nested facet list sent to the search endpoint."""

    def __init__(self, *facets: Facet) -> None:
        self._clauses: list[list[Facet]] = []
        if facets:
            self._clauses.append(list(facets))

    def and_(self, *facets: Facet) -> Self:
        """Start a new clause that must also match."""
        if not facets:
            raise ValueError("A facet clause needs at least one facet")
        self._clauses.append(list(facets))
        return self

    def or_(self, *facets: Facet) -> Self:
        """Add alternatives to the current clause."""
        if not self._clauses:
            return self.and_(*facets)
        self._clauses[-1].extend(facets)
        return self

    def build(self) -> list[list[str]]:
        return [[str(facet) for facet in clause] for clause in self._clauses]
