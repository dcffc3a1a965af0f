"""
Reference Fixtures

Immutable records of the properties expected from one test case. A fixture
is built in full before the entity is requested from the factory and is
never modified afterwards; variations are derived with ``replace``.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from conformance.core.errors import FixtureError
from conformance.core.model import SimpleIdentifier
from conformance.core.units import Unit

Code = Union[int, str]


@dataclass(frozen=True)
class ExpectedQuantity:
    """
    Expected numeric attribute of an entity.

    ``value`` is expressed in ``unit`` exactly as supplied to the factory;
    ``canonical_value`` is the same quantity expressed in ``canonical_unit``
    and is used for the unit-independent cross-check. When ``tolerance`` is
    None the harness tolerance for the quantity applies.
    """
    attribute: str
    value: float
    unit: Unit
    canonical_value: float
    canonical_unit: Unit
    unit_attribute: Optional[str] = None
    tolerance: Optional[float] = None


@dataclass(frozen=True)
class ReferenceFixture:
    """Expected properties for one logical test case."""
    code: Code
    name: str
    aliases: Tuple[str, ...] = ()
    authority: str = "EPSG"
    name_is_prefix: bool = False
    deprecated: bool = False
    dependency_names: Mapping[str, str] = field(default_factory=dict)
    dependency_codes: Mapping[str, Code] = field(default_factory=dict)
    quantities: Tuple[ExpectedQuantity, ...] = ()
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code is None or self.code == "":
            raise FixtureError("Fixture code is required")
        if not self.name:
            raise FixtureError(f"Fixture {self.code} requires a name")
        aliases = tuple(self.aliases)
        seen = set()
        for alias in aliases:
            folded = alias.lower()
            if folded in seen:
                raise FixtureError(f"Duplicated alias in fixture {self.code}: {alias}")
            seen.add(folded)
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, 'aliases', aliases)
        object.__setattr__(self, 'quantities', tuple(self.quantities))
        object.__setattr__(self, 'dependency_names', dict(self.dependency_names))
        object.__setattr__(self, 'dependency_codes', dict(self.dependency_codes))
        object.__setattr__(self, 'parameters', dict(self.parameters))

    @property
    def identifier(self) -> SimpleIdentifier:
        return SimpleIdentifier(self.authority, str(self.code))

    def properties(self) -> Dict[str, Any]:
        """
        Build the property map handed to object factories.

        Returns:
            Dictionary with name, identifiers and aliases, plus the
            kind-specific parameters of this fixture
        """
        properties: Dict[str, Any] = {
            'name': self.name,
            'identifiers': (self.identifier,),
        }
        if self.aliases:
            properties['aliases'] = self.aliases
        properties.update(self.parameters)
        return properties

    def replace(self, **changes: Any) -> 'ReferenceFixture':
        """Return a copy of this fixture with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def __hash__(self) -> int:
        return hash((self.authority, str(self.code), self.name))
