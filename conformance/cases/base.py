"""
Conformance test cases

A test case is a plain value: the fixture describing what is expected, the
builder producing the entity, the collaborators it declares, and the nested
child cases it was composed from. Cases do not inherit state from each
other; a child receives its parent's configuration explicitly.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from config_factory import HarnessConfig
from conformance.config.capabilities import ConfigKey
from conformance.core.errors import FixtureError, HarnessError
from conformance.core.fixtures import ReferenceFixture
from conformance.services.configuration_snapshot import ConfigurationSnapshot
from conformance.services.object_builder import ObjectBuilder

# Factory collaborator responsible for each entity kind
USER_DEFINED_FACTORIES = {
    "Ellipsoid": ConfigKey.DATUM_FACTORY,
    "PrimeMeridian": ConfigKey.DATUM_FACTORY,
    "GeodeticDatum": ConfigKey.DATUM_FACTORY,
    "VerticalDatum": ConfigKey.DATUM_FACTORY,
    "EllipsoidalCS": ConfigKey.CS_FACTORY,
    "CartesianCS": ConfigKey.CS_FACTORY,
    "GeographicCRS": ConfigKey.CRS_FACTORY,
    "ProjectedCRS": ConfigKey.CRS_FACTORY,
    "VerticalCRS": ConfigKey.CRS_FACTORY,
    "Conversion": ConfigKey.COP_FACTORY,
    "Transformation": ConfigKey.COP_FACTORY,
    "ConcatenatedOperation": ConfigKey.COP_FACTORY,
}

AUTHORITY_FACTORIES = {
    "Ellipsoid": ConfigKey.DATUM_AUTHORITY_FACTORY,
    "PrimeMeridian": ConfigKey.DATUM_AUTHORITY_FACTORY,
    "GeodeticDatum": ConfigKey.DATUM_AUTHORITY_FACTORY,
    "VerticalDatum": ConfigKey.DATUM_AUTHORITY_FACTORY,
    "EllipsoidalCS": ConfigKey.CS_AUTHORITY_FACTORY,
    "CartesianCS": ConfigKey.CS_AUTHORITY_FACTORY,
    "GeographicCRS": ConfigKey.CRS_AUTHORITY_FACTORY,
    "ProjectedCRS": ConfigKey.CRS_AUTHORITY_FACTORY,
    "VerticalCRS": ConfigKey.CRS_AUTHORITY_FACTORY,
    "Conversion": ConfigKey.COP_AUTHORITY_FACTORY,
    "Transformation": ConfigKey.COP_AUTHORITY_FACTORY,
    "ConcatenatedOperation": ConfigKey.COP_AUTHORITY_FACTORY,
}

# Collaborators declared by every case
SHARED_KEYS = (ConfigKey.UNITS, ConfigKey.VALIDATORS)


def creation_method(kind: str) -> str:
    """Name of the factory method creating an entity kind, e.g. ``create_geographic_crs``."""
    return "create_" + re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', kind).lower()


@dataclass
class Collaborators:
    """
    Collaborators supplied by the implementation under test.

    Every slot is optional; a missing factory makes the cases depending
    on it SKIP.
    """
    datum_factory: Any = None
    cs_factory: Any = None
    crs_factory: Any = None
    cop_factory: Any = None
    mt_factory: Any = None
    datum_authority_factory: Any = None
    cs_authority_factory: Any = None
    crs_authority_factory: Any = None
    cop_authority_factory: Any = None
    units: Any = None
    validators: Any = None

    @staticmethod
    def slot(key: ConfigKey) -> str:
        """Attribute holding the collaborator for a configuration key."""
        return re.sub(r'([a-z])([A-Z])', r'\1_\2', key.value).lower()

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> 'Collaborators':
        """
        Build from a mapping keyed by ConfigKey, published key name or attribute name.

        Raises:
            KeyError: If a key names no collaborator
        """
        slots = {f.name for f in fields(cls)}
        values = {}
        for name, value in mapping.items():
            attribute = name if isinstance(name, str) and name in slots else None
            if attribute is None:
                key = name if isinstance(name, ConfigKey) else ConfigKey.from_name(str(name))
                attribute = cls.slot(key)
                if attribute not in slots:
                    raise KeyError(name)
            values[attribute] = value
        return cls(**values)

    def get(self, key: ConfigKey) -> Any:
        return getattr(self, self.slot(key), None)

    def is_supported(self, key: ConfigKey) -> bool:
        return self.get(key) is not None


@dataclass
class ChildCase:
    """A nested case and the label identifying it within its parent."""
    label: str
    case: 'ConformanceCase'


@dataclass
class ConformanceCase:
    """One conformance test method: what to build, how, and what to expect."""

    test_id: str
    kind: str
    builder: ObjectBuilder
    factory_key: ConfigKey
    collaborators: Collaborators
    declared_keys: Tuple[ConfigKey, ...] = ()
    composer: Any = None
    fixture: Optional[ReferenceFixture] = None
    verify_assertions: bool = True
    skip_identification: bool = False
    as_dependency: bool = False
    children: List[ChildCase] = field(default_factory=list)
    snapshot: Optional[ConfigurationSnapshot] = None

    @property
    def reporter(self) -> Any:
        return self.builder.reporter

    def configure(self, config: HarnessConfig,
                  parent: Optional[ConfigurationSnapshot] = None) -> ConfigurationSnapshot:
        """
        Build the configuration snapshot of this case, once.

        Top-level cases take their capability flags from the harness
        configuration for this test; nested cases inherit a copy of the
        parent's snapshot. Each case then declares its own collaborators,
        keeping any inherited value.

        Raises:
            ConfigurationConflict: If a key is declared twice
        """
        if self.snapshot is not None:
            return self.snapshot
        if parent is None:
            snapshot = ConfigurationSnapshot()
            for key, enabled in config.capabilities_for(self.test_id).items():
                snapshot.put(key, enabled)
        else:
            snapshot = ConfigurationSnapshot.inherit(parent)
        for key in (self.factory_key,) + tuple(self.declared_keys) + SHARED_KEYS:
            snapshot.put_unless_inherited(key, self.collaborators.get(key))
        self.builder.bind(snapshot.get(self.factory_key))
        self.snapshot = snapshot
        return snapshot

    def use(self, fixture: ReferenceFixture) -> 'ConformanceCase':
        """Set the expected properties of the entity under test."""
        self.builder.use(fixture)
        self.fixture = fixture
        return self

    def rebuild(self, fixture: ReferenceFixture) -> 'ConformanceCase':
        """Discard the built entity and test another fixture with the same builder."""
        self.fixture = fixture
        self.builder.rebuild(fixture)
        return self

    def compose(self, child_factory: Callable[..., 'ConformanceCase'],
                build: Callable[['ConformanceCase'], None], label: str,
                skip_identification: bool = False) -> Any:
        """Build a component through another case; see NestedTestComposer.compose."""
        if self.composer is None:
            raise HarnessError(f"{self.test_id} has no composer for nested cases")
        return self.composer.compose(self, child_factory, build, label, skip_identification)

    def attach(self, label: str, child: 'ConformanceCase') -> None:
        """Register a built child case as a component of this case."""
        self.children.append(ChildCase(label, child))
        self.builder.add_child(label, child.builder)

    def child(self, label: str) -> 'ConformanceCase':
        for child in self.children:
            if child.label == label:
                return child.case
        raise KeyError(label)

    def entity(self) -> Any:
        """
        Return the entity under test, building it if needed.

        Raises:
            UnsupportedByVendor: If the case cannot be exercised
            FixtureError: If the case has no fixture
        """
        if self.snapshot is None:
            raise HarnessError(f"{self.test_id} is not configured")
        if self.fixture is None:
            raise FixtureError(f"{self.test_id} has no fixture")
        if self.fixture.deprecated and not self.builder.is_built:
            self.reporter.assume_capability(
                self.snapshot, ConfigKey.DEPRECATED_OBJECT_CREATION_SUPPORTED,
                self.kind, self.fixture.code
            )
        return self.builder.get()

    def verify(self, verifier: Any, snapshot: Optional[ConfigurationSnapshot] = None) -> None:
        """
        Verify the entity of this case, then every child with the same snapshot.

        Raises:
            HarnessError: On the first failed check, labelled with the child path
        """
        snapshot = snapshot if snapshot is not None else self.snapshot
        verifier.verify(self.entity(), self.fixture, snapshot, self.kind,
                        as_dependency=self.as_dependency,
                        skip_identification=self.skip_identification)
        for child in self.children:
            try:
                child.case.verify(verifier, snapshot)
            except HarnessError as e:
                raise e.within(child.label)


def new_case(test_id: str, kind: str, create: Callable, factory_key: ConfigKey,
             collaborators: Optional[Collaborators], reporter: Any, composer: Any = None,
             declared_keys: Iterable[ConfigKey] = ()) -> ConformanceCase:
    """Assemble a case around a fresh builder."""
    collaborators = collaborators or Collaborators()
    builder = ObjectBuilder(kind, create, reporter)
    return ConformanceCase(
        test_id=test_id,
        kind=kind,
        builder=builder,
        factory_key=factory_key,
        collaborators=collaborators,
        declared_keys=tuple(declared_keys),
        composer=composer,
    )

