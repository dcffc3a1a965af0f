"""
Object Builder

Materializes the entity under test by calling the factory collaborator with
the properties of a reference fixture and the entities built by child
builders. The result is cached so that repeated access never triggers a
second creation call for the same fixture.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from conformance.core.errors import FixtureError, HarnessError, UnsupportedCode
from conformance.core.fixtures import ReferenceFixture

logger = logging.getLogger(__name__)

# create(collaborator, fixture, components) -> entity
CreateFunction = Callable[[Any, ReferenceFixture, Sequence[Any]], Any]


class ObjectBuilder:
    """
    Lazily builds and caches one entity.

    Args:
        kind: Kind of entity built (e.g. "GeodeticDatum"), used in reports
        create: Function invoking the factory collaborator
        reporter: SkipReporter converting capability gaps into skips
        collaborator: Factory collaborator, or None when the vendor has none
    """

    def __init__(self, kind: str, create: CreateFunction, reporter: Any,
                 collaborator: Any = None):
        self.kind = kind
        self._create = create
        self.reporter = reporter
        self.collaborator = collaborator
        self._fixture: Optional[ReferenceFixture] = None
        self._entity: Any = None
        self._built = False
        self._children: List[Tuple[str, 'ObjectBuilder']] = []
        self.creation_count = 0

    @property
    def fixture(self) -> Optional[ReferenceFixture]:
        return self._fixture

    @property
    def children(self) -> List[Tuple[str, 'ObjectBuilder']]:
        return list(self._children)

    @property
    def is_built(self) -> bool:
        return self._built

    def bind(self, collaborator: Any) -> 'ObjectBuilder':
        """Set the factory collaborator used by subsequent builds."""
        self.collaborator = collaborator
        return self

    def use(self, fixture: ReferenceFixture) -> 'ObjectBuilder':
        """
        Set the fixture to build from.

        Raises:
            FixtureError: If an entity was already built from another fixture
        """
        if self._built and fixture != self._fixture:
            raise FixtureError(
                f"{self.kind} already built from fixture {self._fixture.code}; use rebuild()"
            )
        self._fixture = fixture
        return self

    def add_child(self, label: str, builder: 'ObjectBuilder') -> 'ObjectBuilder':
        """Register a child builder whose entity is passed to the creation call."""
        self._children.append((label, builder))
        return self

    def get(self) -> Any:
        """
        Return the entity under test, building it on first access.

        Returns:
            The cached entity

        Raises:
            UnsupportedByVendor: If the collaborator is absent or the code is not supported
            FixtureError: If no fixture has been set
        """
        if self._built:
            return self._entity
        if self._fixture is None:
            raise FixtureError(f"No fixture set for {self.kind}")

        self.reporter.assume_collaborator(self.collaborator, self.kind)
        components = [self._component(label, child) for label, child in self._children]

        try:
            entity = self._create(self.collaborator, self._fixture, components)
        except UnsupportedCode as e:
            self.reporter.unsupported_code(self.kind, self._fixture.code, e)
        else:
            self.creation_count += 1
            logger.debug(f"Built {self.kind} {self._fixture.code}")
            self._entity = entity
            self._built = True
            return entity

    @staticmethod
    def _component(label: str, child: 'ObjectBuilder') -> Any:
        try:
            return child.get()
        except HarnessError as e:
            raise e.within(label)

    def set_entity(self, entity: Any) -> None:
        """
        Use an entity obtained elsewhere, typically a dependency of another object.

        Raises:
            FixtureError: If an entity is already cached
        """
        if self._built:
            raise FixtureError(f"{self.kind} entity is already set")
        self._entity = entity
        self._built = True

    def rebuild(self, fixture: ReferenceFixture) -> 'ObjectBuilder':
        """Clear the cached entity and accept a new fixture."""
        self._entity = None
        self._built = False
        self._fixture = fixture
        return self

    def __repr__(self) -> str:
        code = self._fixture.code if self._fixture is not None else None
        return f"ObjectBuilder(kind={self.kind!r}, code={code!r}, built={self.is_built})"
