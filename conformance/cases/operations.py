"""
Coordinate operations

Transformations are built from a source and a target CRS, each obtained
through a nested case. Concatenated operations are built from two or more
transformation steps composed the same way.
"""

from typing import Any, Callable, Sequence

from conformance.cases.base import Collaborators, ConformanceCase, new_case
from conformance.cases.user_defined import from_properties, geographic_crs_case
from conformance.config.capabilities import ConfigKey
from conformance.core.errors import FixtureError
from conformance.core.fixtures import ReferenceFixture

Build = Callable[[ConformanceCase], None]

TRANSFORMATION_KEYS = (
    ConfigKey.MT_FACTORY,
    ConfigKey.CRS_FACTORY,
    ConfigKey.CS_FACTORY,
    ConfigKey.DATUM_FACTORY,
    ConfigKey.CRS_AUTHORITY_FACTORY,
)


def transformation_case(test_id: str, collaborators: Collaborators, reporter: Any,
                        composer: Any = None) -> ConformanceCase:
    """Create a case verifying a user-defined transformation."""
    return new_case(test_id, "Transformation", from_properties("Transformation"),
                    ConfigKey.COP_FACTORY, collaborators, reporter, composer,
                    TRANSFORMATION_KEYS)


def concatenate(factory: Any, fixture: ReferenceFixture, steps: Sequence[Any]) -> Any:
    if len(steps) < 2:
        raise FixtureError(f"Concatenated operation {fixture.code} requires at least two steps")
    return factory.create_concatenated_operation(fixture.properties(), *steps)


def concatenated_operation_case(test_id: str, collaborators: Collaborators, reporter: Any,
                                composer: Any = None) -> ConformanceCase:
    """Create a case verifying a concatenated operation built from transformation steps."""
    return new_case(test_id, "ConcatenatedOperation", concatenate, ConfigKey.COP_FACTORY,
                    collaborators, reporter, composer, TRANSFORMATION_KEYS)


def source_crs(case: ConformanceCase, build: Build,
               child_factory: Callable[..., ConformanceCase] = geographic_crs_case) -> Any:
    """Build the source CRS of a transformation through a nested case."""
    return case.compose(child_factory, build, "source CRS")


def target_crs(case: ConformanceCase, build: Build,
               child_factory: Callable[..., ConformanceCase] = geographic_crs_case) -> Any:
    """Build the target CRS of a transformation through a nested case."""
    return case.compose(child_factory, build, "target CRS")


def step(case: ConformanceCase, build: Build) -> Any:
    """
    Build the next step of a concatenated operation.

    Steps are labelled "step 1", "step 2", ... in the order they are added.
    """
    label = f"step {len(case.children) + 1}"
    return case.compose(transformation_case, build, label)
