"""
Authority objects

Cases verifying objects that the vendor looks up by authority code, such
as EPSG ellipsoids, datums and CRSs.
"""

import logging
from typing import Any, Iterable, List

from conformance.cases.base import (
    AUTHORITY_FACTORIES, Collaborators, ConformanceCase, creation_method, new_case
)
from conformance.core.fixtures import ReferenceFixture

logger = logging.getLogger(__name__)


def lookup(kind: str):
    """Creation function looking up the fixture's code with the authority factory."""
    method = creation_method(kind)

    def create(authority: Any, fixture: ReferenceFixture, components) -> Any:
        return getattr(authority, method)(str(fixture.code))

    create.__name__ = method
    return create


def authority_object_case(test_id: str, collaborators: Collaborators, reporter: Any,
                          composer: Any = None, kind: str = "GeodeticDatum") -> ConformanceCase:
    """
    Create a case verifying an object obtained from an authority factory.

    Args:
        test_id: Test identifier, e.g. "Test2204.EPSG_6326"
        collaborators: Vendor collaborators
        reporter: SkipReporter shared by the run
        composer: NestedTestComposer, when the case is used as a component
        kind: Kind of object looked up

    Returns:
        The new, unconfigured case
    """
    return new_case(test_id, kind, lookup(kind), AUTHORITY_FACTORIES[kind],
                    collaborators, reporter, composer)


def verify_codes(case: ConformanceCase, fixtures: Iterable[ReferenceFixture],
                 verifier: Any) -> List[ReferenceFixture]:
    """
    Verify several fixtures of the same kind with one builder.

    The builder is reset before each fixture. The first failure, or the
    first code the vendor does not support, terminates the loop.

    Returns:
        The fixtures verified
    """
    verified = []
    for fixture in fixtures:
        case.rebuild(fixture)
        case.verify(verifier)
        verified.append(fixture)
    logger.debug(f"{case.test_id}: verified {len(verified)} {case.kind} codes")
    return verified
