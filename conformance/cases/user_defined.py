"""
User-defined objects

Cases verifying objects the vendor creates from user-supplied properties
and from the components built by nested cases.
"""

from functools import partial
from typing import Any

from conformance.cases.base import (
    USER_DEFINED_FACTORIES, Collaborators, ConformanceCase, creation_method, new_case
)
from conformance.core.fixtures import ReferenceFixture


def from_properties(kind: str):
    """Creation function calling ``factory.create_<kind>(properties, *components)``."""
    method = creation_method(kind)

    def create(factory: Any, fixture: ReferenceFixture, components) -> Any:
        return getattr(factory, method)(fixture.properties(), *components)

    create.__name__ = method
    return create


def user_defined_case(test_id: str, collaborators: Collaborators, reporter: Any,
                      composer: Any = None, kind: str = "GeodeticDatum") -> ConformanceCase:
    """Create a case verifying an object built from user-defined properties."""
    return new_case(test_id, kind, from_properties(kind), USER_DEFINED_FACTORIES[kind],
                    collaborators, reporter, composer)


ellipsoid_case = partial(user_defined_case, kind="Ellipsoid")
prime_meridian_case = partial(user_defined_case, kind="PrimeMeridian")
geodetic_datum_case = partial(user_defined_case, kind="GeodeticDatum")
geographic_crs_case = partial(user_defined_case, kind="GeographicCRS")
