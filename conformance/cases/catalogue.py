"""
GIGS build strategies

Each function populates a case with the reference data of one GIGS code,
composing nested cases for the components it depends on. Strategies take
the case as their only argument so that they can be passed to the
composer like any other function.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from conformance.cases.base import Collaborators, ConformanceCase
from conformance.cases.operations import (
    concatenated_operation_case, source_crs, step, target_crs, transformation_case
)
from conformance.cases.user_defined import (
    ellipsoid_case, geodetic_datum_case, geographic_crs_case, prime_meridian_case
)
from conformance.core.fixtures import ExpectedQuantity, ReferenceFixture
from conformance.core.units import DEGREE, GRAD, METRE, UNITY
from conformance.services.verification_service import resolve_attribute

GIGS = "GIGS"


def _ellipsoid(case: ConformanceCase, code: int, name: str, semi_major: float,
               semi_minor: float, inverse_flattening: float, axis_tolerance: float) -> None:
    case.use(ReferenceFixture(
        code=code,
        name=name,
        authority=GIGS,
        parameters={
            'semi_major_axis': semi_major,
            'semi_minor_axis': semi_minor,
            'inverse_flattening': inverse_flattening,
            'axis_unit': METRE,
        },
        quantities=(
            ExpectedQuantity('semi_major_axis', semi_major, METRE, semi_major, METRE,
                             unit_attribute='axis_unit'),
            ExpectedQuantity('semi_minor_axis', semi_minor, METRE, semi_minor, METRE,
                             unit_attribute='axis_unit', tolerance=axis_tolerance),
            ExpectedQuantity('inverse_flattening', inverse_flattening, UNITY,
                             inverse_flattening, UNITY),
        ),
    ))


def gigs_67030(case: ConformanceCase) -> None:
    _ellipsoid(case, 67030, "GIGS ellipsoid A", 6378137.0, 6356752.3, 298.257223563, 0.05)


def gigs_67011(case: ConformanceCase) -> None:
    _ellipsoid(case, 67011, "GIGS ellipsoid H", 6378249.2, 6356515.0, 293.466, 0.05)


def _prime_meridian(case: ConformanceCase, code: int, name: str, longitude: float,
                    unit, longitude_in_degrees: float) -> None:
    case.use(ReferenceFixture(
        code=code,
        name=name,
        authority=GIGS,
        parameters={'greenwich_longitude': longitude, 'angular_unit': unit},
        quantities=(
            ExpectedQuantity('greenwich_longitude', longitude, unit, longitude_in_degrees,
                             DEGREE, unit_attribute='angular_unit'),
        ),
    ))


def gigs_68901(case: ConformanceCase) -> None:
    _prime_meridian(case, 68901, "GIGS PM A", 0.0, DEGREE, 0.0)


def gigs_68903(case: ConformanceCase) -> None:
    _prime_meridian(case, 68903, "GIGS PM H", 2.5969213, GRAD, 2.33722917)


def _datum(case: ConformanceCase, code: int, name: str,
           ellipsoid: Callable[[ConformanceCase], None],
           prime_meridian: Callable[[ConformanceCase], None]) -> None:
    case.compose(ellipsoid_case, ellipsoid, "ellipsoid")
    case.compose(prime_meridian_case, prime_meridian, "prime meridian")
    case.use(ReferenceFixture(
        code=code,
        name=name,
        authority=GIGS,
        dependency_names={
            'ellipsoid': case.child("ellipsoid").fixture.name,
            'prime_meridian': case.child("prime meridian").fixture.name,
        },
    ))


def gigs_66001(case: ConformanceCase) -> None:
    _datum(case, 66001, "GIGS geodetic datum A", gigs_67030, gigs_68901)


def gigs_66008(case: ConformanceCase) -> None:
    _datum(case, 66008, "GIGS geodetic datum H", gigs_67011, gigs_68903)


def gigs_66010(case: ConformanceCase) -> None:
    _datum(case, 66010, "GIGS geodetic datum T", gigs_67011, gigs_68901)


def _geographic_crs(case: ConformanceCase, code: int, name: str,
                    datum: Callable[[ConformanceCase], None], cs_code: int) -> None:
    case.compose(geodetic_datum_case, datum, "datum")
    case.use(ReferenceFixture(
        code=code,
        name=name,
        authority=GIGS,
        parameters={'cs_code': cs_code},
        dependency_names={'datum': case.child("datum").fixture.name},
    ))


def gigs_64003(case: ConformanceCase) -> None:
    _geographic_crs(case, 64003, "GIGS geogCRS A", gigs_66001, 6422)


def gigs_64011(case: ConformanceCase) -> None:
    _geographic_crs(case, 64011, "GIGS geogCRS H", gigs_66008, 6403)


def gigs_64013(case: ConformanceCase) -> None:
    _geographic_crs(case, 64013, "GIGS geogCRS T", gigs_66010, 6403)


def _ellipsoid_parameters(crs: Any, prefix: str) -> Dict[str, Tuple[Any, Any]]:
    ellipsoid = resolve_attribute(crs, 'datum.ellipsoid')
    unit = resolve_attribute(ellipsoid, 'axis_unit')
    return {
        f'{prefix}_semi_major': (resolve_attribute(ellipsoid, 'semi_major_axis'), unit),
        f'{prefix}_semi_minor': (resolve_attribute(ellipsoid, 'semi_minor_axis'), unit),
    }


def _transformation(case: ConformanceCase, code: int, name: str, method: str,
                    values: Dict[str, Tuple[Any, Any]]) -> None:
    case.use(ReferenceFixture(
        code=code,
        name=name,
        authority=GIGS,
        parameters={
            'operation_version': "GIGS Transformation",
            'method_name': method,
            'parameter_values': values,
        },
        dependency_names={
            'source_crs': case.child("source CRS").fixture.name,
            'target_crs': case.child("target CRS").fixture.name,
        },
    ))


def gigs_61763(case: ConformanceCase) -> None:
    source_crs(case, gigs_64011)
    target_crs(case, gigs_64013)
    _transformation(case, 61763, "GIGS geogCRS H to GIGS geogCRS T (1)", "Longitude rotation",
                    {'Longitude offset': (2.5969213, GRAD)})


def gigs_61193(case: ConformanceCase) -> None:
    source = source_crs(case, gigs_64013)
    target = target_crs(case, gigs_64003)
    values = {
        'X-axis translation': (-168, METRE),
        'Y-axis translation': (-60, METRE),
        'Z-axis translation': (320, METRE),
    }
    values.update(_ellipsoid_parameters(source, 'src'))
    values.update(_ellipsoid_parameters(target, 'tgt'))
    _transformation(case, 61193, "GIGS geogCRS T to GIGS geogCRS A (1)",
                    "Geocentric translations (geog2D domain)", values)


def gigs_68094(case: ConformanceCase) -> None:
    step(case, gigs_61763)
    step(case, gigs_61193)
    case.use(ReferenceFixture(code=68094, name="GIGS_68094", authority=GIGS))


# GIGS code -> (case factory, build strategy)
CATALOGUE: Dict[int, Tuple[Callable[..., ConformanceCase], Callable[[ConformanceCase], None]]] = {
    67030: (ellipsoid_case, gigs_67030),
    67011: (ellipsoid_case, gigs_67011),
    68901: (prime_meridian_case, gigs_68901),
    68903: (prime_meridian_case, gigs_68903),
    66001: (geodetic_datum_case, gigs_66001),
    66008: (geodetic_datum_case, gigs_66008),
    66010: (geodetic_datum_case, gigs_66010),
    64003: (geographic_crs_case, gigs_64003),
    64011: (geographic_crs_case, gigs_64011),
    64013: (geographic_crs_case, gigs_64013),
    61763: (transformation_case, gigs_61763),
    61193: (transformation_case, gigs_61193),
    68094: (concatenated_operation_case, gigs_68094),
}


def case_for(code: int, collaborators: Collaborators, reporter: Any, composer: Any,
             test_id: Optional[str] = None) -> Tuple[ConformanceCase, Callable[[ConformanceCase], None]]:
    """
    Create the case testing a GIGS code.

    Returns:
        The unconfigured case and the strategy that builds it

    Raises:
        KeyError: If the code is not in the catalogue
    """
    case_factory, build = CATALOGUE[code]
    case = case_factory(test_id or "", collaborators, reporter, composer)
    if not test_id:
        case.test_id = f"{case.kind}.{build.__name__.upper()}"
    return case, build
