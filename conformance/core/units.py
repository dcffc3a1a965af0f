"""
Units of measurement used by reference fixtures

Provides a minimal unit model sufficient for the harness's own comparisons:
every unit knows the factor that converts its values to the base unit of
its quantity (radian for angles, metre for lengths, unity for scales).
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

ANGLE = "angle"
LENGTH = "length"
SCALE = "scale"


@dataclass(frozen=True)
class Unit:
    """A unit of measurement."""
    name: str
    symbol: str
    quantity: str
    factor: float

    def is_compatible(self, other: 'Unit') -> bool:
        return self.quantity == other.quantity

    def __str__(self) -> str:
        return self.symbol


METRE = Unit("metre", "m", LENGTH, 1.0)
KILOMETRE = Unit("kilometre", "km", LENGTH, 1000.0)
FOOT = Unit("foot", "ft", LENGTH, 0.3048)
US_SURVEY_FOOT = Unit("US survey foot", "ftUS", LENGTH, 12 / 39.37)
RADIAN = Unit("radian", "rad", ANGLE, 1.0)
DEGREE = Unit("degree", "°", ANGLE, math.pi / 180)
GRAD = Unit("grad", "grad", ANGLE, math.pi / 200)
ARC_SECOND = Unit("arc-second", "″", ANGLE, math.pi / (180 * 3600))
MICRORADIAN = Unit("microradian", "µrad", ANGLE, 1E-6)
UNITY = Unit("unity", "1", SCALE, 1.0)
PPM = Unit("parts per million", "ppm", SCALE, 1E-6)


class Units:
    """
    Registry of the units referenced by GIGS fixtures.

    Constructed once when the harness starts and injected into the services
    that compare numeric values.
    """

    def __init__(self):
        self._units: Dict[str, Unit] = {}
        for unit in (METRE, KILOMETRE, FOOT, US_SURVEY_FOOT, RADIAN, DEGREE, GRAD,
                     ARC_SECOND, MICRORADIAN, UNITY, PPM):
            self._units[unit.name] = unit

    @property
    def metre(self) -> Unit:
        return self._units["metre"]

    @property
    def kilometre(self) -> Unit:
        return self._units["kilometre"]

    @property
    def foot(self) -> Unit:
        return self._units["foot"]

    @property
    def us_survey_foot(self) -> Unit:
        return self._units["US survey foot"]

    @property
    def radian(self) -> Unit:
        return self._units["radian"]

    @property
    def degree(self) -> Unit:
        return self._units["degree"]

    @property
    def grad(self) -> Unit:
        return self._units["grad"]

    @property
    def arc_second(self) -> Unit:
        return self._units["arc-second"]

    @property
    def microradian(self) -> Unit:
        return self._units["microradian"]

    @property
    def unity(self) -> Unit:
        return self._units["unity"]

    @property
    def ppm(self) -> Unit:
        return self._units["parts per million"]

    def get(self, name: str) -> Optional[Unit]:
        """
        Look up a unit by name or symbol.

        Args:
            name: Unit name ("degree") or symbol ("grad")

        Returns:
            The unit, or None if unknown
        """
        unit = self._units.get(name)
        if unit is not None:
            return unit
        for candidate in self._units.values():
            if candidate.symbol == name or candidate.name.lower() == name.lower():
                return candidate
        return None

    def convert(self, value: float, source: Unit, target: Unit) -> float:
        """
        Convert a value between two units of the same quantity.

        Raises:
            ValueError: If the units measure different quantities
        """
        if not source.is_compatible(target):
            raise ValueError(f"Cannot convert from {source.name} to {target.name}")
        if source == target:
            return value
        return value * source.factor / target.factor

    def __repr__(self) -> str:
        return f"Units(units={len(self._units)})"
