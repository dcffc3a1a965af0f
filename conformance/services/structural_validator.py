"""
Structural Validator

Default black-box validation of built entities against the referencing data
model, used when the vendor does not supply its own validator. Vendors may
inject any object exposing ``validate(entity)`` instead.
"""

import math
import numbers
from typing import Any, Iterable

from conformance.core.errors import StructuralViolation
from conformance.core.model import get_aliases, get_identifiers, get_name, identifier_code_space
from conformance.services.base_service import BaseService

# Numeric attributes checked for finiteness when present on an entity
NUMERIC_ATTRIBUTES = (
    'semi_major_axis', 'semi_minor_axis', 'inverse_flattening',
    'greenwich_longitude', 'scale_factor', 'operation_accuracy',
)


class StructuralValidator(BaseService):
    """Checks the structural integrity of identified objects."""

    def _initialize(self) -> None:
        self._numeric_attributes: Iterable[str] = self.get_config_value(
            'numeric_attributes', NUMERIC_ATTRIBUTES
        )

    def validate(self, entity: Any) -> None:
        """
        Validate an entity.

        Args:
            entity: Object returned by a factory under test

        Raises:
            StructuralViolation: If the entity violates the referencing model
        """
        if entity is None:
            raise StructuralViolation("Entity is missing")

        type_name = type(entity).__name__
        name = get_name(entity)
        if name is None or not name.strip():
            raise StructuralViolation(f"{type_name} has no name")

        for identifier in get_identifiers(entity) or ():
            code_space = identifier_code_space(identifier)
            code = getattr(identifier, 'code', None)
            if not code_space or not str(code_space).strip():
                raise StructuralViolation(f"{type_name} \"{name}\" has an identifier without code space")
            if code is None or not str(code).strip():
                raise StructuralViolation(f"{type_name} \"{name}\" has an identifier without code")

        try:
            aliases = get_aliases(entity)
        except TypeError:
            raise StructuralViolation(f"{type_name} \"{name}\" aliases are not iterable")
        for alias in aliases or ():
            if not alias.strip():
                raise StructuralViolation(f"{type_name} \"{name}\" has a blank alias")

        for attribute in self._numeric_attributes:
            value = getattr(entity, attribute, None)
            if value is None:
                continue
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise StructuralViolation(
                    f"{type_name} \"{name}\" {attribute} is not a finite number: {value!r}",
                    {"attribute": attribute}
                )
