"""
Verification Service

Compares a built entity against its reference fixture. Each check is gated
by a capability flag of the configuration snapshot: a check whose
capability is disabled is not evaluated. The first mismatch raises and
terminates the test method.
"""

from typing import Any, Optional

from config_factory import HarnessConfig
from conformance.config.capabilities import ConfigKey
from conformance.core.errors import HarnessError, PropertyMismatch, StructuralViolation
from conformance.core.fixtures import ExpectedQuantity, ReferenceFixture
from conformance.core.model import (
    get_aliases, get_identifiers, get_name, identifier_code_space, to_ascii
)
from conformance.core.outcomes import Outcome
from conformance.core.units import ANGLE, Unit, Units
from conformance.services.base_service import BaseService
from conformance.services.configuration_snapshot import ConfigurationSnapshot


def resolve_attribute(entity: Any, path: str) -> Any:
    """Follow a dotted attribute path (e.g. "datum.ellipsoid"), returning None when a link is missing."""
    value = entity
    for attribute in path.split('.'):
        if value is None:
            return None
        value = getattr(value, attribute, None)
    return value


class Verifier(BaseService):
    """
    Service verifying built entities against reference fixtures.

    Args:
        units: Units registry used for the canonical-unit cross-check
        validator: Default structural validator, used when the snapshot holds none
        reporter: SkipReporter recording the configuration tip of each check
        config: Harness configuration (alias policy, tolerances)
    """

    def __init__(self, units: Units, validator: Any, reporter: Any,
                 config: Optional[HarnessConfig] = None):
        self._units = units
        self._validator = validator
        self._reporter = reporter
        super().__init__(config)

    def _initialize(self) -> None:
        self._alias_policy = self.get_config_value('alias_policy', 'superset')
        self._tolerance = self.get_config_value('tolerance')
        self._angular_tolerance = self.get_config_value('angular_tolerance')

    def verify(self, entity: Any, fixture: ReferenceFixture, snapshot: ConfigurationSnapshot,
               kind: str = "IdentifiedObject", as_dependency: bool = False,
               skip_identification: bool = False) -> Outcome:
        """
        Verify one entity.

        Args:
            entity: The built entity
            fixture: Expected properties
            snapshot: Configuration snapshot in effect
            kind: Kind of entity, used in failure labels
            as_dependency: Whether the entity is a component of the object under test
            skip_identification: Skip the identifier, name and alias checks

        Returns:
            Outcome.PASS when every enabled check holds

        Raises:
            StructuralViolation: If the entity is missing or rejected by the validator
            PropertyMismatch: If a property does not match the fixture
        """
        entity_label = f"{kind}[{fixture.code}]"
        if entity is None:
            raise StructuralViolation(f"{entity_label} was not created")

        self._validate(entity, entity_label, snapshot)

        if not skip_identification:
            identification = not as_dependency or snapshot.is_enabled(
                ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED
            )
            if identification:
                self._verify_identification(entity, fixture, snapshot, entity_label)

        if (snapshot.is_enabled(ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED)
                and snapshot.is_enabled(ConfigKey.STANDARD_NAME_SUPPORTED)):
            self._verify_dependency_names(entity, fixture, entity_label)
        if (snapshot.is_enabled(ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED)
                and snapshot.is_enabled(ConfigKey.STANDARD_IDENTIFIER_SUPPORTED)):
            self._verify_dependency_codes(entity, fixture, entity_label)

        for quantity in fixture.quantities:
            self._verify_quantity(entity, quantity, snapshot, entity_label)

        self.log_debug(f"{entity_label} verified", kind=kind, code=str(fixture.code))
        return Outcome.PASS

    def _validate(self, entity: Any, entity_label: str, snapshot: ConfigurationSnapshot) -> None:
        validator = snapshot.get(ConfigKey.VALIDATORS) or self._validator
        try:
            validator.validate(entity)
        except HarnessError:
            raise
        except Exception as e:
            raise StructuralViolation(
                f"{entity_label} rejected by validator: {e}",
                {"exception": type(e).__name__}
            ) from e

    def _verify_identification(self, entity: Any, fixture: ReferenceFixture,
                               snapshot: ConfigurationSnapshot, entity_label: str) -> None:
        if snapshot.is_enabled(ConfigKey.STANDARD_IDENTIFIER_SUPPORTED):
            with self._reporter.tip(ConfigKey.STANDARD_IDENTIFIER_SUPPORTED):
                self._verify_identifier(entity, fixture, entity_label, 'identifier')

        if snapshot.is_enabled(ConfigKey.STANDARD_NAME_SUPPORTED):
            with self._reporter.tip(ConfigKey.STANDARD_NAME_SUPPORTED):
                self._verify_name(get_name(entity), fixture.name, fixture.name_is_prefix,
                                  entity_label, 'name', ConfigKey.STANDARD_NAME_SUPPORTED)

        if snapshot.is_enabled(ConfigKey.STANDARD_ALIAS_SUPPORTED):
            with self._reporter.tip(ConfigKey.STANDARD_ALIAS_SUPPORTED):
                self._verify_aliases(entity, fixture, entity_label)

    def _verify_identifier(self, entity: Any, fixture: ReferenceFixture, entity_label: str,
                           property_label: str, expected_code: Any = None,
                           tip: ConfigKey = ConfigKey.STANDARD_IDENTIFIER_SUPPORTED) -> None:
        expected = fixture.code if expected_code is None else expected_code
        authority = fixture.authority.strip().lower()
        identifiers = get_identifiers(entity)
        if not identifiers:
            raise PropertyMismatch(entity_label, property_label, expected, None, tip.value,
                                   f"{entity_label} {property_label} mismatch: no identifier")

        matching = [
            identifier for identifier in identifiers
            if str(identifier_code_space(identifier) or '').strip().lower() == authority
        ]
        if len(matching) != 1:
            raise PropertyMismatch(
                entity_label, property_label, expected, [str(i) for i in identifiers], tip.value,
                f"{entity_label} {property_label} mismatch: expected exactly one "
                f"{fixture.authority} identifier but found {len(matching)}"
            )

        actual = getattr(matching[0], 'code', None)
        if not self._same_code(expected, actual):
            raise PropertyMismatch(entity_label, property_label, expected, actual, tip.value)

    @staticmethod
    def _same_code(expected: Any, actual: Any) -> bool:
        if actual is None:
            return False
        if isinstance(expected, int):
            try:
                return int(str(actual).strip()) == expected
            except ValueError:
                return False
        return str(actual).strip() == str(expected).strip()

    @staticmethod
    def _verify_name(actual: Optional[str], expected: str, is_prefix: bool, entity_label: str,
                     property_label: str, tip: ConfigKey) -> None:
        folded = to_ascii(actual)
        if folded is not None and (folded.startswith(expected) if is_prefix else folded == expected):
            return
        raise PropertyMismatch(entity_label, property_label, expected, actual, tip.value)

    def _verify_aliases(self, entity: Any, fixture: ReferenceFixture, entity_label: str) -> None:
        expected = {alias.lower() for alias in fixture.aliases}
        actual = {alias.lower() for alias in get_aliases(entity) or ()}
        if self._alias_policy == 'exact':
            matches = actual == expected
        else:
            matches = actual >= expected
        if not matches:
            raise PropertyMismatch(
                entity_label, 'aliases', sorted(fixture.aliases), sorted(get_aliases(entity) or ()),
                ConfigKey.STANDARD_ALIAS_SUPPORTED.value,
                f"{entity_label} aliases mismatch: missing {sorted(expected - actual)}"
                if not expected <= actual else None
            )

    def _verify_dependency_names(self, entity: Any, fixture: ReferenceFixture,
                                 entity_label: str) -> None:
        for attribute, expected in fixture.dependency_names.items():
            with self._reporter.tip(ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED):
                component = resolve_attribute(entity, attribute)
                self._verify_name(get_name(component), expected, False, entity_label,
                                  f"{attribute} name", ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED)

    def _verify_dependency_codes(self, entity: Any, fixture: ReferenceFixture,
                                 entity_label: str) -> None:
        for attribute, expected in fixture.dependency_codes.items():
            with self._reporter.tip(ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED):
                component = resolve_attribute(entity, attribute)
                self._verify_identifier(component, fixture, entity_label, f"{attribute} identifier",
                                        expected, ConfigKey.DEPENDENCY_IDENTIFICATION_SUPPORTED)

    def _verify_quantity(self, entity: Any, quantity: ExpectedQuantity,
                         snapshot: ConfigurationSnapshot, entity_label: str) -> None:
        label = quantity.attribute
        actual = resolve_attribute(entity, quantity.attribute)
        if actual is None:
            raise PropertyMismatch(entity_label, label, quantity.value, None)
        unit = self._actual_unit(entity, quantity)
        if unit is None:
            raise PropertyMismatch(entity_label, f"{label} unit", quantity.unit.name, None)
        tolerance = self._tolerance_for(quantity)

        if snapshot.is_enabled(ConfigKey.PRESERVES_USER_VALUES):
            with self._reporter.tip(ConfigKey.PRESERVES_USER_VALUES):
                if unit != quantity.unit:
                    raise PropertyMismatch(entity_label, f"{label} unit", quantity.unit.name,
                                           unit.name, ConfigKey.PRESERVES_USER_VALUES.value)
                if abs(actual - quantity.value) > tolerance:
                    raise PropertyMismatch(entity_label, label, quantity.value, actual,
                                           ConfigKey.PRESERVES_USER_VALUES.value)

        # Unit-independent cross-check
        try:
            canonical = self._units.convert(actual, unit, quantity.canonical_unit)
        except ValueError as e:
            raise PropertyMismatch(entity_label, f"{label} unit", quantity.canonical_unit.name,
                                   unit.name, message=f"{entity_label} {label} unit mismatch: {e}")
        canonical_tolerance = self._tolerance_for(quantity, quantity.canonical_unit)
        if abs(canonical - quantity.canonical_value) > canonical_tolerance:
            raise PropertyMismatch(entity_label, f"{label} in {quantity.canonical_unit.name}",
                                   quantity.canonical_value, canonical)
        restored = self._units.convert(canonical, quantity.canonical_unit, unit)
        if abs(restored - actual) > tolerance:
            raise PropertyMismatch(entity_label, f"{label} round trip", actual, restored)

    def _actual_unit(self, entity: Any, quantity: ExpectedQuantity) -> Optional[Unit]:
        if quantity.unit_attribute is None:
            return quantity.unit
        unit = resolve_attribute(entity, quantity.unit_attribute)
        if unit is None or isinstance(unit, Unit):
            return unit
        return self._units.get(str(getattr(unit, 'name', unit)))

    def _tolerance_for(self, quantity: ExpectedQuantity, unit: Optional[Unit] = None) -> float:
        if quantity.tolerance is not None:
            return quantity.tolerance
        unit = unit or quantity.unit
        return self._angular_tolerance if unit.quantity == ANGLE else self._tolerance
