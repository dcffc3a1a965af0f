"""
Fixture Loader

Loads reference fixtures from YAML catalogues, typically lists of authority
codes to look up. Units named in the file are resolved through the units
registry, and the structure is validated before any fixture is built.
"""

import os
from typing import Any, Dict, List, Optional

import yaml

from config_factory import HarnessConfig
from conformance.core.errors import FixtureError
from conformance.core.fixtures import ExpectedQuantity, ReferenceFixture
from conformance.core.units import Units
from conformance.services.base_service import BaseService

DEFAULT_FIXTURES_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)),
                                     'data', 'epsg_fixtures.yaml')

REQUIRED_FIELDS = {'id', 'kind', 'code', 'name'}


class FixtureLoader(BaseService):
    """
    Service loading reference fixtures from a YAML file.

    Args:
        units: Units registry used to resolve unit names
        config: Harness configuration; ``fixtures_file`` overrides the packaged catalogue
    """

    def __init__(self, units: Units, config: Optional[HarnessConfig] = None):
        self._units = units
        super().__init__(config)

    def _initialize(self) -> None:
        self.fixtures_file = self.get_config_value('fixtures_file') or DEFAULT_FIXTURES_FILE
        self._fixtures: Dict[str, ReferenceFixture] = {}
        self._kinds: Dict[str, str] = {}
        self._loaded = False

    def load(self, path: Optional[str] = None) -> None:
        """
        Load fixtures from a YAML file.

        Args:
            path: File to read; the configured catalogue when omitted

        Raises:
            FileNotFoundError: If the file doesn't exist
            FixtureError: If the structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        path = path or self.fixtures_file
        try:
            with open(path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)
            self.validate_structure(data)
            fixtures, kinds = self._parse_fixtures(data)
        except FileNotFoundError:
            self.log_error(f"Fixture file not found: {path}")
            raise
        except yaml.YAMLError as e:
            self.log_error("YAML parsing error", e)
            raise
        except FixtureError as e:
            self.log_error(f"Invalid fixture file {path}: {e}")
            raise

        self._fixtures = fixtures
        self._kinds = kinds
        self.fixtures_file = path
        self._loaded = True
        self.log_info(f"Loaded {len(fixtures)} fixtures from {path}")

    def validate_structure(self, data: Any) -> None:
        """
        Validate the structure of loaded YAML data.

        Raises:
            FixtureError: If the structure is invalid
        """
        if not isinstance(data, dict):
            raise FixtureError("YAML root must be a dictionary")
        if 'fixtures' not in data:
            raise FixtureError("YAML must contain 'fixtures' key")

        items = data['fixtures']
        if not isinstance(items, list) or not items:
            raise FixtureError("'fixtures' must be a non-empty list")

        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise FixtureError(f"Fixture item {i} must be a dictionary")
            missing = REQUIRED_FIELDS - set(item.keys())
            if missing:
                raise FixtureError(f"Fixture item {i} missing required fields: {sorted(missing)}")
            if not isinstance(item['code'], (int, str)) or isinstance(item['code'], bool):
                raise FixtureError(f"Fixture item {i} code must be an integer or a string")
            aliases = item.get('aliases', [])
            if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
                raise FixtureError(f"Fixture item {i} 'aliases' must be a list of strings")
            for j, quantity in enumerate(item.get('quantities', [])):
                if not isinstance(quantity, dict) or not {'attribute', 'value', 'unit'} <= set(quantity):
                    raise FixtureError(
                        f"Fixture item {i} quantity {j} requires attribute, value and unit"
                    )
                if not isinstance(quantity['value'], (int, float)) or isinstance(quantity['value'], bool):
                    raise FixtureError(f"Fixture item {i} quantity {j} value must be a number")

        ids = [str(item['id']) for item in items]
        if len(ids) != len(set(ids)):
            raise FixtureError("Duplicate fixture IDs found")

    def _parse_fixtures(self, data: Dict[str, Any]):
        fixtures: Dict[str, ReferenceFixture] = {}
        kinds: Dict[str, str] = {}
        for item in data['fixtures']:
            fixture_id = str(item['id']).strip()
            fixtures[fixture_id] = ReferenceFixture(
                code=item['code'],
                name=str(item['name']).strip(),
                aliases=tuple(alias.strip() for alias in item.get('aliases', [])),
                authority=item.get('authority', self.get_config_value('authority', 'EPSG')),
                name_is_prefix=bool(item.get('name_is_prefix', False)),
                deprecated=bool(item.get('deprecated', False)),
                dependency_names=item.get('dependency_names') or {},
                dependency_codes=item.get('dependency_codes') or {},
                quantities=tuple(self._parse_quantity(q) for q in item.get('quantities', [])),
                parameters=item.get('parameters') or {},
            )
            kinds[fixture_id] = str(item['kind']).strip()
        return fixtures, kinds

    def _parse_quantity(self, item: Dict[str, Any]) -> ExpectedQuantity:
        unit = self._unit(item['unit'])
        canonical_unit = self._unit(item.get('canonical_unit', item['unit']))
        canonical_value = item.get('canonical_value')
        if not unit.is_compatible(canonical_unit):
            raise FixtureError(f"Units {unit.name} and {canonical_unit.name} measure different quantities")
        if canonical_value is None:
            canonical_value = self._units.convert(item['value'], unit, canonical_unit)
        return ExpectedQuantity(
            attribute=item['attribute'],
            value=float(item['value']),
            unit=unit,
            canonical_value=float(canonical_value),
            canonical_unit=canonical_unit,
            unit_attribute=item.get('unit_attribute'),
            tolerance=item.get('tolerance'),
        )

    def _unit(self, name: str):
        unit = self._units.get(str(name))
        if unit is None:
            raise FixtureError(f"Unknown unit: {name}")
        return unit

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise RuntimeError("No fixtures loaded. Call load() first.")

    def get(self, fixture_id: str) -> Optional[ReferenceFixture]:
        """
        Get a fixture by its ID.

        Returns:
            The fixture if found, None otherwise
        """
        self._require_loaded()
        return self._fixtures.get(fixture_id)

    def kind_of(self, fixture_id: str) -> Optional[str]:
        self._require_loaded()
        return self._kinds.get(fixture_id)

    def fixtures(self, kind: Optional[str] = None) -> List[ReferenceFixture]:
        """
        Get all loaded fixtures, optionally restricted to one entity kind.

        Raises:
            RuntimeError: If no fixtures are loaded
        """
        self._require_loaded()
        return [
            fixture for fixture_id, fixture in self._fixtures.items()
            if kind is None or self._kinds[fixture_id] == kind
        ]

    def is_loaded(self) -> bool:
        return self._loaded

    def get_fixture_count(self) -> int:
        return len(self._fixtures) if self._loaded else 0
