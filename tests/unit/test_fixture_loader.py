"""
Unit tests for FixtureLoader class.

Tests YAML loading, validation, and fixture retrieval functionality.
"""

import os
import tempfile

import pytest
import yaml

from config_factory import HarnessConfig
from conformance.core.errors import FixtureError
from conformance.core.units import DEGREE, GRAD, METRE, Units
from conformance.services.fixture_loader import DEFAULT_FIXTURES_FILE, FixtureLoader


def write_fixtures(data) -> str:
    """Write fixture data to a temporary YAML file and return its path."""
    with tempfile.NamedTemporaryFile('w', suffix='.yaml', delete=False, encoding='utf-8') as f:
        yaml.dump(data, f, allow_unicode=True)
        return f.name


def fixture_item(**overrides):
    item = {'id': 'EPSG_7030', 'kind': 'Ellipsoid', 'code': 7030, 'name': 'WGS 84'}
    item.update(overrides)
    return item


class TestFixtureLoader:
    """Test FixtureLoader functionality."""

    def setup_method(self):
        self.loader = FixtureLoader(Units(), HarnessConfig())
        self.paths = []

    def teardown_method(self):
        for path in self.paths:
            os.unlink(path)

    def load(self, data):
        path = write_fixtures(data)
        self.paths.append(path)
        self.loader.load(path)
        return path

    def test_initial_state(self):
        assert not self.loader.is_loaded()
        assert self.loader.get_fixture_count() == 0
        assert self.loader.fixtures_file == DEFAULT_FIXTURES_FILE

    def test_configured_fixtures_file(self):
        loader = FixtureLoader(Units(), HarnessConfig(fixtures_file='vendor.yaml'))

        assert loader.fixtures_file == 'vendor.yaml'

    def test_access_before_loading(self):
        with pytest.raises(RuntimeError, match="No fixtures loaded"):
            self.loader.fixtures()

        with pytest.raises(RuntimeError, match="No fixtures loaded"):
            self.loader.get('EPSG_7030')

    def test_load_packaged_catalogue(self):
        self.loader.load()

        assert self.loader.is_loaded()
        assert self.loader.get_fixture_count() == 8

        wgs84 = self.loader.get('EPSG_6326')
        assert wgs84.code == 6326
        assert wgs84.name == "World Geodetic System 1984"
        assert wgs84.aliases == ("WGS 84",)
        assert self.loader.kind_of('EPSG_6326') == "GeodeticDatum"

    def test_packaged_paris_meridian(self):
        self.loader.load()

        paris = self.loader.get('EPSG_8903')
        quantity = paris.quantities[0]
        assert quantity.unit is GRAD
        assert quantity.canonical_unit is DEGREE
        assert quantity.canonical_value == 2.33722917
        assert quantity.unit_attribute == 'angular_unit'

    def test_fixtures_by_kind(self):
        self.loader.load()

        codes = [fixture.code for fixture in self.loader.fixtures('Ellipsoid')]

        assert codes == [7030, 7019, 7004]
        assert len(self.loader.fixtures()) == 8

    def test_dependency_properties(self):
        self.loader.load()

        crs = self.loader.get('EPSG_4326')
        assert crs.dependency_names == {'datum': "World Geodetic System 1984"}
        assert crs.dependency_codes == {'datum': 6326}

    def test_canonical_value_defaults_to_conversion(self):
        self.load({'fixtures': [fixture_item(quantities=[
            {'attribute': 'semi_major_axis', 'value': 6378.137, 'unit': 'kilometre',
             'canonical_unit': 'metre'},
        ])]})

        quantity = self.loader.get('EPSG_7030').quantities[0]
        assert quantity.canonical_unit is METRE
        assert quantity.canonical_value == pytest.approx(6378137.0)
        assert quantity.tolerance is None

    def test_authority_from_config(self):
        loader = FixtureLoader(Units(), HarnessConfig(authority='IOGP'))
        path = write_fixtures({'fixtures': [fixture_item()]})
        self.paths.append(path)

        loader.load(path)

        assert loader.get('EPSG_7030').authority == 'IOGP'

    def test_names_trimmed(self):
        self.load({'fixtures': [fixture_item(name='  WGS 84 ', aliases=[' WGS84 '])]})

        fixture = self.loader.get('EPSG_7030')
        assert fixture.name == 'WGS 84'
        assert fixture.aliases == ('WGS84',)

    def test_unknown_id(self):
        self.load({'fixtures': [fixture_item()]})

        assert self.loader.get('EPSG_9999') is None

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            self.loader.load('/nonexistent/fixtures.yaml')

        assert not self.loader.is_loaded()

    def test_invalid_yaml(self):
        with tempfile.NamedTemporaryFile('w', suffix='.yaml', delete=False) as f:
            f.write("fixtures: [unclosed")
        self.paths.append(f.name)

        with pytest.raises(yaml.YAMLError):
            self.loader.load(f.name)


class TestFixtureValidation:
    """Test structural validation of fixture files."""

    def setup_method(self):
        self.loader = FixtureLoader(Units(), HarnessConfig())

    def test_root_must_be_mapping(self):
        with pytest.raises(FixtureError, match="root must be a dictionary"):
            self.loader.validate_structure(['fixtures'])

    def test_fixtures_key_required(self):
        with pytest.raises(FixtureError, match="must contain 'fixtures' key"):
            self.loader.validate_structure({'items': []})

    def test_fixtures_must_be_non_empty(self):
        with pytest.raises(FixtureError, match="non-empty list"):
            self.loader.validate_structure({'fixtures': []})

    def test_missing_fields(self):
        with pytest.raises(FixtureError, match=r"missing required fields: \['kind', 'name'\]"):
            self.loader.validate_structure({'fixtures': [{'id': 'EPSG_7030', 'code': 7030}]})

    def test_invalid_code(self):
        with pytest.raises(FixtureError, match="code must be an integer or a string"):
            self.loader.validate_structure({'fixtures': [fixture_item(code=True)]})

    def test_invalid_aliases(self):
        with pytest.raises(FixtureError, match="'aliases' must be a list of strings"):
            self.loader.validate_structure({'fixtures': [fixture_item(aliases='WGS84')]})

    def test_incomplete_quantity(self):
        item = fixture_item(quantities=[{'attribute': 'semi_major_axis', 'value': 6378137.0}])

        with pytest.raises(FixtureError, match="requires attribute, value and unit"):
            self.loader.validate_structure({'fixtures': [item]})

    def test_non_numeric_quantity(self):
        item = fixture_item(quantities=[{'attribute': 'semi_major_axis', 'value': 'big', 'unit': 'metre'}])

        with pytest.raises(FixtureError, match="value must be a number"):
            self.loader.validate_structure({'fixtures': [item]})

    def test_duplicate_ids(self):
        with pytest.raises(FixtureError, match="Duplicate fixture IDs"):
            self.loader.validate_structure({'fixtures': [fixture_item(), fixture_item(code=7019)]})

    def test_unknown_unit(self):
        path = write_fixtures({'fixtures': [fixture_item(quantities=[
            {'attribute': 'semi_major_axis', 'value': 1.0, 'unit': 'furlong'},
        ])]})
        try:
            with pytest.raises(FixtureError, match="Unknown unit: furlong"):
                self.loader.load(path)
        finally:
            os.unlink(path)

    def test_incompatible_canonical_unit(self):
        path = write_fixtures({'fixtures': [fixture_item(quantities=[
            {'attribute': 'semi_major_axis', 'value': 1.0, 'unit': 'metre', 'canonical_unit': 'degree'},
        ])]})
        try:
            with pytest.raises(FixtureError, match="measure different quantities"):
                self.loader.load(path)
        finally:
            os.unlink(path)
        assert not self.loader.is_loaded()
