"""
Tests for identified object helpers
"""

from types import SimpleNamespace

from conformance.core.model import (
    SimpleIdentifier, get_aliases, get_identifiers, get_name, identifier_code_space, to_ascii
)


class TestAccessors:
    """Test duck-typed access to identification properties"""

    def test_plain_name(self):
        assert get_name(SimpleNamespace(name="WGS 84")) == "WGS 84"

    def test_name_object(self):
        name = SimpleNamespace(code="World Geodetic System 1984")
        assert get_name(SimpleNamespace(name=name)) == "World Geodetic System 1984"

    def test_missing_name(self):
        assert get_name(None) is None
        assert get_name(SimpleNamespace()) is None

    def test_identifiers(self):
        identifier = SimpleIdentifier("EPSG", "6326")
        entity = SimpleNamespace(identifiers=(identifier,))

        assert get_identifiers(entity) == [identifier]
        assert get_identifiers(SimpleNamespace()) is None
        assert str(identifier) == "EPSG:6326"

    def test_code_space_spellings(self):
        assert identifier_code_space(SimpleIdentifier("EPSG", "6326")) == "EPSG"
        assert identifier_code_space(SimpleNamespace(codespace="IOGP", code="1")) == "IOGP"
        assert identifier_code_space(SimpleNamespace(code="1")) is None

    def test_aliases_from_strings_and_names(self):
        entity = SimpleNamespace(aliases=[
            "WGS 84",
            SimpleNamespace(tip=lambda: "WGS84"),
            SimpleNamespace(tip=None, code="World Geodetic System"),
        ])

        assert get_aliases(entity) == ["WGS 84", "WGS84", "World Geodetic System"]

    def test_singular_alias_attribute(self):
        assert get_aliases(SimpleNamespace(alias=["NAD83"])) == ["NAD83"]
        assert get_aliases(SimpleNamespace()) is None


class TestToAscii:
    """Test folding of names to their published ASCII form"""

    def test_accents_removed(self):
        assert to_ascii("Nouvelle Triangulation Française") == "Nouvelle Triangulation Francaise"
        assert to_ascii("Réseau Géodésique Français 1993") == "Reseau Geodesique Francais 1993"

    def test_typographic_quotes(self):
        assert to_ascii("Bureau des Longitudes’") == "Bureau des Longitudes'"

    def test_unicode_spaces(self):
        assert to_ascii("WGS\u00a084") == "WGS 84"
        assert to_ascii("WGS\u200984") == "WGS 84"

    def test_case_and_spacing_kept(self):
        assert to_ascii("wgs  84") == "wgs  84"

    def test_none(self):
        assert to_ascii(None) is None
