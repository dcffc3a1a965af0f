"""
Integration tests running complete conformance cases against stub factories

Cases are configured, built and verified exactly as a vendor run would do
it, through the services provided by the dependency injection container.
"""

import pytest

from config_factory import HarnessConfig
from conformance.cases.authority import authority_object_case
from conformance.cases.catalogue import case_for
from conformance.config.capabilities import ConfigKey
from conformance.core.errors import ErrorCode
from conformance.core.outcomes import Outcome, SkipReason
from conformance.core.units import DEGREE
from conformance.utils.outcome_handling import run_case
from tests.factories.geodetic_factory import GeodeticFactory, StubAuthorityFactory, StubFactory

WGS84_TEST = "GeodeticDatum.EPSG_6326"


@pytest.fixture
def fixtures(container):
    """Packaged reference fixtures, loaded once per test."""
    loader = container.get('FixtureLoader')
    loader.load()
    return loader


def walk(case):
    """Yield every descendant of a case with its parent."""
    for child in case.children:
        yield case, child.case
        yield from walk(child.case)


class TestAuthorityDatum:
    """WGS 84 datum looked up by EPSG code"""

    def run(self, authority, reporter, verifier, fixtures, config=None):
        case = authority_object_case(WGS84_TEST, GeodeticFactory.collaborators(authority=authority),
                                     reporter)

        def build(case):
            case.use(fixtures.get('EPSG_6326'))

        return run_case(case, build, verifier, reporter, config or HarnessConfig())

    def test_conforming_datum_passes(self, reporter, verifier, fixtures):
        authority = StubAuthorityFactory({6326: GeodeticFactory.wgs84_datum()})

        outcome = self.run(authority, reporter, verifier, fixtures)

        assert outcome.outcome == Outcome.PASS
        assert authority.calls == ["6326"]

    def test_wrong_name_fails(self, reporter, verifier, fixtures):
        authority = StubAuthorityFactory({6326: GeodeticFactory.wgs84_datum(name="wgs84")})

        outcome = self.run(authority, reporter, verifier, fixtures)

        assert outcome.outcome == Outcome.FAIL
        assert "GeodeticDatum[6326] name mismatch" in outcome.label
        assert outcome.configuration_tip == "isStandardNameSupported"
        assert outcome.error_code == ErrorCode.PROPERTY_MISMATCH.value

    def test_missing_factory_skips(self, reporter, verifier, fixtures):
        outcome = self.run(None, reporter, verifier, fixtures)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.reason == SkipReason.ABSENT_COLLABORATOR
        assert outcome.message == "No factory available for GeodeticDatum."

    def test_unknown_code_skips(self, reporter, verifier, fixtures):
        outcome = self.run(StubAuthorityFactory(), reporter, verifier, fixtures)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.reason == SkipReason.UNSUPPORTED_CODE
        assert outcome.message == "GeodeticDatum[6326] not supported."
        assert reporter.unsupported_codes == {"GeodeticDatum": [6326]}

    def test_missing_alias_fails_unless_disabled_for_test(self, reporter, verifier, fixtures):
        authority = StubAuthorityFactory({6326: GeodeticFactory.wgs84_datum(aliases=[])})

        failed = self.run(authority, reporter, verifier, fixtures)
        passed = self.run(authority, reporter, verifier, fixtures, HarnessConfig(
            test_overrides={WGS84_TEST: {'isStandardAliasSupported': False}}
        ))

        assert failed.outcome == Outcome.FAIL
        assert failed.configuration_tip == "isStandardAliasSupported"
        assert passed.outcome == Outcome.PASS


class TestConcatenatedOperation:
    """GIGS 68094: two transformation steps, each with nested CRSs"""

    def run(self, factory, reporter, verifier, composer, config=None, **slots):
        collaborators = GeodeticFactory.collaborators(factory, **slots)
        case, build = case_for(68094, collaborators, reporter, composer)
        outcome = run_case(case, build, verifier, reporter, config or HarnessConfig())
        return case, outcome

    def test_conforming_factories_pass(self, reporter, verifier, composer):
        factory = StubFactory()

        case, outcome = self.run(factory, reporter, verifier, composer)

        assert outcome.outcome == Outcome.PASS, outcome.label
        assert [child.label for child in case.children] == ["step 1", "step 2"]
        assert [child.label for child in case.child("step 1").children] == ["source CRS", "target CRS"]
        assert case.entity().steps == [case.child("step 1").entity(), case.child("step 2").entity()]
        assert factory.count("ConcatenatedOperation") == 1
        assert factory.count("Transformation") == 2
        assert factory.count("GeographicCRS") == 4

    def test_unsupported_step_skips_with_label(self, reporter, verifier, composer):
        factory = StubFactory(unsupported=[61193])

        case, outcome = self.run(factory, reporter, verifier, composer)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.reason == SkipReason.UNSUPPORTED_CODE
        assert outcome.path == ("step 2",)
        assert outcome.message == "Transformation[61193] not supported."
        assert outcome.label == "step 2: Transformation[61193] not supported."
        assert factory.count("ConcatenatedOperation") == 0

    def test_deepest_missing_collaborator_is_reported(self, reporter, verifier, composer):
        case, outcome = self.run(StubFactory(), reporter, verifier, composer, datum_factory=None)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.reason == SkipReason.ABSENT_COLLABORATOR
        assert outcome.path == ("step 1", "source CRS", "datum", "ellipsoid")

    def test_missing_operation_factory_skips_at_first_step(self, reporter, verifier, composer):
        factory = StubFactory()

        case, outcome = self.run(factory, reporter, verifier, composer, cop_factory=None)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.path == ("step 1",)
        assert outcome.message == "No factory available for Transformation."
        assert factory.count("GeographicCRS") == 2

    def test_build_is_idempotent(self, reporter, verifier, composer):
        factory = StubFactory()
        case, _ = self.run(factory, reporter, verifier, composer)
        calls = list(factory.calls)

        first = case.entity()
        case.verify(verifier)

        assert case.entity() is first
        assert factory.calls == calls

    def test_configuration_propagates_to_every_descendant(self, reporter, verifier, composer):
        config = HarnessConfig(capabilities={'isStandardAliasSupported': False})
        case, outcome = self.run(StubFactory(), reporter, verifier, composer, config)

        assert outcome.passed
        descendants = list(walk(case))
        assert len(descendants) == 2 + 2 * (2 + 2 * (1 + 2))
        for parent, child in descendants:
            for key, value in parent.snapshot.items():
                assert child.snapshot.get(key) is value, f"{child.test_id} lost {key.value}"
            assert child.snapshot.get(ConfigKey.STANDARD_ALIAS_SUPPORTED) is False
            assert child.verify_assertions is False

    def test_failure_in_nested_component_is_labelled(self, reporter, verifier, composer):
        factory = StubFactory(overrides={67011: {'inverse_flattening': 293.465}})

        case, outcome = self.run(factory, reporter, verifier, composer)

        assert outcome.outcome == Outcome.FAIL
        assert outcome.path == ("step 1", "source CRS", "datum", "ellipsoid")
        assert "Ellipsoid[67011] inverse_flattening mismatch" in outcome.message


class TestCapabilityGating:
    """Checks switched off by the vendor's declared capabilities"""

    def test_dependency_identification(self, reporter, verifier, composer):
        factory = StubFactory(overrides={66001: {'name': "GIGS datum A"}})
        collaborators = GeodeticFactory.collaborators(factory)

        case, build = case_for(64003, collaborators, reporter, composer)
        failed = run_case(case, build, verifier, reporter, HarnessConfig())

        case, build = case_for(64003, collaborators, reporter, composer)
        passed = run_case(case, build, verifier, reporter, HarnessConfig(
            capabilities={'isDependencyIdentificationSupported': False}
        ))

        assert failed.outcome == Outcome.FAIL
        assert "GeographicCRS[64003] datum name mismatch" in failed.message
        assert failed.configuration_tip == "isDependencyIdentificationSupported"
        assert passed.outcome == Outcome.PASS

    def test_converted_values_need_preservation_disabled(self, reporter, verifier, composer):
        factory = StubFactory(overrides={68903: {'greenwich_longitude': 2.33722917, 'angular_unit': DEGREE}})
        collaborators = GeodeticFactory.collaborators(factory)

        case, build = case_for(68903, collaborators, reporter, composer)
        failed = run_case(case, build, verifier, reporter, HarnessConfig())

        case, build = case_for(68903, collaborators, reporter, composer)
        passed = run_case(case, build, verifier, reporter, HarnessConfig(
            test_overrides={'PrimeMeridian.GIGS_68903': {'isFactoryPreservingUserValues': False}}
        ))

        assert failed.outcome == Outcome.FAIL
        assert failed.configuration_tip == "isFactoryPreservingUserValues"
        assert passed.outcome == Outcome.PASS

    def test_paris_meridian_round_trip(self, reporter, verifier, composer):
        case, build = case_for(68903, GeodeticFactory.collaborators(), reporter, composer)

        outcome = run_case(case, build, verifier, reporter, HarnessConfig())

        outcome.raise_for_pytest()
        assert case.entity().angular_unit.name == "grad"


class TestRunSummary:
    """Outcomes collected across several cases"""

    def test_catalogue_run(self, reporter, verifier, composer):
        factory = StubFactory(unsupported=[64013])
        collaborators = GeodeticFactory.collaborators(factory)

        for code in (67030, 68901, 66001, 64003, 64013, 61763, 68094):
            case, build = case_for(code, collaborators, reporter, composer)
            run_case(case, build, verifier, reporter, HarnessConfig())

        summary = reporter.summary()
        assert summary['counts'] == {'pass': 4, 'skip': 3, 'fail': 0}
        assert summary['skips'] == {'unsupported_code': 3}
        assert summary['unsupported_codes'] == {"GeographicCRS": [64013, 64013, 64013]}
