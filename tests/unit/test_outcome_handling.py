"""
Unit tests for conformance/utils/outcome_handling.py

Tests the mapping of exceptions to outcomes, the outcome recording
decorator and logging integration.
"""

import logging

import pytest
from unittest.mock import Mock

from config_factory import HarnessConfig, load_config_from_dict
from conformance.config.capabilities import ConfigKey
from conformance.core.errors import (
    ConfigurationConflict, ErrorCode, FixtureError, PropertyMismatch, UnsupportedByVendor
)
from conformance.core.outcomes import Outcome, SkipReason
from conformance.utils.outcome_handling import (
    log_case_error, outcome_from_error, records_outcome, run_case
)


class TestLogCaseError:
    """Test logging utility functions."""

    def test_log_case_error_basic(self, caplog):
        with caplog.at_level(logging.ERROR):
            log_case_error("Ellipsoid.GIGS_67030", ValueError("Test error"))

        assert len(caplog.records) == 1
        assert caplog.records[0].levelname == "ERROR"
        assert "Ellipsoid.GIGS_67030" in caplog.records[0].message
        assert "ValueError: Test error" in caplog.records[0].message

    def test_log_case_error_with_context(self, caplog):
        with caplog.at_level(logging.ERROR):
            log_case_error("Ellipsoid.GIGS_67030", ValueError("Test error"), {"code": 67030})

        assert "Context: {'code': 67030}" in caplog.records[0].message


class TestOutcomeFromError:
    """Test exception to outcome mapping."""

    def test_unsupported_by_vendor_is_skip(self):
        error = UnsupportedByVendor("Transformation[61193] not supported.",
                                    SkipReason.UNSUPPORTED_CODE).within("step 2")

        outcome = outcome_from_error("ConcatenatedOperation.GIGS_68094", error)

        assert outcome.outcome == Outcome.SKIP
        assert outcome.reason == SkipReason.UNSUPPORTED_CODE
        assert outcome.path == ("step 2",)
        assert outcome.error_code == ErrorCode.UNSUPPORTED_BY_VENDOR.value

    def test_property_mismatch_is_fail_with_its_tip(self):
        error = PropertyMismatch("GeodeticDatum[6326]", "name", "World Geodetic System 1984", "wgs84",
                                 configuration_tip="isStandardNameSupported")

        outcome = outcome_from_error("GeodeticDatum.EPSG_6326", error,
                                     ConfigKey.STANDARD_ALIAS_SUPPORTED)

        assert outcome.failed
        assert outcome.configuration_tip == "isStandardNameSupported"
        assert outcome.error_code == ErrorCode.PROPERTY_MISMATCH.value
        assert "name mismatch" in outcome.message

    def test_harness_error_without_tip_uses_reporter_tip(self):
        outcome = outcome_from_error("t.a", FixtureError("No fixture"), ConfigKey.STANDARD_NAME_SUPPORTED)

        assert outcome.failed
        assert outcome.configuration_tip == "isStandardNameSupported"
        assert outcome.error_code == ErrorCode.INVALID_FIXTURE.value

    def test_plain_assertion_is_property_mismatch(self):
        outcome = outcome_from_error("t.a", AssertionError())

        assert outcome.failed
        assert outcome.message == "Assertion failed"
        assert outcome.error_code == ErrorCode.PROPERTY_MISMATCH.value

    def test_unexpected_exception_is_logged(self, caplog):
        with caplog.at_level(logging.ERROR):
            outcome = outcome_from_error("t.a", KeyError("cs_code"))

        assert outcome.failed
        assert outcome.message == "KeyError: 'cs_code'"
        assert outcome.error_code == ErrorCode.UNEXPECTED_EXCEPTION.value
        assert len(caplog.records) == 1


class TestRecordsOutcome:
    """Test the outcome recording decorator."""

    def test_normal_return_is_pass(self, reporter):
        @records_outcome(reporter)
        def test_body():
            pass

        outcome = test_body()

        assert outcome.passed
        assert outcome.test_id == "test_body"
        assert reporter.outcomes == [outcome]

    def test_failure_uses_reporter_tip(self, reporter):
        @records_outcome(reporter, "GeodeticDatum.EPSG_6326")
        def test_body():
            with reporter.tip(ConfigKey.STANDARD_ALIAS_SUPPORTED):
                assert False, "aliases differ"

        outcome = test_body()

        assert outcome.failed
        assert outcome.configuration_tip == "isStandardAliasSupported"
        assert reporter.configuration_tip is None

    def test_configuration_conflict_propagates(self, reporter):
        @records_outcome(reporter)
        def test_body():
            raise ConfigurationConflict(ConfigKey.CRS_FACTORY, None, None)

        with pytest.raises(ConfigurationConflict):
            test_body()

        assert reporter.outcomes == []


class TestRunCase:
    """Test running a case end to end."""

    def make_case(self, verify_assertions=True):
        case = Mock(test_id="Ellipsoid.GIGS_67030", verify_assertions=verify_assertions)
        return case

    def test_run_case_configures_builds_and_verifies(self, reporter):
        case = self.make_case()
        build, verifier = Mock(), Mock()
        config = HarnessConfig()

        outcome = run_case(case, build, verifier, reporter, config)

        assert outcome.passed
        case.configure.assert_called_once_with(config)
        build.assert_called_once_with(case)
        case.entity.assert_called_once()
        case.verify.assert_called_once_with(verifier)

    def test_run_case_without_assertions(self, reporter):
        case = self.make_case(verify_assertions=False)

        outcome = run_case(case, Mock(), Mock(), reporter, HarnessConfig())

        assert outcome.passed
        case.verify.assert_not_called()

    def test_run_case_uses_loaded_config(self, reporter):
        config = load_config_from_dict({'alias_policy': 'exact'})
        case = self.make_case()

        run_case(case, Mock(), Mock(), reporter)

        case.configure.assert_called_once_with(config)

    def test_run_case_skip(self, reporter):
        case = self.make_case()
        case.entity.side_effect = UnsupportedByVendor("No factory available for Ellipsoid.",
                                                      SkipReason.ABSENT_COLLABORATOR)

        outcome = run_case(case, Mock(), Mock(), reporter, HarnessConfig())

        assert outcome.skipped
        assert outcome.reason == SkipReason.ABSENT_COLLABORATOR
        assert reporter.summary()['skips'] == {'absent_collaborator': 1}
