"""
Outcome Handling Utilities

Converts the exceptions raised while building and verifying a case into
PASS/SKIP/FAIL outcomes, with consistent logging.
"""

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

from config_factory import ConfigError, HarnessConfig, get_config
from conformance.core.errors import (
    ConfigurationConflict, ErrorCode, HarnessError, UnsupportedByVendor
)
from conformance.core.outcomes import Outcome, TestOutcome

logger = logging.getLogger(__name__)


def log_case_error(test_id: str, error: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an unexpected error with consistent formatting.

    Args:
        test_id: Test where the error occurred
        error: Exception that occurred
        context: Optional context information
    """
    context_str = f" Context: {context}" if context else ""
    logger.error(f"Error in {test_id}: {type(error).__name__}: {error}{context_str}", exc_info=error)


def outcome_from_error(test_id: str, error: Exception, configuration_tip: Any = None) -> TestOutcome:
    """
    Map an exception raised by a test method to its outcome.

    Args:
        test_id: Test identifier
        error: Exception raised by the test method
        configuration_tip: Capability key in effect when the error was raised

    Returns:
        SKIP for vendor capability gaps, FAIL for anything else
    """
    tip = getattr(configuration_tip, 'value', configuration_tip)

    if isinstance(error, UnsupportedByVendor):
        return TestOutcome(test_id, Outcome.SKIP, error.message, reason=error.reason,
                           path=error.path, error_code=error.code.value)

    if isinstance(error, HarnessError):
        tip = getattr(error, 'configuration_tip', None) or tip
        return TestOutcome(test_id, Outcome.FAIL, error.message, path=error.path,
                           configuration_tip=tip, error_code=error.code.value)

    if isinstance(error, AssertionError):
        return TestOutcome(test_id, Outcome.FAIL, str(error) or "Assertion failed",
                           configuration_tip=tip, error_code=ErrorCode.PROPERTY_MISMATCH.value)

    log_case_error(test_id, error)
    return TestOutcome(test_id, Outcome.FAIL, f"{type(error).__name__}: {error}",
                       configuration_tip=tip, error_code=ErrorCode.UNEXPECTED_EXCEPTION.value)


def records_outcome(reporter: Any, test_id: Optional[str] = None):
    """
    Decorator turning a test body into a function returning its outcome.

    The decorated function passes when it returns normally. Configuration
    conflicts are test-authoring bugs and propagate unchanged.

    Args:
        reporter: SkipReporter recording the outcome
        test_id: Test identifier; the function name when omitted

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable[..., TestOutcome]:
        name = test_id or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs) -> TestOutcome:
            try:
                func(*args, **kwargs)
            except ConfigurationConflict:
                raise
            except Exception as e:
                outcome = outcome_from_error(name, e, reporter.configuration_tip)
            else:
                outcome = TestOutcome(name, Outcome.PASS)
            return reporter.record(outcome)

        return wrapper
    return decorator


def run_case(case: Any, build: Callable[[Any], None], verifier: Any, reporter: Any,
             config: Optional[HarnessConfig] = None) -> TestOutcome:
    """
    Configure, build and verify one case.

    Args:
        case: Unconfigured ConformanceCase
        build: Build strategy populating the case's fixture
        verifier: Verifier checking the built entity
        reporter: SkipReporter recording the outcome
        config: Harness configuration; the globally loaded one when omitted

    Returns:
        The recorded outcome
    """
    if config is None:
        try:
            config = get_config()
        except ConfigError:
            config = HarnessConfig()

    @records_outcome(reporter, case.test_id)
    def execute() -> None:
        case.configure(config)
        build(case)
        case.entity()
        if case.verify_assertions:
            case.verify(verifier)

    return execute()
