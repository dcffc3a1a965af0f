"""
Global pytest configuration and fixtures.
Provides harness services through the dependency injection container.
"""

from collections import Counter

import pytest

from config_factory import HarnessConfig, reset_config
from container import configure_container, get_container, reset_container

# Outcomes recorded by harness reporters across the session
_recorded_outcomes = []


@pytest.fixture(scope="function", autouse=True)
def reset_global_state():
    """Reset the global configuration and container before each test to ensure clean state."""
    reset_config()
    reset_container()

    yield

    container = get_container()
    if container.has_service('SkipReporter'):
        _recorded_outcomes.extend(container.get('SkipReporter').outcomes)
    reset_container()


@pytest.fixture
def harness_config():
    """Default harness configuration: every capability enabled."""
    return HarnessConfig()


@pytest.fixture
def container(harness_config):
    """Create service container with the default configuration and no collaborators."""
    return configure_container(config=harness_config)


@pytest.fixture
def reporter(container):
    """Provide SkipReporter service through dependency injection."""
    return container.get('SkipReporter')


@pytest.fixture
def verifier(container):
    """Provide Verifier service through dependency injection."""
    return container.get('Verifier')


@pytest.fixture
def composer(container):
    """Provide NestedTestComposer service through dependency injection."""
    return container.get('NestedTestComposer')


@pytest.fixture
def units(container):
    """Provide the Units registry through dependency injection."""
    return container.get('Units')


def pytest_terminal_summary(terminalreporter):
    """Summarize the harness outcomes recorded during the session."""
    if not _recorded_outcomes:
        return
    counts = Counter(outcome.outcome.value for outcome in _recorded_outcomes)
    terminalreporter.write_sep("=", "conformance harness outcomes")
    terminalreporter.write_line(
        ", ".join(f"{counts.get(name, 0)} {name}" for name in ('pass', 'skip', 'fail'))
    )
