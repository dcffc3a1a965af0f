"""
Services package for the conformance harness

Contains the services building, composing and verifying test entities.
"""

from .configuration_snapshot import ConfigurationSnapshot
from .object_builder import ObjectBuilder
from .nested_test_composer import NestedTestComposer
from .verification_service import Verifier
from .skip_reporter import SkipReporter
from .structural_validator import StructuralValidator
from .fixture_loader import FixtureLoader

__all__ = [
    'ConfigurationSnapshot',
    'ObjectBuilder',
    'NestedTestComposer',
    'Verifier',
    'SkipReporter',
    'StructuralValidator',
    'FixtureLoader'
]
