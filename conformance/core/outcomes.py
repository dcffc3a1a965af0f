"""
Test Outcome Enumeration

Defines the terminal outcomes of a conformance test method and the record
kept for each of them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Outcome(Enum):
    """Terminal outcome of one test method."""
    PASS = "pass"
    SKIP = "skip"
    FAIL = "fail"


class SkipReason(Enum):
    """Why a test method was skipped instead of evaluated."""
    ABSENT_COLLABORATOR = "absent_collaborator"
    UNSUPPORTED_CODE = "unsupported_code"
    DISABLED_CAPABILITY = "disabled_capability"


@dataclass
class TestOutcome:
    """Outcome of one test method, as reported to the user."""

    __test__ = False  # not a pytest test class

    test_id: str
    outcome: Outcome
    message: str = ""
    reason: Optional[SkipReason] = None
    path: Tuple[str, ...] = field(default_factory=tuple)
    configuration_tip: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def label(self) -> str:
        """Message prefixed by the component that caused it."""
        if not self.path:
            return self.message
        return f"{' / '.join(self.path)}: {self.message}"

    @property
    def passed(self) -> bool:
        return self.outcome == Outcome.PASS

    @property
    def skipped(self) -> bool:
        return self.outcome == Outcome.SKIP

    @property
    def failed(self) -> bool:
        return self.outcome == Outcome.FAIL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            'test_id': self.test_id,
            'outcome': self.outcome.value,
            'message': self.message,
            'reason': self.reason.value if self.reason else None,
            'path': list(self.path),
            'configuration_tip': self.configuration_tip,
            'error_code': self.error_code,
        }

    def raise_for_pytest(self) -> None:
        """Translate this outcome into the matching pytest outcome."""
        import pytest

        if self.outcome == Outcome.SKIP:
            pytest.skip(self.label)
        elif self.outcome == Outcome.FAIL:
            pytest.fail(self.label, pytrace=False)
