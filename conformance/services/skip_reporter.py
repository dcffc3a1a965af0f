"""
Skip/Unsupported Reporter

Centralizes the policy for cases the implementation under test cannot
exercise: absent collaborators, codes the vendor does not recognize, and
capabilities the vendor declared unsupported. All of them become SKIP
outcomes rather than failures. Also records the outcome of every test
method for the end-of-run summary.
"""

from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from conformance.config.capabilities import ConfigKey
from conformance.core.errors import UnsupportedByVendor
from conformance.core.outcomes import Outcome, SkipReason, TestOutcome
from conformance.services.base_service import BaseService


def format_unsupported(kind: str, code: Any) -> str:
    """Format the message for a code the vendor does not support, e.g. ``Ellipsoid[7001] not supported.``"""
    if isinstance(code, (int, float)) and not isinstance(code, bool):
        return f"{kind}[{code}] not supported."
    return f"{kind}[\"{code}\"] not supported."


class SkipReporter(BaseService):
    """Service converting capability gaps into SKIP outcomes and collecting results."""

    def _initialize(self) -> None:
        self._outcomes: List[TestOutcome] = []
        self._unsupported_codes: Dict[str, List[Any]] = defaultdict(list)
        self.configuration_tip: Optional[ConfigKey] = None

    def assume_collaborator(self, collaborator: Any, kind: str) -> None:
        """
        Ensure a collaborator is present before any call is attempted.

        Args:
            collaborator: Factory reference, possibly None
            kind: Kind of entity the collaborator would create

        Raises:
            UnsupportedByVendor: If the collaborator is absent
        """
        if collaborator is None:
            self.log_debug(f"No factory available for {kind}", kind=kind)
            raise UnsupportedByVendor(
                f"No factory available for {kind}.",
                SkipReason.ABSENT_COLLABORATOR,
                kind=kind,
            )

    def unsupported_code(self, kind: str, code: Any, cause: Optional[BaseException] = None) -> None:
        """
        Record a code the factory did not recognize and abort the test method.

        Raises:
            UnsupportedByVendor: Always
        """
        message = format_unsupported(kind, code)
        self._unsupported_codes[kind].append(code)
        self.log_info(message, kind=kind, code=str(code))
        raise UnsupportedByVendor(
            message,
            SkipReason.UNSUPPORTED_CODE,
            kind=kind,
            entity_code=code,
            details={"cause": str(cause)} if cause is not None else None,
        ) from cause

    def assume_capability(self, snapshot: Any, key: ConfigKey, kind: str, code: Any = None) -> None:
        """
        Skip when a capability required by the test is disabled in the snapshot.

        Raises:
            UnsupportedByVendor: If the capability is disabled
        """
        if not snapshot.is_enabled(key):
            raise UnsupportedByVendor(
                f"{kind}[{code}] requires {key.value}, which is disabled.",
                SkipReason.DISABLED_CAPABILITY,
                kind=kind,
                entity_code=code,
            )

    @contextmanager
    def tip(self, key: ConfigKey) -> Iterator[ConfigKey]:
        """
        Record the capability flag in effect while a check runs.

        The previous tip is restored when the check succeeds; on failure
        the tip is left in place so that the report can name it.
        """
        previous = self.configuration_tip
        self.configuration_tip = key
        yield key
        self.configuration_tip = previous

    def record(self, outcome: TestOutcome) -> TestOutcome:
        """Record the outcome of one test method."""
        self._outcomes.append(outcome)
        self.configuration_tip = None
        if outcome.failed:
            self.log_info(f"FAIL {outcome.test_id}: {outcome.label}", test_id=outcome.test_id)
        else:
            self.log_debug(f"{outcome.outcome.name} {outcome.test_id}", test_id=outcome.test_id)
        return outcome

    @property
    def outcomes(self) -> List[TestOutcome]:
        return list(self._outcomes)

    @property
    def unsupported_codes(self) -> Dict[str, List[Any]]:
        return {kind: list(codes) for kind, codes in self._unsupported_codes.items()}

    def summary(self) -> Dict[str, Any]:
        """
        Summarize the recorded outcomes.

        Returns:
            Dictionary with counts per outcome, skips grouped by reason,
            unsupported codes per entity kind, and labelled failures
        """
        counts = {outcome.value: 0 for outcome in Outcome}
        skips: Dict[str, int] = defaultdict(int)
        failures = []
        for result in self._outcomes:
            counts[result.outcome.value] += 1
            if result.skipped and result.reason is not None:
                skips[result.reason.value] += 1
            elif result.failed:
                failures.append({
                    'test_id': result.test_id,
                    'label': result.label,
                    'configuration_tip': result.configuration_tip,
                })
        return {
            'total': len(self._outcomes),
            'counts': counts,
            'skips': dict(skips),
            'unsupported_codes': self.unsupported_codes,
            'failures': failures,
        }

    def reset(self) -> None:
        self._outcomes.clear()
        self._unsupported_codes.clear()
        self.configuration_tip = None
