"""
Nested Test Composer

Lets one test case reuse another case's build strategy to produce a
component of its own entity, e.g. a concatenated operation built from two
transformation cases labelled "step 1" and "step 2".
"""

from typing import Any, Callable, Optional

from config_factory import HarnessConfig
from conformance.core.errors import HarnessError
from conformance.services.base_service import BaseService


class NestedTestComposer(BaseService):
    """
    Service composing child test cases into a parent case.

    Args:
        reporter: SkipReporter shared by parent and child cases
        config: Harness configuration
    """

    def __init__(self, reporter: Any, config: Optional[HarnessConfig] = None):
        self._reporter = reporter
        super().__init__(config)

    def _initialize(self) -> None:
        self._compositions = 0

    def compose(self, parent: Any, child_factory: Callable[..., Any],
                build: Callable[[Any], None], label: str,
                skip_identification: bool = False) -> Any:
        """
        Build a component of the parent's entity through a child case.

        The child is created with its own assertions disabled, receives a
        copy of the parent's configuration snapshot, is populated by the
        build strategy and built immediately.

        Args:
            parent: Configured parent ConformanceCase
            child_factory: Case factory ``(test_id, collaborators, reporter, composer)``
            build: Build strategy populating the child's fixture
            label: Label attributing failures to this component (e.g. "step 2")
            skip_identification: Skip the child's identification checks

        Returns:
            The entity built by the child

        Raises:
            HarnessError: Any failure of the child, labelled with ``label``
        """
        if parent.snapshot is None:
            raise HarnessError(f"{parent.test_id} must be configured before composing \"{label}\"")

        child = child_factory(f"{parent.test_id}/{label}", parent.collaborators,
                              self._reporter, self)
        child.verify_assertions = False
        child.as_dependency = True
        child.skip_identification = skip_identification
        child.configure(self.harness_config, parent=parent.snapshot)

        try:
            build(child)
            entity = child.entity()
        except HarnessError as e:
            raise e.within(label)

        parent.attach(label, child)
        self._compositions += 1
        self.log_debug(f"Composed {label} of {parent.test_id}", test_id=parent.test_id)
        return entity

    @property
    def compositions(self) -> int:
        return self._compositions
