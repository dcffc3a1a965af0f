"""
Service Container - Dependency Injection Container for the conformance harness
Manages service creation, dependencies, and lifecycle.
"""

from typing import Dict, Any, List, Optional, Callable, Union
import inspect
import logging
from enum import Enum

from config_factory import ConfigError, HarnessConfig, get_config, load_config


class ServiceLifecycle(Enum):
    """Service lifecycle management options"""
    SINGLETON = "singleton"  # One instance per container
    TRANSIENT = "transient"  # New instance every time


class ServiceDefinition:
    """Definition of how a service should be created"""

    def __init__(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.lifecycle = lifecycle
        self.config = config or {}


class CircularDependencyError(Exception):
    """Raised when circular dependency is detected"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


class ServiceContainer:
    """
    Dependency Injection Container for managing services and their dependencies.

    Features:
    - Dependency resolution by service name
    - Circular dependency detection
    - Singleton and transient lifecycle management
    - External dependencies (harness configuration, vendor collaborators)
    """

    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: List[str] = []  # Services being created, in order (circular detection)

    def register(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ) -> 'ServiceContainer':
        """
        Register a service with the container.

        Args:
            name: Service name for retrieval
            factory: Class or function to create the service
            dependencies: List of service names this service depends on
            lifecycle: How the service instance should be managed
            config: Keyword arguments passed to function factories

        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")

        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._services[name] = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies or [],
            lifecycle=lifecycle,
            config=config
        )
        return self

    def configure_services(self) -> 'ServiceContainer':
        """
        Register all harness services with their dependencies.
        The 'HarnessConfig' and 'Collaborators' external dependencies are
        expected to be set by the caller.
        """
        from conformance.core.units import Units
        from conformance.services.skip_reporter import SkipReporter
        from conformance.services.structural_validator import StructuralValidator
        from conformance.services.verification_service import Verifier
        from conformance.services.nested_test_composer import NestedTestComposer
        from conformance.services.fixture_loader import FixtureLoader

        # Shared collaborators - constructed once, read-only afterwards
        self.register('Units', Units)
        self.register('StructuralValidator', StructuralValidator, dependencies=['HarnessConfig'])

        # Outcome recording
        self.register('SkipReporter', SkipReporter, dependencies=['HarnessConfig'])

        # Verification and composition
        self.register('Verifier', Verifier,
                      dependencies=['Units', 'StructuralValidator', 'SkipReporter', 'HarnessConfig'])
        self.register('NestedTestComposer', NestedTestComposer,
                      dependencies=['SkipReporter', 'HarnessConfig'])

        # Reference data
        self.register('FixtureLoader', FixtureLoader, dependencies=['Units', 'HarnessConfig'])

        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Set an external dependency that's created outside the container.
        Used for the harness configuration and the vendor collaborators.
        """
        self._instances[name] = instance
        return self

    def get(self, name: str) -> Any:
        """
        Get a service instance, creating it if necessary.

        Args:
            name: Service name to retrieve

        Returns:
            Service instance

        Raises:
            ServiceNotFoundError: If service is not registered
            CircularDependencyError: If circular dependency detected
        """
        # Check for external dependency or singleton instance first
        if name in self._instances:
            return self._instances[name]

        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")

        return self._create_service(name)

    def _create_service(self, name: str) -> Any:
        """
        Create a service instance with dependency injection.
        """
        if name in self._creating:
            cycle = ' -> '.join(self._creating + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")

        self._creating.append(name)

        try:
            service_def = self._services[name]

            dependencies = [self.get(dep_name) for dep_name in service_def.dependencies]

            if inspect.isclass(service_def.factory):
                instance = service_def.factory(*dependencies)
            else:
                instance = service_def.factory(*dependencies, **service_def.config)

            if service_def.lifecycle == ServiceLifecycle.SINGLETON:
                self._instances[name] = instance

            return instance

        finally:
            self._creating.remove(name)

    def has_service(self, name: str) -> bool:
        """Check if a service is registered"""
        return name in self._services

    def get_service_names(self) -> List[str]:
        """Get list of all registered service names"""
        return list(self._services.keys())

    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Validate all service dependencies can be resolved.

        Returns:
            Dictionary mapping service names to lists of missing dependencies
        """
        issues = {}

        for name, service_def in self._services.items():
            missing_deps = [
                dep for dep in service_def.dependencies
                if not self.has_service(dep) and dep not in self._instances
            ]
            if missing_deps:
                issues[name] = missing_deps

        return issues

    def clear(self) -> 'ServiceContainer':
        """Clear all services and instances (useful for testing)"""
        self._services.clear()
        self._instances.clear()
        self._creating.clear()
        return self

    def get_dependency_graph(self) -> Dict[str, List[str]]:
        """Get the dependency graph for visualization/debugging"""
        return {name: service_def.dependencies for name, service_def in self._services.items()}

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


# Global container instance for the harness
_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global harness service container"""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def reset_container() -> None:
    """Discard the global container (for testing)"""
    global _app_container
    _app_container = None


def configure_container(collaborators: Union[Any, Dict[str, Any], None] = None,
                        config: Optional[HarnessConfig] = None) -> ServiceContainer:
    """
    Configure the global service container with the harness services.

    Args:
        collaborators: Vendor collaborators, as a Collaborators value or a
            mapping of collaborator names to factories; absent ones make the
            dependent cases SKIP
        config: Harness configuration; the loaded one, or the environment, when omitted

    Returns:
        Configured service container
    """
    from conformance.cases.base import Collaborators

    if config is None:
        try:
            config = get_config()
        except ConfigError:
            config = load_config()

    if collaborators is None:
        collaborators = Collaborators()
    elif not isinstance(collaborators, Collaborators):
        collaborators = Collaborators.from_mapping(collaborators)

    container = get_container()
    container.clear()  # Clear any existing configuration

    logging.getLogger("conformance").setLevel(config.log_level.upper())

    container.set_external_dependency('HarnessConfig', config)
    container.set_external_dependency('Collaborators', collaborators)

    container.configure_services()

    return container
