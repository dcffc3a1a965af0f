"""
Configuration Factory - Centralized configuration management for the harness
Provides type-safe configuration with validation, environment variables and
YAML capability files.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from dataclasses import dataclass, field

import yaml

from conformance.config.capabilities import (
    ANGULAR_TOLERANCE, CAPABILITY_KEYS, TOLERANCE, ConfigKey
)

ALIAS_POLICIES = ('superset', 'exact')
LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


def _default_capabilities() -> Dict[str, bool]:
    return {key.value: True for key in CAPABILITY_KEYS}


@dataclass
class HarnessConfig:
    """Harness configuration with type safety and validation"""

    # Optional behaviours claimed by the implementation under test
    capabilities: Dict[str, bool] = field(default_factory=_default_capabilities)

    # Test-by-test customization: "Case.method" -> {capability: bool}
    test_overrides: Dict[str, Dict[str, bool]] = field(default_factory=dict)

    # Verification policy
    alias_policy: str = 'superset'
    authority: str = 'EPSG'
    tolerance: float = TOLERANCE
    angular_tolerance: float = ANGULAR_TOLERANCE

    # File paths
    fixtures_file: Optional[str] = None

    log_level: str = 'info'

    def __post_init__(self):
        """Validate configuration after initialization"""
        merged = _default_capabilities()
        for name, value in self.capabilities.items():
            self._check_capability(name, value)
            merged[ConfigKey.from_name(name).value] = value
        self.capabilities = merged
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.alias_policy not in ALIAS_POLICIES:
            raise ConfigError(f"Invalid alias_policy: {self.alias_policy}")

        if self.tolerance <= 0:
            raise ConfigError(f"Invalid tolerance: {self.tolerance}")

        if self.angular_tolerance <= 0:
            raise ConfigError(f"Invalid angular_tolerance: {self.angular_tolerance}")

        if not self.authority or not self.authority.strip():
            raise ConfigError("Authority name cannot be empty")

        if str(self.log_level).lower() not in LOG_LEVELS:
            raise ConfigError(f"Invalid log_level: {self.log_level}")

        for name, value in self.capabilities.items():
            self._check_capability(name, value)

        for test_id, options in self.test_overrides.items():
            if '.' not in test_id:
                raise ConfigError(f"Invalid test identifier: {test_id}")
            for name, value in options.items():
                self._check_capability(name, value)

    @staticmethod
    def _check_capability(name: str, value: Any) -> None:
        try:
            key = ConfigKey.from_name(str(name))
        except KeyError:
            raise ConfigError(f"Unknown configuration key: {name}")
        if not key.is_capability:
            raise ConfigError(f"The \"{name}\" option is not a capability flag")
        if not isinstance(value, bool):
            raise ConfigError(f"The \"{name}\" option is not a boolean: {value!r}")

    def capabilities_for(self, test_id: Optional[str] = None) -> Dict[ConfigKey, bool]:
        """
        Get the effective capability flags for one test.

        Args:
            test_id: Test identifier ("Case.method"), or None for global flags

        Returns:
            Mapping of every capability key to its enabled status
        """
        flags = {ConfigKey.from_name(name): value for name, value in self.capabilities.items()}
        if test_id and test_id in self.test_overrides:
            for name, value in self.test_overrides[test_id].items():
                flags[ConfigKey.from_name(name)] = value
        return {key: flags.get(key, True) for key in CAPABILITY_KEYS}


class ConfigurationFactory:
    """
    Factory for creating and managing harness configuration.

    Features:
    - Environment variable loading with type conversion
    - YAML capability files with global and per-test options
    - Configuration validation
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[HarnessConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = 'GIGS_') -> HarnessConfig:
        """
        Load configuration from environment variables.

        A YAML capability file named by ``<prefix>CONFIG`` is read first;
        individual variables then take precedence over it.

        Args:
            env_prefix: Prefix for environment variables

        Returns:
            Configured HarnessConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}"
            value = os.environ.get(env_key)

            if value is None:
                return default

            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == float:
                try:
                    return float(value)
                except ValueError:
                    self._logger.warning(f"Invalid float value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        config_file = get_env_var('CONFIG')
        if config_file:
            base = self._read_yaml(config_file)
        else:
            base = {}

        capabilities = dict(base.get('capabilities', {}))
        for key in CAPABILITY_KEYS:
            value = get_env_var(key.name, None, bool)
            if value is not None:
                capabilities[key.value] = value

        config = HarnessConfig(
            capabilities=capabilities,
            test_overrides=base.get('test_overrides', {}),
            alias_policy=get_env_var('ALIAS_POLICY', base.get('alias_policy', 'superset')),
            authority=get_env_var('AUTHORITY', base.get('authority', 'EPSG')),
            tolerance=get_env_var('TOLERANCE', base.get('tolerance', TOLERANCE), float),
            angular_tolerance=get_env_var('ANGULAR_TOLERANCE', base.get('angular_tolerance', ANGULAR_TOLERANCE), float),
            fixtures_file=get_env_var('FIXTURES_FILE', base.get('fixtures_file')),
            log_level=get_env_var('LOG_LEVEL', base.get('log_level', 'info')),
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)
        config._validate()

        self._config = config
        self._logger.info("Configuration loaded from environment")
        return config

    def load_from_yaml(self, path: str) -> HarnessConfig:
        """
        Load configuration from a YAML capability file.

        Args:
            path: Path to the YAML file

        Returns:
            Configured HarnessConfig instance
        """
        self._config = HarnessConfig(**self._read_yaml(path))
        self._logger.info(f"Configuration loaded from {path}")
        return self._config

    def _read_yaml(self, path: str) -> Dict[str, Any]:
        """
        Parse a capability file into HarnessConfig keyword arguments.

        Unknown options, non-boolean values and malformed test identifiers
        are logged and ignored, so a faulty file enables more tests rather
        than stopping the run.
        """
        try:
            with open(path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning(f"Can not load \"{path}\": {e}")
            return {}

        if not isinstance(data, dict):
            self._logger.warning(f"Ignoring \"{path}\": root must be a mapping")
            return {}

        kwargs: Dict[str, Any] = {}
        for setting in ('alias_policy', 'authority', 'tolerance', 'angular_tolerance',
                        'fixtures_file', 'log_level'):
            if setting in (data.get('settings') or {}):
                kwargs[setting] = data['settings'][setting]

        kwargs['capabilities'] = self._parse_options(data.get('global') or {}, '*')

        overrides = {}
        for test_id, options in (data.get('tests') or {}).items():
            test_id = str(test_id).strip()
            case, _, method = test_id.rpartition('.')
            if not case or not method:
                self._logger.warning(f"Invalid syntax for test identifier: {test_id}")
                continue
            parsed = self._parse_options(options or {}, test_id)
            if parsed:
                overrides[test_id] = parsed
        kwargs['test_overrides'] = overrides
        return kwargs

    def _parse_options(self, options: Dict[str, Any], scope: str) -> Dict[str, bool]:
        parsed = {}
        for name, value in options.items():
            try:
                key = ConfigKey.from_name(str(name))
            except KeyError:
                self._logger.warning(f"Unknown configuration key: {name} ({scope})")
                continue
            if not key.is_capability:
                self._logger.warning(f"The \"{name}\" option is not a boolean ({scope})")
                continue
            if not isinstance(value, bool):
                self._logger.warning(f"The \"{name}\" option is not a boolean: {value!r} ({scope})")
                continue
            parsed[key.value] = value
        return parsed

    def load_from_dict(self, config_dict: Dict[str, Any]) -> HarnessConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured HarnessConfig instance
        """
        self._config = HarnessConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        # Update current config if loaded
        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()  # Re-validate after change

        return self

    def get_config(self) -> HarnessConfig:
        """
        Get the current configuration.

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, dict):
                value = {k: dict(v) if isinstance(v, dict) else v for k, v in value.items()}
            config_dict[field_info.name] = value

        return config_dict


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> HarnessConfig:
    """Get the global harness configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = 'GIGS_') -> HarnessConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> HarnessConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
