"""
Base Service - Common patterns for harness services

Provides:
- Consistent logging setup
- Harness configuration access
- Common error logging patterns
- Standard initialization patterns
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from config_factory import HarnessConfig, get_config


class BaseService(ABC):
    """
    Base class for harness services providing common functionality.

    Features:
    - Automatic logger setup with service-specific namespace
    - Configuration access with fallback to defaults
    - Consistent initialization patterns
    """

    def __init__(self, config: Optional[HarnessConfig] = None,
                 service_config: Optional[Dict[str, Any]] = None):
        """
        Initialize base service.

        Args:
            config: Harness configuration; the globally loaded one when omitted
            service_config: Optional service-specific settings
        """
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        if config is None:
            try:
                config = get_config()
            except Exception:
                # Config not loaded yet - use defaults
                config = HarnessConfig()
        self._harness_config: HarnessConfig = config
        self._service_config = service_config or {}

        self._initialized = False
        self._initialize()
        self._initialized = True

        self._logger.debug(f"{self.__class__.__name__} initialized")

    @abstractmethod
    def _initialize(self) -> None:
        """
        Initialize service-specific components.
        Subclasses must implement this method.
        """
        pass

    @property
    def harness_config(self) -> HarnessConfig:
        return self._harness_config

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value with fallback hierarchy.

        Priority:
        1. Service-specific config
        2. Harness config
        3. Default value
        """
        if key in self._service_config:
            return self._service_config[key]

        if hasattr(self._harness_config, key):
            return getattr(self._harness_config, key)

        return default

    def log_error(self, message: str, exception: Optional[Exception] = None, **context) -> None:
        """
        Log error with consistent format and context.

        Args:
            message: Error message
            exception: Optional exception to log
            **context: Additional context for logging
        """
        log_context = {
            'service': self.__class__.__name__,
            **context
        }

        if exception:
            self._logger.error(f"{message}: {exception}", extra=log_context, exc_info=exception)
        else:
            self._logger.error(message, extra=log_context)

    def log_info(self, message: str, **context) -> None:
        log_context = {
            'service': self.__class__.__name__,
            **context
        }
        self._logger.info(message, extra=log_context)

    def log_debug(self, message: str, **context) -> None:
        log_context = {
            'service': self.__class__.__name__,
            **context
        }
        self._logger.debug(message, extra=log_context)

    @property
    def is_initialized(self) -> bool:
        """Check if service is initialized"""
        return self._initialized

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(initialized={self._initialized})"
