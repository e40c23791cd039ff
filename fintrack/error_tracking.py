"""
Error tracking and monitoring module.
Reports analytics failures to Sentry when SENTRY_DSN is configured and
always keeps a bounded local log of recent errors.
"""

import logging
import os
import traceback
from functools import wraps
from typing import Optional, Dict, Callable

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from fintrack.constants import APP_VERSION
from fintrack.exceptions import ConfigurationError, FeatureDisabledError
from fintrack.logger import logger

MAX_LOCAL_ERRORS = 100


class ErrorTracker:
    """Error tracking with Sentry integration."""

    _instance = None
    _sentry_initialized = False
    _local_errors = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init_sentry(self, dsn: Optional[str] = None, environment: Optional[str] = None):
        """
        Initialize Sentry if a DSN is available.

        Raises:
            ConfigurationError: if the DSN is malformed
        """
        if self._sentry_initialized:
            return

        dsn = dsn or os.getenv("SENTRY_DSN")
        environment = environment or os.getenv("FINTRACK_ENV", "development")

        if not dsn:
            logger.info("Sentry DSN not configured, using local error tracking")
            return

        sentry_logging = LoggingIntegration(
            level=logging.INFO,
            event_level=logging.ERROR
        )
        try:
            sentry_sdk.init(
                dsn=dsn,
                environment=environment,
                release=f"fintrack@{APP_VERSION}",
                integrations=[sentry_logging],
                traces_sample_rate=0.1,
            )
        except BadDsn as e:
            raise ConfigurationError(f"Invalid SENTRY_DSN: {e}") from e
        ErrorTracker._sentry_initialized = True
        logger.info(f"Sentry initialized for environment: {environment}")

    def capture_exception(self, exception: Exception, context: Optional[Dict] = None):
        """Capture an exception for tracking."""
        error_info = {
            'type': type(exception).__name__,
            'message': str(exception),
            'traceback': traceback.format_exc(),
            'context': context or {}
        }

        if self._sentry_initialized:
            with sentry_sdk.new_scope() as scope:
                for key, value in (context or {}).items():
                    scope.set_extra(key, value)
                sentry_sdk.capture_exception(exception)

        self._local_errors.append(error_info)
        if len(self._local_errors) > MAX_LOCAL_ERRORS:
            self._local_errors.pop(0)

        logger.error(f"Exception captured: {exception}", exc_info=True)

    def get_local_errors(self, limit: int = 50) -> list:
        """Get recent errors stored locally."""
        return self._local_errors[-limit:]

    def clear_local_errors(self):
        """Clear local error storage."""
        self._local_errors.clear()


def get_tracker() -> ErrorTracker:
    """Get singleton error tracker."""
    return ErrorTracker()


def init_error_tracking(dsn: Optional[str] = None, environment: Optional[str] = None):
    """Initialize error tracking."""
    get_tracker().init_sentry(dsn, environment)


def capture_exception(exception: Exception, context: Optional[Dict] = None):
    """Capture an exception."""
    get_tracker().capture_exception(exception, context)


def track_errors(operation: str):
    """
    Decorator that reports exceptions raised by the wrapped function and re-raises them.

    Disabled-feature errors are expected outcomes and are not reported.

    Args:
        operation: Name used in the captured context (e.g. "spending_prediction")
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except FeatureDisabledError:
                raise
            except Exception as e:
                capture_exception(e, {
                    'operation': operation,
                    'function': func.__name__,
                    'args': str(args),
                })
                raise
        return wrapper
    return decorator


__all__ = [
    'ErrorTracker',
    'get_tracker',
    'init_error_tracking',
    'capture_exception',
    'track_errors',
]
