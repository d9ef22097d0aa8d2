"""Core primitives.

Responsibility: Provides foundational pieces (logging, exception hierarchy,
circuit breaker, numeric helpers) shared by every NeuroFlex module.
"""

from .circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from .exceptions import ConfigError, NarrationError, NeuroflexError
from .logging import JsonFormatter, configure_logging
from .numeric import clamp

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "ConfigError",
    "NarrationError",
    "NeuroflexError",
    "JsonFormatter",
    "configure_logging",
    "clamp",
]
