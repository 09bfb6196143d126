"""Utility functions and helpers.

This module provides various utilities for the cricket bot:
- security: Webhook signature verification, secret redaction
- async_helpers: Exception hierarchy, detached task tracking
- logging: Structured logging with secret sanitization
- health: Health check utilities
"""

from cricket_bot.utils.async_helpers import (
    BotError,
    DetachedTasks,
    LookupMiss,
    RemoteFetchError,
    SendError,
    SignatureError,
    VerificationError,
)
from cricket_bot.utils.health import (
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from cricket_bot.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    install_redactor,
)
from cricket_bot.utils.security import (
    RedactionError,
    SecretRedactor,
    compute_signature,
    verify_signature,
)

__all__ = [
    # Errors
    "BotError",
    "DetachedTasks",
    # Health
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    # Logging
    "LogFormat",
    "LogLevel",
    "LookupMiss",
    # Security
    "RedactionError",
    "RemoteFetchError",
    "SecretRedactor",
    "SendError",
    "SignatureError",
    "VerificationError",
    "bind_context",
    "clear_context",
    "compute_signature",
    "configure_logging",
    "install_redactor",
    "verify_signature",
]
