"""Security utilities for webhook signatures and secret redaction.

This module implements:
- Verification of the ``X-Hub-Signature`` header sent with every webhook
  delivery (HMAC-SHA1 of the raw body keyed with the app secret)
- Detection and redaction of platform credentials before they reach logs
"""

from __future__ import annotations

import hashlib
import hmac
import re
from typing import TYPE_CHECKING

import structlog

from .async_helpers import SignatureError

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()

SIGNATURE_HEADER = "x-hub-signature"

# Only sha1 is emitted for the X-Hub-Signature header
_DIGESTS = {"sha1": hashlib.sha1}


class RedactionError(Exception):
    """Raised when secret redaction fails."""


class SecretRedactor:
    """Detects and redacts secrets from text.

    If any regex pattern fails to compile or execute, an exception is raised
    rather than letting the unredacted text through.

    Usage:
        redactor = SecretRedactor(extra_secrets=[config.messenger.app_secret])
        safe_text = redactor.redact(potentially_sensitive_text)
    """

    DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
        # Generic key=value secrets
        (
            r"(?i)(app[_-]?secret|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
            "Generic secret",
        ),
        # Graph API access_token query parameter
        (r"(?i)access_token=[^&\s\"']+", "Access token query parameter"),
        # Facebook page / user access tokens
        (r"EAA[a-zA-Z0-9]{20,}", "Facebook access token"),
        # Webhook signature header values
        (r"sha1=[a-f0-9]{40}", "Webhook signature"),
    )

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
        extra_secrets: Sequence[str] | None = None,
    ) -> None:
        """Initialize the SecretRedactor.

        Args:
            placeholder: String to replace detected secrets with.
            custom_patterns: Additional (pattern, name) tuples to detect.
            extra_secrets: Literal secret values (from configuration) to redact.

        Raises:
            RedactionError: If any pattern fails to compile.
        """
        self.placeholder = placeholder
        self._pattern_names: dict[re.Pattern[str], str] = {}

        all_patterns = list(self.DEFAULT_PATTERNS)
        if custom_patterns:
            all_patterns.extend(custom_patterns)
        for secret in extra_secrets or ():
            if secret:
                all_patterns.append((re.escape(secret), "Configured secret"))

        try:
            for pattern_str, name in all_patterns:
                compiled = re.compile(pattern_str)
                self._pattern_names[compiled] = name
        except re.error as e:
            msg = f"Failed to compile secret pattern '{pattern_str}': {e}"
            log.error("pattern_compilation_failed", pattern=pattern_str, error=str(e))
            raise RedactionError(msg) from e

    @property
    def patterns(self) -> list[re.Pattern[str]]:
        """Return the list of compiled patterns."""
        return list(self._pattern_names.keys())

    def redact(self, text: str) -> str:
        """Redact all secrets from the given text.

        Args:
            text: The text to scan and redact secrets from.

        Returns:
            The text with all detected secrets replaced with placeholder.

        Raises:
            RedactionError: If redaction fails for any reason.
        """
        if not text:
            return text

        try:
            result = text
            for pattern in self._pattern_names:
                result = pattern.sub(self.placeholder, result)
            return result
        except Exception as e:
            msg = f"Redaction failed: {e}"
            raise RedactionError(msg) from e


def compute_signature(app_secret: str, body: bytes, method: str = "sha1") -> str:
    """Compute the hex HMAC digest the platform sends for a body.

    Args:
        app_secret: Messenger app secret.
        body: Raw request body bytes.
        method: Digest name (only ``sha1`` is supported).

    Returns:
        Hex digest string.
    """
    digest = _DIGESTS[method]
    return hmac.new(app_secret.encode("utf-8"), body, digest).hexdigest()


def verify_signature(app_secret: str, body: bytes, header: str | None) -> None:
    """Validate an ``X-Hub-Signature`` header against the raw body.

    Args:
        app_secret: Messenger app secret.
        body: Raw request body bytes.
        header: Header value in ``sha1=<hex>`` form, or None if absent.

    Raises:
        SignatureError: If the header is missing, malformed or does not match.
    """
    if not header:
        raise SignatureError("Missing X-Hub-Signature header")

    method, sep, signature_hash = header.partition("=")
    if not sep or method not in _DIGESTS or not signature_hash:
        raise SignatureError(f"Malformed X-Hub-Signature header: {method!r}")

    expected = compute_signature(app_secret, body, method)
    if not hmac.compare_digest(expected, signature_hash.lower()):
        raise SignatureError("Couldn't validate the request signature")


def sanitize_for_logging(text: str) -> str:
    """Remove ANSI escape codes and control characters from user text.

    Args:
        text: The text to sanitize.

    Returns:
        The text with ANSI codes and control characters removed.
    """
    if not text:
        return text

    text = re.sub(r"\x1b\[[0-9;]*m", "", text)
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
