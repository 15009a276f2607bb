"""Error taxonomy & redaction.

Public API:
- classify_error(exc) -> ErrorInfo
- redact(text) -> str

Failures talking to Linear are never retried by issuegraph; classification
only exists so the CLI can print a useful, credential-free message before
exiting.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .config import ConfigError

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"lin_api_[A-Za-z0-9]{16,}"),  # Linear personal API keys
    re.compile(r"lin_oauth_[A-Za-z0-9]{16,}"),  # Linear OAuth tokens
    re.compile(r"(?i)(authorization['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace credential-looking substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - configuration problems (missing API key, bad config file) -> 'config'
    - HTTP 401/403 or authentication wording -> 'linear.auth'
    - HTTP 429 or rate limit wording -> 'linear.rate_limit', transient
    - network-y keywords -> 'network', transient
    - fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    status = getattr(exc, "status", None)
    name = exc.__class__.__name__

    if isinstance(exc, ConfigError):
        return ErrorInfo("config", redact(msg), name)
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN) or "authentication" in low:
        return ErrorInfo("linear.auth", redact(msg), name, details={"status": status})
    if status == HTTP_TOO_MANY_REQUESTS or "ratelimited" in low or "rate limit" in low:
        return ErrorInfo(
            "linear.rate_limit", redact(msg), name, transient=True, details={"status": status}
        )
    if any(k in low for k in ("timeout", "timed out", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name, transient=True)
    return ErrorInfo("generic", redact(msg), name)


__all__ = ["ErrorInfo", "classify_error", "redact"]
