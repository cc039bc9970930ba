"""Shared sanitisation helpers for transport log output."""

from __future__ import annotations

import re

_BEARER_RE = re.compile(r"Bearer\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
_TOKEN_QUERY_RE = re.compile(r"(?i)(token|refresh_token|access_token)=([^&\s]+)")
_OAUTH_PARAM_RE = re.compile(
    r'(?i)(oauth_(?:signature|token|consumer_key|nonce))="?([^",&\s]+)"?'
)
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


def redact_text(value: str | None) -> str:
    """Return ``value`` with bearer tokens, OAuth parameters and emails removed."""

    if not value:
        return ""
    text = str(value)
    if not text:
        return ""
    redacted = _BEARER_RE.sub("Bearer ***", text)
    redacted = _TOKEN_QUERY_RE.sub(lambda match: f"{match.group(1)}=***", redacted)
    redacted = _OAUTH_PARAM_RE.sub(lambda match: f"{match.group(1)}=***", redacted)
    redacted = _EMAIL_RE.sub("***@***", redacted)
    return redacted.replace("authorization", "auth").replace("Authorization", "Auth")


def mask_host(value: str | None) -> str:
    """Return a masked host name suitable for log output."""

    if value is None:
        return ""
    trimmed = str(value).strip()
    if not trimmed:
        return ""
    if len(trimmed) <= 4:
        return "***"
    return f"{trimmed[:3]}...{trimmed[-2:]}"
