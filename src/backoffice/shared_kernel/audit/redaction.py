"""Redaction of sensitive values in audit metadata.

A key is sensitive when it equals a listed name or is an underscore-joined
compound containing one (``password_hash``, ``access_token``,
``client_secret_value``). camelCase keys are split into words first, so
``accessToken`` and ``apiKey`` match too. Sensitive values are replaced
with a fixed mask so that neither their content nor their length leaks.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "********"

DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "pwd",
        "token",
        "secret",
        "api_key",
        "authorization",
        "authorization_header",
    }
)

_DIFF_KEYS = frozenset({"old", "new"})

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def is_sensitive_key(key: str, sensitive_keys: Iterable[str]) -> bool:
    """Check whether a metadata key names a sensitive value.

    Args:
        key: The metadata key (snake, kebab or camel case)
        sensitive_keys: Base names considered sensitive

    Returns:
        True if the key is a sensitive name or a compound containing one
    """
    normalized = _WORD_BOUNDARY.sub("_", key).lower().replace("-", "_")
    padded = f"_{normalized}_"
    return any(f"_{name}_" in padded for name in sensitive_keys)


def _mask(value: Any) -> Any:
    # A {"old", "new"} diff keeps its shape so readers still see what changed.
    if isinstance(value, Mapping) and value and set(value) <= _DIFF_KEYS:
        return {k: REDACTED for k in value}
    return REDACTED


def redact(
    value: Any,
    sensitive_keys: Iterable[str] = DEFAULT_SENSITIVE_KEYS,
) -> Any:
    """Return a copy of ``value`` with every sensitive entry masked.

    Walks nested mappings and lists. Non-container values are returned as is.

    Args:
        value: Metadata to redact
        sensitive_keys: Base names considered sensitive

    Returns:
        A redacted deep copy of the input
    """
    keys = frozenset(sensitive_keys)
    if isinstance(value, Mapping):
        return {
            k: _mask(v) if is_sensitive_key(str(k), keys) else redact(v, keys)
            for k, v in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item, keys) for item in value]
    return value
