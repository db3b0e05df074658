"""Configuration redaction and fingerprinting.

Worker configurations are flat string maps (dotenv entries). Anything whose
key looks like a credential never leaves the config-loading boundary.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

CREDENTIAL_PATTERN = re.compile(r"KEY|SECRET|PASSWORD|TOKEN", re.IGNORECASE)

FINGERPRINT_SEPARATOR = "_"


def is_credential(key: str) -> bool:
    """True if the key name looks like a secret."""
    return CREDENTIAL_PATTERN.search(key) is not None


def is_numeric(value: str | None) -> bool:
    """True if the value parses as a finite number."""
    if value is None or not value.strip():
        return False
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def redact(entries: Mapping[str, str | None]) -> dict[str, str]:
    """Drop credential-like keys; keep everything else as strings."""
    return {
        key: "" if value is None else value
        for key, value in entries.items()
        if not is_credential(key)
    }


def fingerprint(entries: Mapping[str, str | None]) -> str:
    """Order-stable identifier of a configuration's numeric parameters.

    Values of non-credential, numeric entries, ordered by key name. Two
    configurations with the same numeric values produce the same
    fingerprint no matter which instance or file they came from.
    """
    values = [
        entries[key].strip()
        for key in sorted(entries)
        if not is_credential(key) and is_numeric(entries[key])
    ]
    return FINGERPRINT_SEPARATOR.join(values)
