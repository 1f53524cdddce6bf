"""Domain helpers for email address validation."""
from __future__ import annotations

import re
from typing import Any

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_valid_email(value: Any) -> bool:
    """Return True when value looks like local@domain.tld (structure only)."""
    if not isinstance(value, str) or not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))
