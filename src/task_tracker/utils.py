from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
def normalize_text(value: Optional[str]) -> str:
    """Trim surrounding whitespace. None becomes the empty string."""
    if value is None:
        return ""
    return value.strip()


# PUBLIC_INTERFACE
def normalize_email(value: Optional[str]) -> str:
    """
    Normalize an email for storage and comparison.

    Emails are trimmed and lower-cased, so ' U@X.com ' and 'u@x.com' name the
    same user.
    """
    return normalize_text(value).lower()
