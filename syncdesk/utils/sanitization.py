"""HTML escaping for free-text fields stored from user input."""

import html
from typing import Iterable, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """Escape HTML special characters, quotes included. None and non-strings pass through."""
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def sanitize_fields(values: dict, fields: Iterable[str]) -> dict:
    """Escape the named string fields of ``values`` in place and return it."""
    for field in fields:
        if values.get(field) is not None:
            values[field] = sanitize_string(values[field])
    return values
