"""Shared validation utilities"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_percentage(value: Optional[Union[int, float, str, Decimal]]) -> Optional[Decimal]:
    """
    Validate an ownership percentage.

    Returns:
        The percentage as a Decimal, or None when blank

    Raises:
        ValueError: If the value is not a number between 0 and 100
    """
    if value is None or value == "":
        return None
    try:
        pct = Decimal(str(value))
    except InvalidOperation:
        raise ValueError("Percentage must be a number")
    if pct < 0 or pct > 100:
        raise ValueError("Percentage must be between 0 and 100")
    return pct


def validate_money(value: Optional[Union[int, float, str, Decimal]]) -> Optional[Decimal]:
    """Coerce a fee or amount to a non-negative Decimal; blank strings become None."""
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value).replace(",", "").replace("$", "").strip())
    except InvalidOperation:
        raise ValueError("Amount must be a number")
    if amount < 0:
        raise ValueError("Amount cannot be negative")
    return amount
