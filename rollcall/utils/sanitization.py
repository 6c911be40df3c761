import html
from typing import Optional

import bleach


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def sanitize_text(value: Optional[str], max_length: int = 2000) -> str:
    """
    Strip, length-check and clean free text such as notes and descriptions.
    Tags are stripped; remaining special characters are escaped.

    Args:
        value: Input string
        max_length: Maximum allowed length before cleaning

    Returns:
        Sanitized string ("" for empty input)

    Raises:
        ValueError: If input exceeds max_length
    """
    if not value:
        return ""

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return bleach.clean(value, tags=[], attributes={}, strip=True)
