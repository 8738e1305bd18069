"""
Input validation and sanitization utilities.
Protects notification emails against markup and header injection.
"""

import re
import html
from typing import Any, Optional


# Maximum lengths for contact form fields
MAX_NAME_LENGTH = 200
MAX_EMAIL_LENGTH = 320
MAX_SUBJECT_LENGTH = 300
MAX_MESSAGE_LENGTH = 10000

# The five entities html.escape produces
_ESCAPED_ENTITIES = re.compile(r"&(amp|lt|gt|quot|#x27);")
_ENTITY_CHARS = {"amp": "&", "lt": "<", "gt": ">", "quot": "\"", "#x27": "'"}

# C0 controls (CR and LF included) and DEL
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]+')


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Escape text for safe embedding in an HTML document.

    The five entities this function produces (&amp; &lt; &gt; &quot; &#x27;)
    are decoded before escaping, so sanitizing an already sanitized value
    changes nothing. Other character references are kept literally. A user
    who types one of those five entities sees the decoded character in the
    notification, while the stored submission keeps the text as typed.

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length of the input before escaping (None for no limit)

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = _ESCAPED_ENTITIES.sub(lambda m: _ENTITY_CHARS[m.group(1)], text)

    # Truncate if too long
    if max_length and len(text) > max_length:
        text = text[:max_length]

    return html.escape(text.strip(), quote=True)


def sanitize_header(text: Optional[str], max_length: Optional[int] = None) -> str:
    """Collapse control characters (CR/LF included) so a value cannot inject mail headers."""
    if not text:
        return ""
    text = _CONTROL_CHARS.sub(" ", text).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def validate_required(value: Any, field_name: str) -> str:
    """
    Validate that a required field is a non-empty string.

    Returns:
        The value with surrounding whitespace removed

    Raises:
        ValueError if the value is missing, not a string, or blank
    """
    if not isinstance(value, str):
        raise ValueError(f"{field_name} is required")
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    return value
