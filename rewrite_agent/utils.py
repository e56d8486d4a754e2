"""Utility functions for the Article Rewrite Agent."""

import re
from urllib.parse import urlparse

_WHITESPACE_RE = re.compile(r'\s+')


def extract_domain(url: str) -> str:
    """Extract domain from URL.

    Args:
        url: URL string

    Returns:
        Domain name
    """
    return urlparse(url).netloc.lower()


def is_valid_url(url: str) -> bool:
    """Check if URL is valid.

    Args:
        url: URL to validate

    Returns:
        True if URL is valid
    """
    try:
        result = urlparse(url)
        return all([result.scheme, result.netloc])
    except (TypeError, ValueError, AttributeError):
        return False


def clean_text(text: str) -> str:
    """Collapse every whitespace run to a single space and trim.

    Args:
        text: Raw text

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    return _WHITESPACE_RE.sub(' ', text).strip()


def truncate_text(text: str, max_length: int, suffix: str = "") -> str:
    """Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length, suffix included
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix
