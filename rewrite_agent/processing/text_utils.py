"""Text processing utilities for the Article Rewrite Agent.

Metadata extraction here is a narrow pattern match over the first heading
and paragraph elements, not a full HTML parse. Model output is loosely
formed HTML and only those two elements are of interest.
"""

import re

from ..logging import get_logger
from ..models.article import ExtractedMetadata, RewriteResult

logger = get_logger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')
_HEADING_RE = re.compile(r'<h[12](?:\s[^>]*)?>([\s\S]*?)</h[12]\s*>', re.IGNORECASE)
_PARAGRAPH_RE = re.compile(r'<p(?:\s[^>]*)?>([\s\S]*?)</p\s*>', re.IGNORECASE)


def strip_tags(html_text: str) -> str:
    """Remove markup tags and trim surrounding whitespace.

    Args:
        html_text: HTML fragment

    Returns:
        Inner text of the fragment
    """
    if not html_text:
        return ""
    return _TAG_RE.sub('', html_text).strip()


def _first_element_text(pattern: re.Pattern, html_text: str) -> str | None:
    match = pattern.search(html_text)
    if not match:
        return None
    text = strip_tags(match.group(1))
    return text or None


def extract_metadata(html_or_result: str | RewriteResult) -> ExtractedMetadata:
    """Derive a display title and description from HTML content.

    The title is the inner text of the first ``<h1>``/``<h2>`` element and the
    description the inner text of the first ``<p>`` element. Missing elements
    yield None. Pure function of its input.

    Args:
        html_or_result: Raw HTML content or a rewrite result carrying it

    Returns:
        Extracted metadata with the normalized content
    """
    if isinstance(html_or_result, RewriteResult):
        content = html_or_result.content
    else:
        content = html_or_result or ""

    title = _first_element_text(_HEADING_RE, content)
    description = _first_element_text(_PARAGRAPH_RE, content)

    logger.debug("Metadata extracted", title=title, description=description)

    return ExtractedMetadata(title=title, description=description, content=content)
