"""Content processing module."""

from .link_filter import DEFAULT_EXCLUDED_DOMAINS, LinkFilter, is_acceptable_link
from .text_utils import extract_metadata, strip_tags

__all__ = [
    'DEFAULT_EXCLUDED_DOMAINS',
    'LinkFilter',
    'is_acceptable_link',
    'extract_metadata',
    'strip_tags',
]
