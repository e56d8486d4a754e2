"""Data models and model-provider clients."""

from .article import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    ExtractedMetadata,
    PublishedMetadata,
    RewriteResult,
    SourceArticle,
)

__all__ = [
    'DEFAULT_DESCRIPTION',
    'DEFAULT_TITLE',
    'ExtractedMetadata',
    'PublishedMetadata',
    'RewriteResult',
    'SourceArticle',
]
