"""Article data structures passed between pipeline stages."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "New Efficiency Insights"
DEFAULT_DESCRIPTION = "Learn how to optimize service platforms."


class SourceArticle(BaseModel):
    """Newest article as returned by the content store."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    title: str = ""
    content: str = ""


class RewriteResult(BaseModel):
    """Structured fields parsed from the model's rewrite.

    ``title_parsed``/``description_parsed`` are False when the field holds
    the fixed default because its marker was missing from the response.
    """
    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    content: str
    title_parsed: bool = False
    description_parsed: bool = False


class ExtractedMetadata(BaseModel):
    """Title/description derived from HTML markup; None when no element matched."""
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    content: str = ""


class PublishedMetadata(BaseModel):
    """Final record written back to the content store."""
    title: str
    description: str
    content: str
    references: list[str] = Field(default_factory=list)
