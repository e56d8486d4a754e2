"""
Article rewriting using an LLM.

The model is asked for a fixed three-field plain-text format which is then
parsed into a RewriteResult:

    TITLE: <title on one line>
    DESCRIPTION: <description on one line>
    CONTENT: <HTML article, everything to the end>
"""

import re
from typing import List, Optional, Sequence

from .config import Settings
from .logging import get_logger
from .models.article import DEFAULT_DESCRIPTION, DEFAULT_TITLE, RewriteResult
from .models.llm_client import ChatMessage, LLMClient, LLMError

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an SEO Expert. Return your response in this exact format:\n"
    "TITLE: [New Unique Related Title]\n"
    "DESCRIPTION: [New SEO Description]\n"
    "CONTENT: [The HTML Article]"
)

_TITLE_RE = re.compile(r'TITLE:\s*(.*)', re.IGNORECASE)
_DESCRIPTION_RE = re.compile(r'DESCRIPTION:\s*(.*)', re.IGNORECASE)
_CONTENT_RE = re.compile(r'CONTENT:\s*([\s\S]*)', re.IGNORECASE)


def _match_field(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def parse_rewrite_response(text: str) -> RewriteResult:
    """Parse model output into title, description and content.

    Each field defaults independently: title and description to fixed
    generic strings, content to the full raw response.
    """
    title = _match_field(_TITLE_RE, text)
    description = _match_field(_DESCRIPTION_RE, text)
    content = _match_field(_CONTENT_RE, text)

    return RewriteResult(
        title=title or DEFAULT_TITLE,
        description=description or DEFAULT_DESCRIPTION,
        content=content or text,
        title_parsed=title is not None,
        description_parsed=description is not None,
    )


class ArticleRewriter:
    """LLM-based article rewriter."""

    def __init__(self, settings: Settings, llm_client: LLMClient):
        """Initialize rewriter."""
        self.settings = settings
        self.llm_client = llm_client

    def build_messages(
        self,
        original: str,
        reference_texts: Sequence[str],
        reference_urls: Sequence[str],
    ) -> List[ChatMessage]:
        """Build the system + user prompt.

        Only the reference URLs go to the model unless
        ``include_reference_texts`` is enabled, in which case non-empty
        reference texts are appended, each labelled with its URL.
        """
        excerpt = original[:self.settings.prompt_source_chars]
        user_prompt = f"Rewrite this: {excerpt}. Refs: {', '.join(reference_urls)}"

        if self.settings.include_reference_texts:
            sections = [
                f"[{i}] {url}\n{text}"
                for i, (url, text) in enumerate(zip(reference_urls, reference_texts), start=1)
                if text
            ]
            if sections:
                user_prompt += "\n\nReference material:\n\n" + "\n\n".join(sections)

        return [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=user_prompt),
        ]

    async def rewrite(
        self,
        original: str,
        reference_texts: Sequence[str],
        reference_urls: Sequence[str],
    ) -> Optional[RewriteResult]:
        """Rewrite an article.

        Returns:
            The parsed result, or None if the inference call failed
        """
        messages = self.build_messages(original, reference_texts, reference_urls)

        try:
            response = await self.llm_client.chat(
                messages,
                max_tokens=self.settings.llm.max_tokens,
            )
        except LLMError as e:
            logger.error("LLM rewrite failed", error=str(e))
            return None

        result = parse_rewrite_response(response.content)
        if not (result.title_parsed and result.description_parsed):
            logger.warning(
                "Model response missing fields, defaults applied",
                title_parsed=result.title_parsed,
                description_parsed=result.description_parsed,
            )
        return result
