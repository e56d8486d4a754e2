"""Deny-list predicate for reference links."""

from collections.abc import Iterable

DEFAULT_EXCLUDED_DOMAINS: tuple[str, ...] = (
    "wikipedia.org",
    "beyondchats.com",
    "youtube.com",
    "facebook.com",
    "linkedin.com",
)


def is_acceptable_link(
    url: str,
    excluded_domains: Iterable[str] = DEFAULT_EXCLUDED_DOMAINS,
) -> bool:
    """Check whether a URL may be used as a reference source.

    The check is a case-insensitive substring match against the excluded
    domains, so it also catches subdomains (``en.wikipedia.org``) and
    mobile hosts. Anything not excluded is accepted.

    Args:
        url: Candidate URL
        excluded_domains: Domains to reject

    Returns:
        True if the URL matches no excluded domain
    """
    lowered = url.lower()
    return not any(domain in lowered for domain in excluded_domains)


class LinkFilter:
    """Callable wrapper binding a fixed exclusion list."""

    def __init__(self, excluded_domains: Iterable[str] = DEFAULT_EXCLUDED_DOMAINS):
        self.excluded_domains = tuple(d.lower() for d in excluded_domains)

    def __call__(self, url: str) -> bool:
        return is_acceptable_link(url, self.excluded_domains)
