# src/retriever/utils/url_utils.py
import logging
from urllib.parse import urlparse, urljoin

logger = logging.getLogger(__name__)

FETCHABLE_SCHEMES = ('http', 'https')


class UrlUtils:
    """A collection of static methods for URL validation and resolution."""

    @staticmethod
    def is_http_url(url: str) -> bool:
        """
        Checks if a value is an absolute http(s) URL with a hostname.
        """
        if not isinstance(url, str):
            logger.debug(f"Invalid URL check: value is not a string ({type(url).__name__}).")
            return False

        try:
            parsed_url = urlparse(url.strip())
        except ValueError as e:
            logger.debug(f"Invalid URL check: ValueError during URL parsing for '{url}': {e}.")
            return False

        return parsed_url.scheme.lower() in FETCHABLE_SCHEMES and bool(parsed_url.netloc)

    @staticmethod
    def is_fragment_only(href: str) -> bool:
        """Checks if an href only points to an anchor on the current page."""
        return href.startswith('#')

    @staticmethod
    def resolve_href(page_url: str, href: str) -> str:
        """
        Resolves a (possibly relative) href against the page URL.

        An href that is already an absolute http(s) URL is returned as-is,
        so resolving a resolved link never changes it.

        Raises:
            ValueError: If the href or page URL cannot be parsed.
        """
        href = href.strip()
        if UrlUtils.is_http_url(href):
            return href

        # urljoin raises ValueError on malformed netlocs such as 'http://[::1'
        absolute_url = urljoin(page_url, href)
        if urlparse(absolute_url).port == 0:
            raise ValueError(f"Invalid port in resolved URL: {absolute_url}")
        return absolute_url
