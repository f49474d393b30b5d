# src/retriever/services/page_fetch_service.py
import asyncio
import logging
import time
from typing import Dict, Optional

import aiohttp

from pageglot.core.errors import AccessDenied, NetworkError, UpstreamError
from pageglot.core.managers.config_manager import ConfigManager
from retriever.model import FetchResult, FetchSettings
from retriever.services.generate_default_user_agent_service import generate_default_user_agent

logger = logging.getLogger(__name__)

# Content types we are willing to hand to the HTML parser
ACCEPTED_CONTENT_TYPES = ('text/html', 'application/xhtml+xml', 'application/xml', 'text/xml')


class PageFetchService:
    """
    Fetches a single page with browser-like headers.
    Opens one aiohttp session per fetch, so a service instance can be shared
    between event loops and requests. Failures are raised as typed pipeline
    errors; nothing is retried.
    """

    def __init__(self, settings: Optional[FetchSettings] = None, user_agent: Optional[str] = None):
        self.settings = settings or FetchSettings()
        self.user_agent = user_agent or generate_default_user_agent()

    @classmethod
    def from_config(cls, config: ConfigManager) -> "PageFetchService":
        """Builds the service from the 'fetcher' and 'access_denied' settings sections."""
        fetch_section = dict(config.get_section("fetcher"))
        test_urls = config.get_nested("access_denied.test_urls")
        if test_urls:
            fetch_section["test_urls"] = test_urls
        return cls(FetchSettings(**fetch_section))

    def build_headers(self, url: str, cookie: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'User-Agent': self.user_agent,
            'Accept': self.settings.accept,
            'Accept-Language': self.settings.accept_language,
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
            'Referer': url,
        }
        if cookie:
            headers['Cookie'] = cookie
        return headers

    async def fetch_page(self, url: str, cookie: Optional[str] = None) -> FetchResult:
        """
        Retrieves the raw HTML for a URL.

        Args:
            url (str): Absolute http(s) URL to fetch.
            cookie (Optional[str]): Cookie header forwarded from the caller.

        Returns:
            FetchResult: Body, headers and any Set-Cookie values.

        Raises:
            NetworkError: On timeout or connection failure.
            AccessDenied: When the upstream answers 403.
            UpstreamError: On any other non-2xx or unusable response.
        """
        start_time = time.perf_counter()
        timeout_obj = aiohttp.ClientTimeout(total=self.settings.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout_obj) as session:
                async with session.get(
                        url,
                        headers=self.build_headers(url, cookie),
                        allow_redirects=True,
                        max_redirects=self.settings.max_redirects,
                ) as response:
                    status = response.status

                    # 1. Status handling
                    if status == 403:
                        logger.warning("Upstream refused access (403) for %s", url)
                        raise AccessDenied(url, self.settings.test_urls)
                    if not 200 <= status < 300:
                        raise UpstreamError(
                            f"Upstream responded with HTTP {status} {response.reason or ''}".strip(),
                            status=status,
                        )

                    # 2. Content-Type check
                    content_type = response.headers.get("Content-Type", "").lower()
                    if content_type and not any(t in content_type for t in ACCEPTED_CONTENT_TYPES):
                        raise UpstreamError(f"Unsupported Content-Type: {content_type}", status=status)

                    # 3. Body
                    html = await self._read_content(response)
                    set_cookies = response.headers.getall("Set-Cookie", [])

                    return FetchResult(
                        url=url,
                        final_url=str(response.url),
                        status=status,
                        html=html,
                        headers=dict(response.headers),
                        set_cookies=list(set_cookies),
                        content_type=content_type or None,
                        elapsed_time=round(time.perf_counter() - start_time, 4),
                    )

        except (asyncio.TimeoutError, aiohttp.ClientConnectionError) as e:
            logger.warning("Network failure fetching %s: %s", url, e)
            raise NetworkError(f"Could not reach {url}: {e or type(e).__name__}") from e
        except aiohttp.TooManyRedirects as e:
            raise UpstreamError(
                f"Exceeded {self.settings.max_redirects} redirects fetching {url}", status=e.status
            ) from e
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Malformed upstream response from {url}: {e}") from e

    async def _read_content(self, response: aiohttp.ClientResponse) -> str:
        """Reads the response body text, falling back to lossy UTF-8 decoding."""
        try:
            return await response.text()
        except UnicodeDecodeError:
            content_bytes = await response.read()
            return content_bytes.decode('utf-8', errors='replace')
