import pytest

from pageglot.core.managers.config_manager import config_manager
from retriever.model import FetchResult

PARAGRAPHS = [
    "The house stood near the water.",
    "Every morning the family read a good book.",
    "Children learn a new language at school.",
    "The city was quiet at night.",
    "This page is an example of simple text.",
    "The dog and the cat shared their food.",
    "People work hard every day of the year.",
    "A friend gave the child a small book.",
    "Without water there is no life.",
    "The world changes with time.",
]

SAMPLE_HTML = (
    "<!DOCTYPE html>\n"
    "<html><head><title>Sample page</title></head>\n"
    "<body>\n"
    "<nav><a href=\"/about\">About</a> <a href=\"https://other.example.org/x\">Other</a>"
    " <a href=\"mailto:me@example.com\">Mail</a></nav>\n"
    "<h1>The big book</h1>\n"
    + "\n".join(f"<p>{text}</p>" for text in PARAGRAPHS)
    + "\n</body></html>"
)


class FakeFetcher:
    """Stands in for PageFetchService; records every call."""

    def __init__(self, html: str = SAMPLE_HTML, error: Exception = None, set_cookies=None):
        self.html = html
        self.error = error
        self.set_cookies = set_cookies or []
        self.calls = []

    async def fetch_page(self, url, cookie=None):
        self.calls.append((url, cookie))
        if self.error is not None:
            raise self.error
        return FetchResult(
            url=url, final_url=url, status=200, html=self.html,
            headers={"Content-Type": "text/html"}, set_cookies=self.set_cookies,
        )


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def make_fetcher():
    """Factory for fetchers with custom HTML, errors or cookies."""
    return FakeFetcher


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def paragraphs():
    return list(PARAGRAPHS)


@pytest.fixture
def config():
    """The shared ConfigManager, restored from settings.json after the test."""
    config_manager.reset()
    yield config_manager
    config_manager.reset()
