# src/retriever/model.py (Fetch Layer)
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FetchResult(BaseModel):
    """Raw outcome of a successful page fetch."""
    url: str
    final_url: str
    status: int
    html: str
    headers: Dict[str, str] = Field(default_factory=dict)
    set_cookies: List[str] = Field(default_factory=list)
    content_type: Optional[str] = None
    elapsed_time: float = 0.0
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FetchSettings(BaseModel):
    timeout: float = Field(default=10.0, gt=0)
    max_redirects: int = Field(default=5, ge=0)
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.5"
    test_urls: List[str] = Field(default_factory=lambda: [
        "https://example.com",
        "https://www.w3.org/",
        "https://www.webscraper.io/test-sites/e-commerce/allinone",
    ])
