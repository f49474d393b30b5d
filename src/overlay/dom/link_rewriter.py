# src/overlay/dom/link_rewriter.py
import logging
from typing import Optional

from overlay.dom.document import WebPageDocument
from retriever.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

LINK_CLASS = "pageglot-link"
HREF_ATTR = "data-original-href"
SCRIPT_ID = "pageglot-navigation"

NAVIGATION_SCRIPT = f"""
document.addEventListener('click', function (e) {{
  var link = e.target.closest ? e.target.closest('.{LINK_CLASS}') : null;
  if (!link) {{ return; }}
  e.preventDefault();
  var originalHref = link.getAttribute('{HREF_ATTR}');
  if (originalHref) {{
    window.parent.postMessage({{ type: 'NAVIGATE', url: originalHref }}, '*');
  }}
}});
"""


class LinkRewriter:
    """
    Marks anchors for client-side interception instead of navigation.

    Each resolvable http(s) href is stored in absolute form as a data
    attribute and the anchor gets a marker class. A companion script posts
    {type: 'NAVIGATE', url} to the parent window when a marked anchor is
    clicked. Anchors that cannot be resolved are logged and left alone.
    """

    def __init__(self, document: WebPageDocument, page_url: Optional[str] = None):
        self.document = document
        self.page_url = page_url or document.url
        self.rewritten = 0
        self.skipped = 0

    def rewrite_links(self) -> int:
        for anchor in self.document.anchors():
            href = (anchor.get("href") or "").strip()
            if not href or UrlUtils.is_fragment_only(href):
                self.skipped += 1
                continue

            try:
                absolute_url = UrlUtils.resolve_href(self.page_url, href)
            except ValueError as e:
                logger.info("Skipping invalid URL: %s (%s)", href, e)
                self.skipped += 1
                continue

            if not UrlUtils.is_http_url(absolute_url):
                logger.debug("Skipping non-http link: %s", href)
                self.skipped += 1
                continue

            anchor[HREF_ATTR] = absolute_url
            classes = anchor.get("class") or []
            if isinstance(classes, str):
                classes = classes.split()
            if LINK_CLASS not in classes:
                anchor["class"] = list(classes) + [LINK_CLASS]
            self.rewritten += 1

        logger.debug("Rewrote %d links, skipped %d", self.rewritten, self.skipped)
        return self.rewritten

    def inject_script(self) -> None:
        if self.document.find_by_id(SCRIPT_ID) is not None:
            return
        script = self.document.new_tag("script", {"id": SCRIPT_ID}, NAVIGATION_SCRIPT)
        self.document.append_to_body(script)
