# src/overlay/dom/document.py
import logging
from typing import Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag

logger = logging.getLogger(__name__)

# Elements whose text is never rendered as page copy
NON_CONTENT_TAGS = frozenset({"script", "style", "noscript", "template", "textarea", "title"})

Node = Union[Tag, NavigableString]


class WebPageDocument:
    """
    Mutable document tree for one fetched page.

    Wraps a BeautifulSoup tree built with the stdlib 'html.parser' backend,
    which tolerates malformed markup. Every pipeline component mutates the page
    through this class; it lives only for the duration of one request.
    """

    def __init__(self, soup: BeautifulSoup, url: str = ""):
        self.soup = soup
        self.url = url

    @classmethod
    def parse(cls, html: str, url: str = "") -> "WebPageDocument":
        """
        Parses raw HTML into a document.

        Args:
            html (str): The raw HTML string.
            url (str): The page URL, used as base for link resolution.
        """
        # A leading BOM is not part of the markup
        clean_html = (html or "").lstrip('\ufeff')
        return cls(BeautifulSoup(clean_html, "html.parser"), url)

    # --- QUERYING ---

    def query(self, selectors: Iterable[str]) -> List[Tag]:
        """
        Returns the unique elements matching any selector, in document order.
        """
        selector_list = [s.strip() for s in selectors if s and s.strip()]
        if not selector_list:
            return []
        return self.soup.select(", ".join(selector_list))

    def find_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(id=element_id)

    def anchors(self) -> List[Tag]:
        return self.soup.find_all("a", href=True)

    def text_nodes(self, elements: Sequence[Tag]) -> List[NavigableString]:
        """
        Lists the direct, non-empty text children of the given elements.

        Comments, CDATA and doctype nodes are NavigableString subclasses and
        are skipped, as is text inside script/style-like containers.
        """
        nodes: List[NavigableString] = []
        for element in elements:
            if element.name in NON_CONTENT_TAGS:
                continue
            for child in element.children:
                if type(child) is NavigableString and child.strip():
                    nodes.append(child)
        return nodes

    # --- MUTATION ---

    def new_tag(self, name: str, attrs: Optional[dict] = None, string: Optional[str] = None) -> Tag:
        tag = self.soup.new_tag(name, attrs=attrs or {})
        if string is not None:
            tag.string = string
        return tag

    def new_string(self, text: str) -> NavigableString:
        return NavigableString(text)

    def replace(self, node: Node, new_nodes: Sequence[Node]) -> None:
        """Replaces a node with a sequence of nodes, keeping their order."""
        if not new_nodes:
            node.extract()
            return
        first, *rest = new_nodes
        node.replace_with(first)
        anchor = first
        for new_node in rest:
            anchor.insert_after(new_node)
            anchor = new_node

    def ensure_head(self) -> Tag:
        head = self.soup.head
        if head is not None:
            return head
        head = self.soup.new_tag("head")
        html = self.soup.html
        if html is not None:
            html.insert(0, head)
        else:
            self.soup.insert(0, head)
        logger.debug("Document had no <head>; created one.")
        return head

    def ensure_body(self) -> Tag:
        body = self.soup.body
        if body is not None:
            return body
        body = self.soup.new_tag("body")
        html = self.soup.html
        if html is not None:
            html.append(body)
        else:
            self.soup.append(body)
        logger.debug("Document had no <body>; created one.")
        return body

    def append_to_head(self, node: Node) -> None:
        self.ensure_head().append(node)

    def append_to_body(self, node: Node) -> None:
        self.ensure_body().append(node)

    # --- SERIALIZATION ---

    def serialize(self) -> str:
        """
        Renders the tree back to HTML, leaving untouched markup byte-stable.

        Top-level nodes are rendered one by one: newer bs4 releases append a
        newline to the doctype that the source page never had.
        """
        parts = []
        for child in self.soup.contents:
            if isinstance(child, Doctype):
                parts.append(f"<!DOCTYPE {child}>")
            elif isinstance(child, Tag):
                parts.append(child.decode())
            else:
                parts.append(child.output_ready())
        return "".join(parts)
