# src/overlay/dom/annotator.py
import logging
from typing import List

from overlay.dom.document import Node, WebPageDocument
from overlay.model import TextSegment, TransformationResult

logger = logging.getLogger(__name__)

STYLE_ID = "pageglot-style"
SEGMENT_CLASS = "pageglot-segment"
WORD_CLASS = "pageglot-word"

ANNOTATION_CSS = f"""
.{WORD_CLASS} {{
  color: #2563eb;
  position: relative;
  background-color: rgba(37, 99, 235, 0.1);
  padding: 0 2px;
  border-radius: 2px;
  cursor: help;
  text-decoration: underline dotted #2563eb;
  text-underline-offset: 2px;
}}

.{WORD_CLASS}:hover::after {{
  content: attr(title);
  position: absolute;
  bottom: 100%;
  left: 50%;
  transform: translateX(-50%);
  background-color: #2563eb;
  color: white;
  padding: 4px 8px;
  border-radius: 4px;
  font-size: 14px;
  white-space: nowrap;
  z-index: 1000;
  box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1);
}}

#pageglot-vocabulary {{
  margin: 2rem auto;
  padding: 1rem 1.5rem;
  max-width: 40rem;
  border: 1px solid #2563eb;
  border-radius: 6px;
  font-family: sans-serif;
}}

#pageglot-vocabulary dt {{ font-weight: bold; color: #2563eb; }}
#pageglot-vocabulary dd {{ margin: 0 0 0.5rem 1rem; }}
"""


class MarkupAnnotator:
    """
    Writes transformed segments back into the tree as inspectable spans.

    A selected text node becomes a segment span holding the full original
    text; each substituted word inside it becomes a word span whose title
    and data-original attributes hold the source word. BeautifulSoup escapes
    attribute values on output, so the originals survive any markup.
    """

    def __init__(self, document: WebPageDocument):
        self.document = document

    def inject_style(self) -> None:
        if self.document.find_by_id(STYLE_ID) is not None:
            return
        style = self.document.new_tag("style", {"id": STYLE_ID}, ANNOTATION_CSS)
        self.document.append_to_head(style)

    def annotate(self, segment: TextSegment, result: TransformationResult) -> None:
        raw = str(segment.node)
        leading = raw[:len(raw) - len(raw.lstrip())]
        trailing = raw[len(raw.rstrip()):]

        wrapper = self.document.new_tag(
            "span", {"class": SEGMENT_CLASS, "data-original-text": segment.text}
        )
        for fragment in result.fragments:
            if fragment.is_substitution:
                wrapper.append(self.document.new_tag(
                    "span",
                    {
                        "class": WORD_CLASS,
                        "title": f"Original: {fragment.original}",
                        "data-original": fragment.original,
                    },
                    fragment.text,
                ))
            else:
                wrapper.append(self.document.new_string(fragment.text))

        replacement: List[Node] = []
        if leading:
            replacement.append(self.document.new_string(leading))
        replacement.append(wrapper)
        if trailing:
            replacement.append(self.document.new_string(trailing))

        self.document.replace(segment.node, replacement)
