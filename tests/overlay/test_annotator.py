import random

from overlay.dom.annotator import SEGMENT_CLASS, STYLE_ID, WORD_CLASS, MarkupAnnotator
from overlay.dom.document import WebPageDocument
from overlay.dom.selector import CountUniformSelector
from overlay.model import Fragment, SelectionPolicy, TransformationResult
from overlay.translation.strategies import DictionaryStrategy


def _select_all(doc):
    return CountUniformSelector(random.Random(0)).select(doc, SelectionPolicy(percentage=100)).segments


def test_annotate_wraps_segment_and_words():
    doc = WebPageDocument.parse("<p>  The dog barked. </p>")
    segment = _select_all(doc)[0]
    result = DictionaryStrategy({"dog": "hund"}, word_inclusion_probability=1.0).transform(
        segment.text, random.Random(0)
    )

    MarkupAnnotator(doc).annotate(segment, result)

    paragraph = doc.soup.p
    assert [str(c) for c in paragraph.contents if isinstance(c, str)] == ["  ", " "]
    wrapper = paragraph.find("span", recursive=False)
    assert wrapper.attrs == {"class": [SEGMENT_CLASS], "data-original-text": "The dog barked."}
    assert wrapper.get_text() == "The hund barked."
    word = wrapper.find("span", class_=WORD_CLASS)
    assert word.attrs == {"class": [WORD_CLASS], "title": "Original: dog", "data-original": "dog"}
    assert word.string == "hund"
    assert [str(c) for c in wrapper.contents if isinstance(c, str)] == ["The ", " barked."]


def test_annotate_escapes_originals_in_attributes():
    doc = WebPageDocument.parse('<p>Tom &amp; "Jerry" &lt;3</p>')
    segment = _select_all(doc)[0]
    result = TransformationResult(
        original=segment.text,
        fragments=[Fragment(text="Tim", original="Tom"), Fragment(text=segment.text[3:])],
    )

    MarkupAnnotator(doc).annotate(segment, result)

    wrapper = doc.soup.find("span", class_=SEGMENT_CLASS)
    assert wrapper["data-original-text"] == 'Tom & "Jerry" <3'
    out = doc.serialize()
    assert "Tom &amp; \"Jerry\" &lt;3" in out
    assert "<3" not in out


def test_annotate_segment_without_substitutions_keeps_text():
    doc = WebPageDocument.parse("<p>Plain words only</p>")
    segment = _select_all(doc)[0]
    result = TransformationResult(original=segment.text, fragments=[Fragment(text=segment.text)])

    MarkupAnnotator(doc).annotate(segment, result)

    assert doc.soup.p.get_text() == "Plain words only"
    assert doc.soup.find(class_=WORD_CLASS) is None
    assert doc.soup.find(class_=SEGMENT_CLASS) is not None


def test_inject_style_is_idempotent():
    doc = WebPageDocument.parse("<html><head></head><body><p>x</p></body></html>")
    annotator = MarkupAnnotator(doc)
    annotator.inject_style()
    annotator.inject_style()

    styles = doc.soup.find_all("style", id=STYLE_ID)
    assert len(styles) == 1
    assert styles[0].parent.name == "head"
    assert f".{WORD_CLASS}" in styles[0].string
