from overlay.dom.document import WebPageDocument
from overlay.dom.vocabulary import VOCABULARY_ID, VocabularyAggregator
from overlay.model import TieBreak, TranslationPair


def _pairs(*items):
    return [TranslationPair(original=o, translated=t) for o, t in items]


def test_pairs_are_deduplicated_case_insensitively():
    vocabulary = VocabularyAggregator()
    vocabulary.add(_pairs(("House", "Hus"), ("water", "vatten")))
    vocabulary.add(_pairs(("house", "Hus"), ("book", "bok")))

    assert len(vocabulary) == 3
    assert [p.original for p in vocabulary.pairs()] == ["House", "water", "book"]
    assert vocabulary.conflicts == 0


def test_first_tie_break_keeps_earliest_form():
    vocabulary = VocabularyAggregator(TieBreak.FIRST)
    vocabulary.add(_pairs(("book", "boken"), ("water", "vatten")))
    vocabulary.add(_pairs(("book", "boket")))

    assert vocabulary.pairs()[0].translated == "boken"
    assert vocabulary.conflicts == 1


def test_last_tie_break_keeps_latest_form_in_first_position():
    vocabulary = VocabularyAggregator("last")
    vocabulary.add(_pairs(("book", "boken"), ("water", "vatten")))
    vocabulary.add(_pairs(("Book", "Boket")))

    assert [(p.original, p.translated) for p in vocabulary.pairs()] == [("Book", "Boket"), ("water", "vatten")]


def test_render_appends_listing_to_body():
    doc = WebPageDocument.parse("<html><body><p>x</p></body></html>")
    vocabulary = VocabularyAggregator(title="Words")
    vocabulary.add(_pairs(("dog", "hund"), ("cat", "katt")))

    assert vocabulary.render(doc) is True

    aside = doc.find_by_id(VOCABULARY_ID)
    assert aside.parent.name == "body"
    assert aside.h2.string == "Words"
    assert [dt.string for dt in aside.find_all("dt")] == ["hund", "katt"]
    assert [dd.string for dd in aside.find_all("dd")] == ["dog", "cat"]
    assert aside.find("dt")["data-original"] == "dog"


def test_render_without_entries_leaves_document_untouched():
    html = "<html><body><p>x</p></body></html>"
    doc = WebPageDocument.parse(html)

    assert VocabularyAggregator().render(doc) is False
    assert doc.serialize() == html
