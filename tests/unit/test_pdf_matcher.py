"""Unit tests for autocat.matching.pdf_matcher module."""

import pytest

from autocat.matching.pdf_matcher import find_page, match_pdf, split_pages
from autocat.models import EvidenceKind, MatchType, PdfContent, PdfPage


def _keyword_record(record_factory, keyword, category_id="cat-finance", pattern_id="p1"):
    return record_factory(
        f"doc-{pattern_id}",
        category_id,
        [{"id": pattern_id, "annotationType": "pdf", "keywordText": keyword}],
    )


class TestSplitPages:
    """Tests for page splitting."""

    def test_form_feed(self):
        pages = split_pages("Page one\fPage two")
        assert [p.content for p in pages] == ["Page one", "Page two"]
        assert [p.page_number for p in pages] == [1, 2]

    def test_blank_lines(self):
        """Two blank lines in a row also break pages."""
        pages = split_pages("first\n\n\n\nsecond")
        assert [p.content for p in pages] == ["first", "second"]

    def test_single_blank_line_kept(self):
        """A paragraph break is not a page break."""
        assert len(split_pages("first\n\nsecond")) == 1

    def test_blank_pages_dropped(self):
        """Blank pages are dropped and the rest renumbered."""
        pages = split_pages("a\f \fb")
        assert [(p.page_number, p.content) for p in pages] == [(1, "a"), (2, "b")]

    def test_whitespace_only_falls_back(self):
        """Nothing left: one page holding the whole text."""
        pages = split_pages("   ")
        assert len(pages) == 1
        assert pages[0].content == "   "


class TestFindPage:
    """Tests for keyword page lookup."""

    def test_found_on_second_page(self):
        pages = [PdfPage(page_number=1, content="intro"), PdfPage(page_number=2, content="Invoice Number")]
        assert find_page(pages, "invoice number") == 2

    def test_not_found(self):
        assert find_page([PdfPage(page_number=1, content="intro")], "invoice") is None


class TestMatchPdf:
    """Tests for PDF keyword matching."""

    def test_exact_keyword(self, record_factory, directory, settings):
        """A verbatim keyword scores 0.9 and reports its page."""
        content = PdfContent(extracted_text="Header\fInvoice Number: 12345")
        matches = match_pdf(content, [_keyword_record(record_factory, "Invoice Number")], directory, settings)

        assert len(matches) == 1
        match = matches[0]
        assert match.confidence == pytest.approx(0.9)
        assert match.category == "Finance"
        assert match.match_type == MatchType.EXACT
        assert match.evidence_kind == EvidenceKind.PDF_KEYWORD
        assert match.source == "pdf_keyword_match"
        assert match.page_number == 2
        assert match.text == "Invoice Number"

    def test_partial_keyword(self, record_factory, directory, settings):
        content = PdfContent(extracted_text="invoice total due")
        matches = match_pdf(content, [_keyword_record(record_factory, "invoice number")], directory, settings)
        assert matches[0].match_type == MatchType.PARTIAL
        assert matches[0].confidence == pytest.approx(0.7)
        assert matches[0].page_number is None

    def test_no_match(self, record_factory, directory, settings):
        """Keywords absent from the text produce no candidate."""
        content = PdfContent(extracted_text="hello world")
        assert match_pdf(content, [_keyword_record(record_factory, "zebra")], directory, settings) == []

    def test_empty_text(self, record_factory, directory, settings):
        content = PdfContent(extracted_text="")
        assert match_pdf(content, [_keyword_record(record_factory, "invoice")], directory, settings) == []

    def test_precomputed_pages_used(self, record_factory, directory, settings):
        """Pages from extraction take precedence over re-splitting."""
        content = PdfContent(
            extracted_text="alpha invoice",
            pages=[PdfPage(page_number=3, content="alpha invoice")],
        )
        matches = match_pdf(content, [_keyword_record(record_factory, "invoice")], directory, settings)
        assert matches[0].page_number == 3

    def test_unknown_category(self, record_factory, directory, settings):
        """Rules pointing at a missing category resolve to "unknown"."""
        content = PdfContent(extracted_text="invoice")
        record = _keyword_record(record_factory, "invoice", category_id="cat-gone")
        assert match_pdf(content, [record], directory, settings)[0].category == "unknown"

    def test_other_kinds_ignored(self, record_factory, directory, settings):
        """Only pdf patterns are scanned."""
        record = record_factory("j", "cat-legal", [
            {"id": "j1", "annotationType": "json", "jsonKey": "invoice", "jsonValue": "x"},
        ])
        content = PdfContent(extracted_text="invoice")
        assert match_pdf(content, [record], directory, settings) == []

    def test_corpus_order_preserved(self, record_factory, directory, settings):
        records = [
            _keyword_record(record_factory, "terms", "cat-legal", "p1"),
            _keyword_record(record_factory, "invoice", "cat-finance", "p2"),
        ]
        content = PdfContent(extracted_text="invoice and terms")
        matches = match_pdf(content, records, directory, settings)
        assert [m.pattern_ref for m in matches] == ["p1", "p2"]
