"""
Integration tests for per-request documents and the all-scrambles bundle.

Generated PDFs are inspected with PyMuPDF.
"""

from datetime import datetime

import fitz
import pytest

from scramble_sheets.layout.config import SheetConfig
from scramble_sheets.output.assembler import (
    attempt_requests,
    build_cutout_pdf,
    build_generic_solution_pdf,
    build_request_pdf,
    merge_pdfs,
    requests_to_pdf,
)

DATE = datetime(2026, 5, 2, 10, 0)


def _page_texts(pdf, password=None):
    with fitz.open(stream=pdf, filetype="pdf") as doc:
        if password is not None:
            assert doc.authenticate(password)
        return [page.get_text() for page in doc]


class TestBuildRequestPdf:
    def test_single_page_is_stamped_with_titles_date_and_footer(self, make_request):
        # Act
        pdf = build_request_pdf(make_request(title="Round 1"), "Spring Open", DATE)

        # Assert
        texts = _page_texts(pdf)
        assert len(texts) == 1
        assert "Spring Open" in texts[0]
        assert "Round 1" in texts[0]
        assert "2026-05-02" in texts[0]
        assert "Generated by scramble-sheets-" in texts[0]
        assert "1/1" not in texts[0]

    def test_scrambles_and_labels_are_drawn(self, make_request):
        pdf = build_request_pdf(make_request(scrambles=["R U F", "L D B"]), None, DATE)

        text = _page_texts(pdf)[0]
        assert "1." in text and "2." in text
        assert "R U F" in text.replace("\xa0", " ")

    def test_when_more_rows_than_fit_then_pages_numbered(self, make_request):
        pdf = build_request_pdf(make_request(scrambles=[f"R U F{i}" for i in range(10)]), None, DATE)

        texts = _page_texts(pdf)
        assert len(texts) == 2
        assert "1/2" in texts[0]
        assert "2/2" in texts[1]

    def test_when_password_given_then_document_is_encrypted(self, make_request):
        pdf = build_request_pdf(make_request(), "Spring Open", DATE, password="abcd2345")

        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.needs_pass
            assert not doc.authenticate("wrong")
            assert doc.authenticate("abcd2345")
            assert "Spring Open" in doc[0].get_text()

    def test_when_image_fails_then_placeholder_text_drawn(self, make_request, make_puzzle):
        pdf = build_request_pdf(make_request(puzzle=make_puzzle(fail_render=True)), None, DATE)

        assert "Error drawing scramble" in _page_texts(pdf)[0]

    def test_metadata_and_art_box_are_set(self, make_request):
        pdf = build_request_pdf(make_request(), "Spring Open", DATE, config=SheetConfig())

        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.metadata["title"] == "Spring Open"
            assert doc.metadata["producer"].startswith("scramble-sheets-")
            page = doc[0]
            assert page.artbox.width == pytest.approx(page.mediabox.width - 72)
            assert page.artbox.height == pytest.approx(page.mediabox.height - 108)

    def test_fmc_request_gives_one_solution_sheet_per_scramble(self, make_request):
        request = make_request(scrambles=["R U F", "L D B"], fmc=True)

        texts = _page_texts(build_request_pdf(request, "Spring Open", DATE))

        assert len(texts) == 2
        assert "Fewest Moves Challenge" in texts[0]
        assert "Scramble: L D B" in texts[1]

    def test_fmc_sheets_follow_locale(self, make_request):
        request = make_request(scrambles=["R U F"], fmc=True)

        text = _page_texts(build_request_pdf(request, None, DATE, locale="es"))[0]

        assert "Mezcla" in text


class TestMultiBlind:
    def test_each_attempt_becomes_its_own_request(self, make_request):
        request = make_request(title="MBLD", scrambles=["R U\nF B\nL D", "U2\nD2"], event="333mbf")

        attempts = attempt_requests(request)

        assert [a.title for a in attempts] == ["MBLD Attempt 1", "MBLD Attempt 2"]
        assert attempts[0].scrambles == ("R U", "F B", "L D")
        assert all(a.event == "333bf" and not a.fmc for a in attempts)

    def test_when_attempt_number_set_then_used_in_title(self, make_request):
        request = make_request(title="MBLD", scrambles=["R U\nF B"], event="333mbf", attempt=2)

        assert attempt_requests(request)[0].title == "MBLD Attempt 2"

    def test_multi_blind_document_has_a_page_per_attempt(self, make_request):
        request = make_request(title="MBLD", scrambles=["R U\nF B", "U2\nD2"], event="333mbf")

        texts = _page_texts(build_request_pdf(request, None, DATE))

        assert len(texts) == 2
        assert "MBLD Attempt 1" in texts[0]
        assert "MBLD Attempt 2" in texts[1]


class TestFmcExtras:
    def test_cutout_has_a_page_per_scramble(self, make_request):
        request = make_request(scrambles=["R", "U", "F"], fmc=True)

        assert len(_page_texts(build_cutout_pdf(request, "Open", DATE))) == 3

    def test_generic_sheet_is_one_page_with_blanks(self):
        texts = _page_texts(build_generic_solution_pdf("Open", DATE, "fr"))

        assert len(texts) == 1
        assert "Compétition" in texts[0] or "Competition" in texts[0]


class TestRequestsToPdf:
    def test_copies_repeat_pages_and_outline_groups_by_puzzle(self, make_request, make_puzzle):
        # Arrange
        other = make_puzzle(short_name="other", long_name="Other Puzzle")
        first = make_request(title="Round 1", copies=2)
        second = make_request(title="Round A", puzzle=other)
        third = make_request(title="Round 2")

        # Act
        pdf = requests_to_pdf([first, second, third], "Spring Open", DATE)

        # Assert
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.page_count == 4
            assert doc.get_toc() == [
                [1, "Fake Puzzle", 1],
                [2, "Round 1", 1],
                [2, "Round 2", 4],
                [1, "Other Puzzle", 3],
                [2, "Round A", 3],
            ]
            assert doc.metadata["title"] == "Spring Open"

    def test_when_no_requests_then_value_error(self):
        with pytest.raises(ValueError):
            requests_to_pdf([], None, DATE)

    def test_merge_keeps_every_page(self, make_request):
        one = build_request_pdf(make_request(), None, DATE)

        merged = merge_pdfs([one, one, one])

        assert len(_page_texts(merged)) == 3
