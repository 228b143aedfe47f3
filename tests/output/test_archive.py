"""
Tests for archive packaging: names, passcodes, fixed entry paths.
"""

import io
import json
import zipfile
from datetime import datetime
from unittest.mock import patch

import fitz
import pytest
import pyzipper

from scramble_sheets.errors import BuildError
from scramble_sheets.output import archive
from scramble_sheets.output.archive import (
    PASSCODE_ALPHABET,
    PASSCODE_LENGTH,
    NameRegistry,
    passcode_manifest,
    random_passcode,
    requests_to_zip,
    to_file_safe_string,
    transcript,
)

DATE = datetime(2026, 5, 2, 10, 0)
GLOBAL = "Spring Open"
DISPLAY = "Spring Open - Computer Display PDFs"


def _open(data):
    return zipfile.ZipFile(io.BytesIO(data))


class TestPasscodes:
    def test_passcode_has_fixed_length_and_alphabet(self):
        for _ in range(200):
            passcode = random_passcode()
            assert len(passcode) == PASSCODE_LENGTH
            assert set(passcode) <= set(PASSCODE_ALPHABET)

    def test_alphabet_excludes_ambiguous_glyphs(self):
        assert not set("0O1lI") & set(PASSCODE_ALPHABET)

    def test_passcodes_are_not_repeated(self):
        passcodes = {random_passcode() for _ in range(500)}

        assert len(passcodes) == 500

    def test_manifest_lists_each_title_right_aligned(self):
        text = passcode_manifest({"Round 1": "abcd2345"}, GLOBAL).decode("utf-8")

        lines = text.split("\r\n")
        assert lines[0] == "SECRET SCRAMBLE SET PASSCODES"
        assert lines[1] == GLOBAL
        assert lines[2] == ""
        assert lines[3] == "Make sure that only Delegates have access to this file."
        assert f"{'Round 1':>40}: abcd2345" in lines
        assert text.endswith("\r\n")

    def test_manifest_without_global_title_skips_that_line(self):
        lines = passcode_manifest({}, None).decode("utf-8").split("\r\n")

        assert lines[1] == ""


class TestNames:
    def test_file_safe_string_transliterates_and_drops_reserved_characters(self):
        assert to_file_safe_string('Ölympia: Round 1/2 "final"?') == "Olympia Round 12 final"

    def test_name_registry_suffixes_repeated_names(self):
        names = NameRegistry()

        claimed = [names.claim("Round 1") for _ in range(3)]

        assert claimed == ["Round 1", "Round 1 (1)", "Round 1 (2)"]
        assert "Round 1 (2)" in names

    def test_name_registry_skips_suffixes_already_taken(self):
        names = NameRegistry()
        names.claim("Round 1 (1)")

        assert names.claim("Round 1") == "Round 1"
        assert names.claim("Round 1") == "Round 1 (2)"


class TestTranscript:
    def test_scrambles_joined_with_crlf_and_inner_newlines_flattened(self, make_request):
        request = make_request(scrambles=["R U\nF B", "L D"], extra_scrambles=["U2"])

        assert transcript(request) == b"R U F B\r\nL D\r\nU2"


class TestRequestsToZip:
    def test_plain_request_produces_fixed_entry_layout(self, make_request):
        # Act
        data, passcodes = requests_to_zip([make_request(title="Round 1")], GLOBAL, DATE)

        # Assert
        with _open(data) as zf:
            assert zf.namelist() == [
                "Printing/Scramble Sets/Round 1.pdf",
                "Interchange/txt/Round 1.txt",
                f"{DISPLAY}.zip",
                f"{GLOBAL} - Computer Display PDF Passcodes - SECRET.txt",
                f"Interchange/{GLOBAL}.json",
                f"Interchange/{GLOBAL}.jsonp",
                f"Interchange/{GLOBAL}.html",
                f"Printing/{GLOBAL} - All Scrambles.pdf",
            ]
            nested = zf.read(f"{DISPLAY}.zip")
            secret = zf.read(f"{GLOBAL} - Computer Display PDF Passcodes - SECRET.txt").decode("utf-8")
        assert list(passcodes) == ["Round 1"]
        assert passcodes["Round 1"] in secret

    def test_computer_display_pdf_opens_only_with_its_passcode(self, make_request):
        data, passcodes = requests_to_zip([make_request(title="Round 1")], GLOBAL, DATE)

        with _open(data) as zf, _open(zf.read(f"{DISPLAY}.zip")) as nested:
            assert nested.namelist() == [f"{DISPLAY}/Round 1.pdf"]
            pdf = nested.read(f"{DISPLAY}/Round 1.pdf")

        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.needs_pass
            assert doc.authenticate(passcodes["Round 1"])

    def test_print_pdf_is_not_encrypted(self, make_request):
        data, _ = requests_to_zip([make_request(title="Round 1")], GLOBAL, DATE)

        with _open(data) as zf:
            pdf = zf.read("Printing/Scramble Sets/Round 1.pdf")
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert not doc.needs_pass

    def test_titles_colliding_after_sanitizing_get_distinct_names(self, make_request):
        # Arrange: all three become "Round 1"
        requests = [make_request(title=t) for t in ("Round 1", "Round 1?", "Round: 1")]

        # Act
        data, passcodes = requests_to_zip(requests, GLOBAL, DATE, include_all_scrambles=False)

        # Assert
        assert list(passcodes) == ["Round 1", "Round 1 (1)", "Round 1 (2)"]
        with _open(data) as zf:
            names = zf.namelist()
        assert len(names) == len(set(names))
        assert "Printing/Scramble Sets/Round 1 (2).pdf" in names

    def test_each_request_gets_its_own_passcode(self, make_request):
        requests = [make_request(title=f"Round {i}") for i in range(1, 4)]

        _, passcodes = requests_to_zip(requests, GLOBAL, DATE, include_all_scrambles=False)

        assert len(set(passcodes.values())) == 3

    def test_fmc_request_adds_cutouts_generic_sheet_and_translations(self, make_request):
        request = make_request(title="FMC", scrambles=["R U F"], fmc=True)

        data, _ = requests_to_zip([request], GLOBAL, DATE, include_all_scrambles=False)

        with _open(data) as zf:
            names = zf.namelist()
        fmc_dir = "Printing/Fewest Moves - Additional Files"
        assert names[0] == f"{fmc_dir}/FMC - Scramble Cutout Sheet.pdf"
        assert names[1] == f"{fmc_dir}/3x3x3 Fewest Moves Solution Sheet.pdf"
        for locale in ("de", "en", "es", "fr"):
            assert f"{fmc_dir}/Translations/{locale}_FMC.pdf" in names
            assert f"{fmc_dir}/Translations/{locale}_FMC Solution Sheet.pdf" in names

    def test_interchange_files_agree(self, make_request):
        data, _ = requests_to_zip(
            [make_request(title="Round 1")], GLOBAL, DATE,
            generation_url="https://example.org/scrambles", schedule={"venues": []},
        )

        with _open(data) as zf:
            payload = json.loads(zf.read(f"Interchange/{GLOBAL}.json"))
            jsonp = zf.read(f"Interchange/{GLOBAL}.jsonp").decode("utf-8")
            html = zf.read(f"Interchange/{GLOBAL}.html").decode("utf-8")

        assert payload["competitionName"] == GLOBAL
        assert payload["generationUrl"] == "https://example.org/scrambles"
        assert payload["schedule"] == {"venues": []}
        assert [sheet["title"] for sheet in payload["sheets"]] == ["Round 1"]
        assert jsonp == "var SCRAMBLES_JSON = " + json.dumps(payload, ensure_ascii=False, separators=(",", ":")) + ";"
        assert f'src="{GLOBAL}.jsonp"' in html
        assert "%SCRAMBLES_JSONP_FILENAME%" not in html

    def test_all_scrambles_pdf_repeats_copies(self, make_request):
        data, _ = requests_to_zip([make_request(title="Round 1", copies=3)], GLOBAL, DATE)

        with _open(data) as zf:
            pdf = zf.read(f"Printing/{GLOBAL} - All Scrambles.pdf")
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            assert doc.page_count == 3

    def test_without_global_title_default_name_used(self, make_request):
        data, _ = requests_to_zip([make_request()], None, DATE, include_all_scrambles=False)

        with _open(data) as zf:
            assert "Interchange/Scrambles.json" in zf.namelist()

    def test_when_password_given_then_outer_archive_is_aes_encrypted(self, make_request):
        data, _ = requests_to_zip([make_request(title="Round 1")], GLOBAL, DATE, password="s3cret", include_all_scrambles=False)

        with pyzipper.AESZipFile(io.BytesIO(data)) as zf:
            info = zf.getinfo("Interchange/txt/Round 1.txt")
            assert info.flag_bits & 0x1
            zf.setpassword(b"s3cret")
            assert zf.read("Interchange/txt/Round 1.txt") == b"R U F\r\nL D B"

    def test_when_document_build_fails_then_build_error_names_title_and_stage(self, make_request):
        with patch.object(archive, "build_request_pdf", side_effect=RuntimeError("boom")):
            with pytest.raises(BuildError) as exc_info:
                requests_to_zip([make_request(title="Round 1")], GLOBAL, DATE)

        assert exc_info.value.title == "Round 1"
        assert exc_info.value.stage == "print-pdf"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
