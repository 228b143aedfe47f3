"""
Tests for the command line entry point.
"""

import argparse
import zipfile

import pytest

from scramble_sheets.cli import EXIT_BAD_REQUEST, EXIT_OK, main, parse_request_option


class TestParseRequestOption:
    def test_title_may_contain_equals(self):
        assert parse_request_option("A=B Round=333*5") == ("A=B Round", "333*5")

    @pytest.mark.parametrize("value", ["no-separator", "=333*5", "Round 1="])
    def test_malformed_values_rejected(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_request_option(value)


class TestMain:
    def test_builds_archive_file(self, tmp_path, capsys):
        out = tmp_path / "comp.zip"

        code = main([
            "--title", "Spring Open",
            "--request", "Round 1=222*2*1*",
            "--seed", "cli",
            "--no-all-scrambles",
            "-o", str(out),
        ])

        assert code == EXIT_OK
        with zipfile.ZipFile(out) as zf:
            assert "Printing/Scramble Sets/Round 1.pdf" in zf.namelist()
        assert "2 scrambles" in capsys.readouterr().out

    def test_unknown_puzzle_exits_with_bad_request(self, tmp_path):
        code = main(["--request", "Round 1=nope*2", "-o", str(tmp_path / "x.zip")])

        assert code == EXIT_BAD_REQUEST
        assert not (tmp_path / "x.zip").exists()

    def test_output_must_be_zip(self, tmp_path):
        code = main(["--request", "Round 1=222*2", "-o", str(tmp_path / "x.pdf")])

        assert code == EXIT_BAD_REQUEST

    def test_request_is_required(self):
        with pytest.raises(SystemExit):
            main(["-o", "x.zip"])
