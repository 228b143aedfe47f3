"""
Unit tests for the interchange JSON, JSONP and viewer page.
"""

import json
from datetime import datetime

from scramble_sheets import generator_name
from scramble_sheets.output.interchange import (
    JSONP_PLACEHOLDER,
    build_interchange,
    to_json,
    to_jsonp,
    viewer_html,
)

DATE = datetime(2026, 5, 2, 10, 0)


class TestBuildInterchange:
    def test_document_has_sheets_and_generation_metadata(self, make_request):
        data = build_interchange([make_request(title="Round 1")], "Spring Open", DATE, "https://example.org")

        assert data["competitionName"] == "Spring Open"
        assert data["version"] == generator_name()
        assert data["generationDate"] == "2026-05-02T10:00:00"
        assert data["generationUrl"] == "https://example.org"
        assert data["sheets"][0]["title"] == "Round 1"
        assert data["sheets"][0]["scrambler"] == "fake"
        assert "schedule" not in data

    def test_unset_values_are_omitted(self, make_request):
        data = build_interchange([make_request()], None, DATE)

        assert set(data) == {"sheets", "version", "generationDate"}

    def test_schedule_copied_verbatim(self, make_request):
        schedule = {"venues": [{"name": "Main Hall", "rooms": []}]}

        data = build_interchange([make_request()], "Open", DATE, schedule=schedule)

        assert data["schedule"] == schedule


class TestSerialization:
    def test_json_is_compact_and_keeps_unicode(self):
        text = to_json({"competitionName": "Québec Open", "sheets": []})

        assert text == '{"competitionName":"Québec Open","sheets":[]}'

    def test_jsonp_wraps_json_in_a_variable(self):
        assert to_jsonp('{"a":1}') == 'var SCRAMBLES_JSON = {"a":1};'

    def test_jsonp_payload_parses_back(self, make_request):
        text = to_json(build_interchange([make_request()], "Open", DATE))

        payload = to_jsonp(text)[len("var SCRAMBLES_JSON = "):-1]

        assert json.loads(payload)["competitionName"] == "Open"


class TestViewer:
    def test_bundled_viewer_loads_the_jsonp_file(self):
        html = viewer_html("Open.jsonp")

        assert '<script src="Open.jsonp"></script>' in html
        assert JSONP_PLACEHOLDER not in html

    def test_every_template_line_is_substituted(self, tmp_path):
        template = tmp_path / "viewer.html"
        template.write_text("a %SCRAMBLES_JSONP_FILENAME%\nb %SCRAMBLES_JSONP_FILENAME%", encoding="utf-8")

        assert viewer_html("x.jsonp", template) == "a x.jsonp\nb x.jsonp\n"
