"""
Unit tests for the two-pass scramble table composer.
"""

from unittest.mock import patch

import pytest

from scramble_sheets.core.models.geometry import ImageSize
from scramble_sheets.layout.composer import (
    PLACEHOLDER_PREFIX,
    compose_request,
    compose_table,
    label_width,
    scramble_image_size,
)
from scramble_sheets.layout.config import SheetConfig
from scramble_sheets.puzzles.cube import CubePuzzle


@pytest.fixture
def config():
    return SheetConfig()


class TestImageSize:
    def test_image_never_wider_than_half_the_table(self, make_request, config):
        size = scramble_image_size(make_request(scrambles=["R"]), config)

        assert size.width <= config.table_width / 2

    def test_extra_scrambles_reduce_image_height(self, make_request, config):
        plain = scramble_image_size(make_request(scrambles=["R"] * 7), config)
        with_extra = scramble_image_size(make_request(scrambles=["R"] * 7, extra_scrambles=["U"]), config)

        assert with_extra.height < plain.height

    def test_fixed_image_width_caps_the_column(self, make_request, fake_puzzle, config):
        fake_puzzle.fixed_image_width = 50

        size = scramble_image_size(make_request(), config)

        assert size.width <= 50


class TestComposeRequest:
    def test_short_scrambles_are_numbered_one_line_rows(self, make_request, config):
        sheet = compose_request(make_request(scrambles=["R U F", "L D B", "F2 B2"]), config)

        assert [row.label for row in sheet.primary.rows] == ["1.", "2.", "3."]
        assert sheet.primary.one_line is True
        assert sheet.primary.highlighting is False
        assert sheet.extra is None

    def test_extra_scrambles_get_prefixed_labels(self, make_request, config):
        sheet = compose_request(make_request(extra_scrambles=["R", "U"]), config)

        assert [row.label for row in sheet.extra.rows] == ["E1.", "E2."]

    def test_all_rows_share_one_font_size(self, make_request, config):
        sheet = compose_request(make_request(scrambles=["R", "R U F B L D R U F B L D R U F B"]), config)

        assert len({row.text.font_size for row in sheet.primary.rows}) == 1

    def test_when_any_row_needs_highlighting_then_both_tables_highlight(self, make_request, config):
        # Arrange
        request = make_request(scrambles=["R U", "R\nU\nF\nB\nL"], extra_scrambles=["F B"])

        # Act
        sheet = compose_request(request, config)

        # Assert
        assert sheet.primary.highlighting is True
        assert sheet.extra.highlighting is True
        long_row = sheet.primary.rows[1]
        assert [line.highlighted for line in long_row.text.lines] == [False, True, False, True, False]

    def test_when_no_row_reaches_threshold_then_no_line_highlighted(self, make_request, config):
        sheet = compose_request(make_request(scrambles=["R U", "F B"]), config)

        assert not any(line.highlighted for row in sheet.primary.rows for line in row.text.lines)

    def test_images_rendered_only_in_committed_pass(self, make_request, fake_puzzle, config):
        request = make_request(scrambles=["R", "U"], extra_scrambles=["F"])

        with patch.object(fake_puzzle, "render", wraps=fake_puzzle.render) as render:
            compose_request(request, config)

        assert render.call_count == 3

    def test_when_rendering_fails_then_placeholder_slot(self, make_request, make_puzzle, config):
        request = make_request(puzzle=make_puzzle(fail_render=True))

        sheet = compose_request(request, config)

        for row in sheet.primary.rows:
            assert row.image.source is None
            assert row.image.error.startswith(PLACEHOLDER_PREFIX)

    def test_when_puzzle_has_no_image_then_rows_have_no_image(self, make_request, make_puzzle, config):
        sheet = compose_request(make_request(puzzle=make_puzzle(image=False)), config)

        assert sheet.image_size.is_empty
        assert all(row.image is None for row in sheet.primary.rows)
        assert all(row.height >= config.label_font_size * 1.5 for row in sheet.primary.rows)


class TestComposeTable:
    def test_columns_add_up_to_table_width(self, fake_puzzle, config):
        table = compose_table(["R U"], fake_puzzle, {}, ImageSize(100, 100), config, render_images=False)

        assert table.width == pytest.approx(config.table_width)
        assert table.rows[0].image is None

    def test_row_is_at_least_as_tall_as_its_image(self, fake_puzzle, config):
        table = compose_table(["R U"], fake_puzzle, {}, ImageSize(100, 120), config)

        assert table.rows[0].height >= 120 + 2 * config.scramble_image_padding

    def test_when_no_scrambles_then_value_error(self, fake_puzzle, config):
        with pytest.raises(ValueError):
            compose_table([], fake_puzzle, {}, ImageSize(10, 10), config)

    def test_label_column_grows_with_digit_count(self, config):
        assert label_width("", 10, config) > label_width("", 9, config)
        assert label_width("E", 9, config) > label_width("", 9, config)

    @pytest.mark.parametrize("size,image_height", [(4, 60), (6, 80), (7, 100)])
    def test_wrapped_text_fits_cell_at_drawing_leading(self, fake_puzzle, config, size, image_height):
        # Arrange
        scrambles = CubePuzzle(size).generate(1, seed="leading")
        pad = config.scramble_image_padding
        area_height = (
            image_height - 2 * pad - config.scramble_padding_top - config.scramble_padding_bottom
        )

        # Act
        table = compose_table(scrambles, fake_puzzle, {}, ImageSize(100, image_height), config, render_images=False)

        # Assert
        for row in table.rows:
            assert row.text.height(config.row_leading) < area_height
            assert row.height == pytest.approx(image_height + 2 * pad)
