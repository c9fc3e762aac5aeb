import logging
from io import BytesIO

import pytest
from PIL import Image

from tankgame.services.board_renderer import (
    BoardRenderer, GameSnapshot, PlayerSnapshot
)

TILE = 25
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def make_game(width=8, height=8, name="Arena"):
    return GameSnapshot(guild_id=1, name=name, width=width, height=height)


def make_player(user_id, x, y, health=3, actions=0, range_=1):
    return PlayerSnapshot(
        user_id=user_id, pos_x=x, pos_y=y, health=health, actions=actions, range=range_
    )


def open_png(board):
    image = Image.open(BytesIO(board.png))
    image.load()
    return image


@pytest.fixture
def renderer():
    return BoardRenderer(tile_size=TILE)


class TestBoardRenderer:

    def test_image_size_and_mode(self, renderer):
        board = renderer.render(make_game(8, 10), [])
        image = open_png(board)
        assert image.format == "PNG"
        assert image.mode == "RGB"
        assert image.size == (8 * TILE + 1, 10 * TILE + 1)
        assert (board.width, board.height) == image.size
        assert board.game_name == "Arena"

    def test_grid_lines(self, renderer):
        image = open_png(renderer.render(make_game(8, 8), []))
        last = 8 * TILE
        for i in range(9):
            assert image.getpixel((i * TILE, 10)) == BLACK
            assert image.getpixel((10, i * TILE)) == BLACK
        assert image.getpixel((last, last)) == BLACK
        # Inside an empty cell
        assert image.getpixel((TILE + 12, TILE + 12)) == WHITE

    def test_deterministic(self, renderer):
        players = [make_player(1, 2, 2, actions=4), make_player(2, 5, 6, health=1, range_=3)]
        first = renderer.render(make_game(), players)
        second = renderer.render(make_game(), players)
        assert first.png == second.png

    def test_health_colors(self, renderer):
        players = [make_player(1, 1, 1, health=3), make_player(2, 5, 5, health=1)]
        image = open_png(renderer.render(make_game(), players))
        # Left of the labels but inside the marker
        assert image.getpixel((1 * TILE + 6, 1 * TILE + 12)) == (0, 196, 0)
        assert image.getpixel((5 * TILE + 6, 5 * TILE + 12)) == (196, 0, 0)

    def test_range_overlay_tiers(self, renderer):
        players = [make_player(1, 1, 1, range_=1), make_player(2, 5, 5, range_=3)]
        image = open_png(renderer.render(make_game(12, 12), players))

        # One cell right of a range 1 player, grey tint
        r, g, b = image.getpixel((2 * TILE + 17, 1 * TILE + 12))
        assert r == g == b
        assert r < 255

        # Three cells left of a range 3 player, red tint
        r, g, b = image.getpixel((2 * TILE + 12, 5 * TILE + 12))
        assert r > g
        assert g == b

        # Outside every range stays white
        assert image.getpixel((10 * TILE + 12, 1 * TILE + 12)) == WHITE

    def test_narrow_ranges_drawn_over_wide_ones(self, renderer):
        wide = make_player(1, 4, 4, range_=3)
        narrow = make_player(2, 6, 4, range_=1)
        overlap_pixel = (7 * TILE + 12, 4 * TILE + 3)

        both = open_png(renderer.render(make_game(12, 12), [wide, narrow]))
        wide_only = open_png(renderer.render(make_game(12, 12), [wide]))

        # The grey tier is layered on top of the red tier
        r, g, b = both.getpixel(overlap_pixel)
        r_wide, g_wide, b_wide = wide_only.getpixel(overlap_pixel)
        assert g > g_wide
        assert r - g < r_wide - g_wide

    def test_player_summaries(self, renderer):
        players = [
            make_player(30, 0, 0, health=2, actions=12, range_=2),
            make_player(10, 7, 7, health=0, actions=0, range_=1),
        ]
        board = renderer.render(make_game(), players)
        assert [(p.index, p.user_id, p.health, p.actions, p.range) for p in board.players] == [
            (0, 30, 2, 12, 2),
            (1, 10, 0, 0, 1),
        ]
        assert (board.players[1].pos_x, board.players[1].pos_y) == (7, 7)

    def test_invalid_health_logged_not_drawn(self, renderer, caplog):
        player = make_player(1, 3, 3, health=7, range_=2)
        with caplog.at_level(logging.ERROR, logger="tankgame.services.board_renderer"):
            board = renderer.render(make_game(), [player])

        assert "Invalid player data" in caplog.text
        assert board.players[0].health == 7
        image = open_png(board)
        # No marker, only the range tint under the label area
        r, g, b = image.getpixel((3 * TILE + 6, 3 * TILE + 12))
        assert r == g
        assert r > 200

    def test_labels_drawn(self, renderer):
        empty = open_png(renderer.render(make_game(), [make_player(1, 2, 2, health=0)]))
        pixels = [
            empty.getpixel((x, y))
            for x in range(2 * TILE + 1, 3 * TILE)
            for y in range(2 * TILE + 1, 3 * TILE)
        ]
        assert any(max(pixel) < 100 for pixel in pixels)

    def test_tile_size_must_fit_a_marker(self):
        with pytest.raises(ValueError):
            BoardRenderer(tile_size=2)

    def test_custom_tile_size(self):
        board = BoardRenderer(tile_size=10).render(make_game(9, 8), [make_player(1, 0, 0)])
        assert open_png(board).size == (91, 81)
