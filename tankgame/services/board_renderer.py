"""
Board rendering.

Turns a read-only snapshot of a game and its players into a PNG: grid lines,
translucent range overlays (widest first so narrower ranges sit on top),
health coloured markers, and index/action labels for each player. The output
is deterministic for identical inputs.
"""
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from tankgame.core.game_config import MAX_HEALTH, MAX_RANGE, MIN_RANGE

logger = logging.getLogger(__name__)

DEFAULT_TILE_SIZE = 25

BACKGROUND_COLOR = (255, 255, 255)
LINE_COLOR = (0, 0, 0)
TEXT_COLOR = (0, 0, 0)

# Indexed by health, 0 is a faded marker for a knocked out tank
HEALTH_COLORS = [
    (196, 196, 196, 128),
    (196, 0, 0, 255),
    (196, 196, 0, 255),
    (0, 196, 0, 255),
]

RANGE_COLORS = {
    1: (196, 196, 196, 64),
    2: (196, 196, 0, 64),
    3: (196, 0, 0, 64),
}


@dataclass(frozen=True)
class GameSnapshot:
    guild_id: int
    name: str
    width: int
    height: int

    @classmethod
    def from_model(cls, game) -> "GameSnapshot":
        return cls(guild_id=game.guild_id, name=game.name, width=game.width, height=game.height)


@dataclass(frozen=True)
class PlayerSnapshot:
    user_id: int
    pos_x: int
    pos_y: int
    health: int
    actions: int
    range: int

    @classmethod
    def from_model(cls, player) -> "PlayerSnapshot":
        return cls(
            user_id=player.user_id,
            pos_x=player.pos_x,
            pos_y=player.pos_y,
            health=player.health,
            actions=player.actions,
            range=player.range,
        )


@dataclass(frozen=True)
class PlayerSummary:
    """Legend data for one player, keyed by the index drawn on the board."""
    index: int
    user_id: int
    pos_x: int
    pos_y: int
    health: int
    actions: int
    range: int


@dataclass
class BoardImage:
    game_name: str
    width: int
    height: int
    png: bytes
    players: List[PlayerSummary] = field(default_factory=list)


class BoardRenderer:

    def __init__(self, tile_size: int = DEFAULT_TILE_SIZE):
        if tile_size < 3:
            raise ValueError(f"Tile size must be at least 3 pixels, got {tile_size}")
        self.tile_size = tile_size
        self.text_size = (tile_size * 2) // 3
        self.single_digit_nudge = (3 * self.text_size) // 7
        self._font = None

    @property
    def font(self):
        if self._font is None:
            self._font = ImageFont.load_default(size=self.text_size)
        return self._font

    def image_size(self, width: int, height: int) -> Tuple[int, int]:
        return width * self.tile_size + 1, height * self.tile_size + 1

    def render(self, game, players: Sequence) -> BoardImage:
        """Render a game and its players, in the given order, to PNG bytes."""
        image_width, image_height = self.image_size(game.width, game.height)
        image = Image.new("RGB", (image_width, image_height), BACKGROUND_COLOR)
        # RGBA drawing on an RGB image blends translucent fills
        draw = ImageDraw.Draw(image, "RGBA")

        self._draw_grid(draw, game.width, game.height, image_width, image_height)
        self._draw_ranges(draw, players)

        summaries = []
        for index, player in enumerate(players):
            self._draw_player(draw, game, index, player)
            summaries.append(PlayerSummary(
                index=index,
                user_id=player.user_id,
                pos_x=player.pos_x,
                pos_y=player.pos_y,
                health=player.health,
                actions=player.actions,
                range=player.range,
            ))

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return BoardImage(
            game_name=game.name,
            width=image_width,
            height=image_height,
            png=buffer.getvalue(),
            players=summaries,
        )

    def _cell_center(self, player) -> Tuple[int, int]:
        half = self.tile_size // 2
        return (player.pos_x * self.tile_size + half,
                player.pos_y * self.tile_size + half)

    def _draw_grid(self, draw, width: int, height: int,
                   image_width: int, image_height: int) -> None:
        for x in range(width + 1):
            draw.line([(x * self.tile_size, 0), (x * self.tile_size, image_height - 1)],
                      fill=LINE_COLOR)
        for y in range(height + 1):
            draw.line([(0, y * self.tile_size), (image_width - 1, y * self.tile_size)],
                      fill=LINE_COLOR)

    def _draw_ranges(self, draw, players: Sequence) -> None:
        for range_ in range(MAX_RANGE, MIN_RANGE - 1, -1):
            dist = range_ * self.tile_size + self.tile_size // 3
            for player in players:
                if player.range != range_:
                    continue
                cx, cy = self._cell_center(player)
                draw.rectangle([cx - dist, cy - dist, cx + dist, cy + dist],
                               fill=RANGE_COLORS[range_])

    def _draw_player(self, draw, game, index: int, player) -> None:
        cx, cy = self._cell_center(player)
        if 0 <= player.health <= MAX_HEALTH:
            radius = self.tile_size // 3
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius],
                         fill=HEALTH_COLORS[player.health])
        else:
            logger.error(f"Invalid player data in game {game.name}: {player}")

        left = player.pos_x * self.tile_size + 2
        top = player.pos_y * self.tile_size
        self._draw_label(draw, index, (left, top + 2))
        self._draw_label(draw, player.actions, (left, top + self.tile_size // 2 + 1))

    def _draw_label(self, draw, value: int, origin: Tuple[int, int]) -> None:
        x, y = origin
        if 0 <= value < 10:
            x += self.single_digit_nudge
        draw.text((x, y), str(value), fill=TEXT_COLOR, font=self.font)
