"""
Direction parsing and movement resolution.

Players describe a move in many ways: numpad digits (8 is up, 3 is
down-right), single letters (``n``, ``u``, ``r``), two letter combinations
(``ne``, ``dl``), full words (``north``, ``left``) and hyphenated compounds of
two axial words (``north-east``, ``up-right``). All of them resolve to one of
eight canonical directions.
"""
from enum import Enum
from typing import Optional, Tuple

from tankgame.core.exceptions import InvalidDirection


class Direction(str, Enum):
    NORTH = "north"
    NORTH_EAST = "north-east"
    EAST = "east"
    SOUTH_EAST = "south-east"
    SOUTH = "south"
    SOUTH_WEST = "south-west"
    WEST = "west"
    NORTH_WEST = "north-west"

    @property
    def is_axial(self) -> bool:
        return self in AXIAL_DIRECTIONS

    @property
    def offset(self) -> Tuple[int, int]:
        return _OFFSETS[self]


AXIAL_DIRECTIONS = frozenset({Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST})

# Screen convention: x grows to the east, y grows to the south
_OFFSETS = {
    Direction.NORTH: (0, -1),
    Direction.NORTH_EAST: (1, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH_EAST: (1, 1),
    Direction.SOUTH: (0, 1),
    Direction.SOUTH_WEST: (-1, 1),
    Direction.WEST: (-1, 0),
    Direction.NORTH_WEST: (-1, -1),
}

_TOKENS = {
    # numpad
    "8": Direction.NORTH,
    "9": Direction.NORTH_EAST,
    "6": Direction.EAST,
    "3": Direction.SOUTH_EAST,
    "2": Direction.SOUTH,
    "1": Direction.SOUTH_WEST,
    "4": Direction.WEST,
    "7": Direction.NORTH_WEST,
    # compass
    "n": Direction.NORTH,
    "e": Direction.EAST,
    "s": Direction.SOUTH,
    "w": Direction.WEST,
    "ne": Direction.NORTH_EAST,
    "se": Direction.SOUTH_EAST,
    "sw": Direction.SOUTH_WEST,
    "nw": Direction.NORTH_WEST,
    "north": Direction.NORTH,
    "east": Direction.EAST,
    "south": Direction.SOUTH,
    "west": Direction.WEST,
    # screen
    "u": Direction.NORTH,
    "r": Direction.EAST,
    "d": Direction.SOUTH,
    "l": Direction.WEST,
    "ur": Direction.NORTH_EAST,
    "dr": Direction.SOUTH_EAST,
    "dl": Direction.SOUTH_WEST,
    "ul": Direction.NORTH_WEST,
    "up": Direction.NORTH,
    "right": Direction.EAST,
    "down": Direction.SOUTH,
    "left": Direction.WEST,
}

_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}

_DIAGONALS = {
    frozenset({Direction.NORTH, Direction.EAST}): Direction.NORTH_EAST,
    frozenset({Direction.SOUTH, Direction.EAST}): Direction.SOUTH_EAST,
    frozenset({Direction.SOUTH, Direction.WEST}): Direction.SOUTH_WEST,
    frozenset({Direction.NORTH, Direction.WEST}): Direction.NORTH_WEST,
}


def _parse_single(token: str) -> Direction:
    direction = _TOKENS.get(token)
    if direction is None:
        raise InvalidDirection(f"`{token}` is not a known direction")
    return direction


def _parse_axial(token: str) -> Direction:
    direction = _parse_single(token)
    if not direction.is_axial:
        raise InvalidDirection(
            f"`{token}` must be one of north, east, south or west when combined with `-`"
        )
    return direction


def parse(text: str) -> Direction:
    """
    Parse direction text into a Direction.

    Raises InvalidDirection with a readable description when the text does not
    name one of the eight directions.
    """
    if not isinstance(text, str):
        raise InvalidDirection(f"expected direction text, got {type(text).__name__}")
    token = text.strip().lower()
    if not token:
        raise InvalidDirection("no direction given")

    if "-" not in token:
        return _parse_single(token)

    parts = [part.strip() for part in token.split("-")]
    if len(parts) != 2 or not all(parts):
        raise InvalidDirection(f"`{text.strip()}` must be two directions joined by a single `-`")

    first, second = (_parse_axial(part) for part in parts)
    if first == second:
        raise InvalidDirection(f"`{text.strip()}` repeats the same direction")
    if _OPPOSITES[first] == second:
        raise InvalidDirection(f"`{text.strip()}` combines opposite directions")
    return _DIAGONALS[frozenset({first, second})]


def offset(direction: Direction) -> Tuple[int, int]:
    """Unit step (dx, dy) for a direction."""
    return _OFFSETS[direction]


def clamp_move(direction: Direction, x: int, y: int,
               width: int, height: int) -> Optional[Tuple[int, int]]:
    """
    Apply a direction to (x, y).

    Returns the new cell, or None when the step would leave a
    width x height board.
    """
    dx, dy = _OFFSETS[direction]
    new_x, new_y = x + dx, y + dy
    if not (0 <= new_x < width and 0 <= new_y < height):
        return None
    return new_x, new_y
