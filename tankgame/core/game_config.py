"""
Configuration constants for the tank game engine.
"""

# Guild and user ids are stored as signed 64 bit integers
MAX_ID = 2**63 - 1

# Board size limits (stored as unsigned bytes)
MIN_BOARD_SIZE = 8
MAX_BOARD_SIZE = 255
DEFAULT_BOARD_SIZE = 16
DEFAULT_GAME_NAME = "Game"

# New player stats
START_HEALTH = 3
START_ACTIONS = 0
START_RANGE = 1
MAX_HEALTH = 3
MIN_RANGE = 1
MAX_RANGE = 3

# Join placement
MAX_JOIN_ATTEMPTS = 32

# Supply
MIN_SUPPLY = -9
MAX_SUPPLY = 9
DEFAULT_SUPPLY = 1
SUPPLY_ALL = "all"

# Moving costs a single action point
MOVE_COST = 1


def is_valid_board_size(width: int, height: int) -> bool:
    """Check if both board dimensions are within the supported range."""
    return (MIN_BOARD_SIZE <= width <= MAX_BOARD_SIZE
            and MIN_BOARD_SIZE <= height <= MAX_BOARD_SIZE)


def parse_supply_amount(raw) -> int:
    """
    Normalize a supply amount argument.

    Integers (or integer strings) within [MIN_SUPPLY, MAX_SUPPLY] are kept,
    anything else falls back to DEFAULT_SUPPLY rather than being rejected.
    Whole floats such as 2.0 count as integers, fractional ones do not.
    """
    if isinstance(raw, bool) or raw is None:
        return DEFAULT_SUPPLY
    if isinstance(raw, float):
        if not raw.is_integer():
            return DEFAULT_SUPPLY
        raw = int(raw)
    try:
        amount = int(str(raw).strip())
    except ValueError:
        return DEFAULT_SUPPLY
    if MIN_SUPPLY <= amount <= MAX_SUPPLY:
        return amount
    return DEFAULT_SUPPLY


def pluralize_actions(amount: int) -> str:
    return "action" if abs(amount) == 1 else "actions"
