class GameException(Exception):
    """Base exception for game rule failures reported back to the player."""
    pass


class GameNotFound(GameException):
    """Raised when no game is in progress for a guild."""
    pass


class PlayerNotFound(GameException):
    """Raised when a user has no player in the guild's game."""
    pass


class GameAlreadyExists(GameException):
    """Raised when creating a game for a guild that already has one."""
    pass


class AlreadyJoined(GameException):
    """Raised when a user tries to join a game twice."""
    pass


class InvalidBoardSize(GameException):
    """Raised when board dimensions are outside the supported range."""
    pass


class InvalidDirection(GameException):
    """Raised when direction text cannot be parsed."""
    pass


class BlockedByWall(GameException):
    """Raised when a move would leave the board."""
    pass


class OutOfActions(GameException):
    """Raised when a player has no action points left to move."""
    pass


class BoardFull(GameException):
    """Raised when every join placement attempt failed."""
    pass


class GameIntegrityError(Exception):
    """Raised when the store disagrees with what the engine just read."""
    pass
