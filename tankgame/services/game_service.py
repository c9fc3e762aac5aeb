import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple, Union

from tankgame.core.config import settings
from tankgame.core.exceptions import (
    AlreadyJoined, BlockedByWall, BoardFull, GameAlreadyExists,
    GameIntegrityError, GameNotFound, InvalidBoardSize, OutOfActions
)
from tankgame.core.game_config import (
    DEFAULT_BOARD_SIZE, DEFAULT_GAME_NAME, MAX_BOARD_SIZE, MAX_JOIN_ATTEMPTS,
    MIN_BOARD_SIZE, MOVE_COST, START_ACTIONS, START_HEALTH, START_RANGE,
    SUPPLY_ALL, is_valid_board_size, parse_supply_amount
)
from tankgame.services.board_renderer import (
    BoardImage, BoardRenderer, GameSnapshot, PlayerSnapshot
)
from tankgame.services.direction import Direction, clamp_move, parse
from tankgame.services.game_store import GameStore

logger = logging.getLogger(__name__)

CoordinateSource = Callable[[int, int], Tuple[int, int]]


def random_coordinates(width: int, height: int) -> Tuple[int, int]:
    """Uniform random cell on a width x height board."""
    return random.randrange(width), random.randrange(height)


@dataclass
class GameCreated:
    game: GameSnapshot
    warnings: List[str] = field(default_factory=list)


@dataclass
class GameDestroyed:
    name: str
    players_removed: int


@dataclass
class MoveResult:
    guild_id: int
    user_id: int
    direction: Direction
    pos_x: int
    pos_y: int
    actions: int
    board: Optional[BoardImage] = None


@dataclass(frozen=True)
class SupplyTarget:
    user_id: int
    name: str


@dataclass
class SupplyResult:
    amount: int
    all_players: bool
    updated_count: int = 0
    updated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class GameService:
    """
    Game lifecycle and player actions for one game per guild.

    Holds no game state of its own: every operation takes the store to work
    against and runs inside a single store transaction.
    """

    def __init__(self, renderer: Optional[BoardRenderer] = None,
                 coordinate_source: Optional[CoordinateSource] = None,
                 max_join_attempts: int = MAX_JOIN_ATTEMPTS,
                 enforce_min_board_size: Optional[bool] = None):
        self.renderer = renderer or BoardRenderer(settings.TILE_SIZE)
        self.coordinate_source = coordinate_source or random_coordinates
        self.max_join_attempts = max_join_attempts
        if enforce_min_board_size is None:
            enforce_min_board_size = settings.ENFORCE_MIN_BOARD_SIZE
        self.enforce_min_board_size = enforce_min_board_size

    def create_game(self, store: GameStore, guild_id: int, name: Optional[str] = None,
                    width: Optional[int] = None, height: Optional[int] = None) -> GameCreated:
        name = (name or "").strip() or DEFAULT_GAME_NAME
        width = DEFAULT_BOARD_SIZE if width is None else width
        height = DEFAULT_BOARD_SIZE if height is None else height

        warnings = []
        if not (1 <= width <= MAX_BOARD_SIZE and 1 <= height <= MAX_BOARD_SIZE):
            raise InvalidBoardSize(
                f"Board size must be between {MIN_BOARD_SIZE}x{MIN_BOARD_SIZE} "
                f"and {MAX_BOARD_SIZE}x{MAX_BOARD_SIZE}, got {width}x{height}"
            )
        if not is_valid_board_size(width, height):
            message = f"Minimum width*height is {MIN_BOARD_SIZE}x{MIN_BOARD_SIZE}"
            if self.enforce_min_board_size:
                raise InvalidBoardSize(message)
            logger.warning(f"Creating undersized {width}x{height} game for guild {guild_id}")
            warnings.append(message)

        with store.transaction():
            if not store.create_game(guild_id, name, width, height):
                raise GameAlreadyExists(
                    "A Game already exists, destroy it first before creating another"
                )

        logger.info(f"Game `{name}` ({width}x{height}) created in guild {guild_id}")
        return GameCreated(
            game=GameSnapshot(guild_id=guild_id, name=name, width=width, height=height),
            warnings=warnings
        )

    def destroy_game(self, store: GameStore, guild_id: int) -> GameDestroyed:
        with store.transaction():
            game = store.find_game(guild_id)
            if not game:
                raise GameNotFound("No game exists to destroy")
            name = game.name

            deleted = store.delete_game(guild_id)
            if deleted != 1:
                logger.error(
                    f"Deleting game `{name}` in guild {guild_id} affected {deleted} rows"
                )
                raise GameIntegrityError(f"Failed to delete game, report to admin: {name}")
            players_removed = store.delete_players(guild_id)

        logger.info(f"Game `{name}` destroyed in guild {guild_id}, removed {players_removed} players")
        return GameDestroyed(name=name, players_removed=players_removed)

    def join_game(self, store: GameStore, guild_id: int, user_id: int) -> PlayerSnapshot:
        with store.transaction():
            if store.find_player(guild_id, user_id):
                raise AlreadyJoined("Already joined to this game")
            game = store.get_game(guild_id)

            for attempt in range(1, self.max_join_attempts + 1):
                pos_x, pos_y = self.coordinate_source(game.width, game.height)
                if not game.is_valid_position(pos_x, pos_y):
                    logger.warning(
                        f"Join attempt {attempt} drew ({pos_x}, {pos_y}) outside "
                        f"{game.width}x{game.height} board"
                    )
                    continue
                if store.insert_player(guild_id, user_id, pos_x, pos_y,
                                       START_HEALTH, START_ACTIONS, START_RANGE):
                    break
                logger.warning(f"Join attempt {attempt} failed for user {user_id} in guild {guild_id}")
            else:
                raise BoardFull("Board appears to be too full to join, try again later")
            game_name = game.name

        logger.info(f"Successfully joined to game `{game_name}`: user {user_id} at ({pos_x}, {pos_y})")
        return PlayerSnapshot(
            user_id=user_id,
            pos_x=pos_x,
            pos_y=pos_y,
            health=START_HEALTH,
            actions=START_ACTIONS,
            range=START_RANGE
        )

    def move_player(self, store: GameStore, guild_id: int, user_id: int,
                    direction: Union[Direction, str]) -> MoveResult:
        if not isinstance(direction, Direction):
            direction = parse(direction)

        with store.transaction():
            game = store.get_game(guild_id)
            player = store.get_player(guild_id, user_id)
            if player.actions < MOVE_COST:
                raise OutOfActions("Out of actions, cannot move")

            target = clamp_move(direction, player.pos_x, player.pos_y, game.width, game.height)
            if target is None:
                raise BlockedByWall("Cannot move past a wall")
            pos_x, pos_y = target

            updated = store.update_player_position(guild_id, user_id, pos_x, pos_y, -MOVE_COST)
            if updated != 1:
                logger.error(
                    f"Moving user {user_id} in guild {guild_id} affected {updated} rows"
                )
                raise GameIntegrityError(f"Failed to move player, report to admin: {user_id}")
            remaining = player.actions - MOVE_COST

        logger.info(f"Successfully moved {user_id} in server {guild_id} to {pos_x}:{pos_y}")
        return MoveResult(
            guild_id=guild_id,
            user_id=user_id,
            direction=direction,
            pos_x=pos_x,
            pos_y=pos_y,
            actions=remaining,
            board=self.board(store, guild_id)
        )

    def supply(self, store: GameStore, guild_id: int, amount,
               targets: Union[str, Iterable[SupplyTarget]]) -> SupplyResult:
        """
        Grant (or revoke, when negative) action points.

        ``targets`` is either "all" for every player in the game, or resolved
        users. Users without a player are skipped and reported by name while
        the others are still updated.
        """
        amount = parse_supply_amount(amount)

        with store.transaction():
            store.get_game(guild_id)

            if isinstance(targets, str):
                if targets.strip().lower() != SUPPLY_ALL:
                    raise ValueError(f"Unknown supply target: {targets}")
                rows = store.update_all_player_actions(guild_id, amount)
                result = SupplyResult(amount=amount, all_players=True, updated_count=rows)
            else:
                result = SupplyResult(amount=amount, all_players=False)
                seen = set()
                for target in targets:
                    if target.user_id in seen:
                        continue
                    seen.add(target.user_id)
                    if store.update_player_actions(guild_id, target.user_id, amount):
                        result.updated.append(target.name)
                    else:
                        logger.info(f"{target.name} is not a current player in guild {guild_id}")
                        result.skipped.append(target.name)
                result.updated_count = len(result.updated)

        logger.info(
            f"Supplied {amount} actions in guild {guild_id} "
            f"to {result.updated_count} players ({len(result.skipped)} skipped)"
        )
        return result

    def board(self, store: GameStore, guild_id: int) -> BoardImage:
        with store.transaction():
            game = GameSnapshot.from_model(store.get_game(guild_id))
            players = [PlayerSnapshot.from_model(p) for p in store.list_players(guild_id)]
        return self.renderer.render(game, players)


game_service_obj = GameService()
