"""
Game endpoints, one per bot command.

Every route runs a single engine operation for the guild in the path. Rule
failures are raised as GameException subclasses and turned into responses by
the registered exception handlers.
"""
import base64
import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response

from tankgame.api.deps import get_store
from tankgame.core.game_config import MAX_ID, pluralize_actions
from tankgame.schemas import game as game_schemas
from tankgame.services.board_renderer import BoardImage
from tankgame.services.game_service import SupplyTarget, game_service_obj
from tankgame.services.game_store import SqlGameStore

logger = logging.getLogger(__name__)

GuildId = Annotated[int, Path(ge=0, le=MAX_ID, description="Guild the game belongs to")]
UserId = Annotated[int, Path(ge=0, le=MAX_ID)]

status_router = APIRouter()

router = APIRouter(
    prefix="/guilds/{guild_id}",
    responses={404: {"description": "Game or player not found"}}
)


def board_filename() -> str:
    return f"board-{int(time.time())}.png"


def board_response(board: BoardImage) -> game_schemas.BoardResponse:
    return game_schemas.BoardResponse(
        game_name=board.game_name,
        width=board.width,
        height=board.height,
        filename=board_filename(),
        image_png=base64.b64encode(board.png).decode("ascii"),
        players=[game_schemas.BoardPlayer.model_validate(p) for p in board.players]
    )


@status_router.get("/ping")
def ping():
    return {"message": "Pong!"}


@router.post("/game", response_model=game_schemas.GameResponse)
def create_game(
        guild_id: GuildId,
        game: game_schemas.GameCreate,
        store: SqlGameStore = Depends(get_store)
):
    """
    Initialize a new game for the guild.

    Fails with 409 if the guild already has a game.
    """
    created = game_service_obj.create_game(
        store, guild_id, name=game.name, width=game.width, height=game.height
    )
    snapshot = created.game
    return {
        "guild_id": guild_id,
        "name": snapshot.name,
        "width": snapshot.width,
        "height": snapshot.height,
        "warnings": created.warnings,
        "message": f"Created new game `{snapshot.name}` of size {snapshot.width}x{snapshot.height}"
    }


@router.delete("/game", response_model=game_schemas.GameDestroyedResponse)
def destroy_game(guild_id: GuildId, store: SqlGameStore = Depends(get_store)):
    """Destroy the guild's game along with all of its players."""
    destroyed = game_service_obj.destroy_game(store, guild_id)
    return {
        "name": destroyed.name,
        "players_removed": destroyed.players_removed,
        "message": f"Game destroyed: {destroyed.name}"
    }


@router.post("/players", response_model=game_schemas.PlayerResponse)
def join_game(
        guild_id: GuildId,
        player: game_schemas.JoinGame,
        store: SqlGameStore = Depends(get_store)
):
    """
    Join the current game board.

    The player is dropped on a random cell with 3 health, no actions and a
    range of 1.
    """
    joined = game_service_obj.join_game(store, guild_id, player.user_id)
    return {
        "guild_id": guild_id,
        "user_id": joined.user_id,
        "pos_x": joined.pos_x,
        "pos_y": joined.pos_y,
        "health": joined.health,
        "actions": joined.actions,
        "range": joined.range,
        "message": "You joined the game"
    }


@router.post("/players/{user_id}/move", response_model=game_schemas.MoveResponse)
def move_player(
        guild_id: GuildId,
        user_id: UserId,
        move: game_schemas.MoveCreate,
        store: SqlGameStore = Depends(get_store)
):
    """
    Move a single step in any of the 8 surrounding squares, spending one action.

    Accepted directions:
    - Numpad digits where 8 is up, 2 is down, 3 is down-right, etc.
    - Single letters like `u`, `d`, `l`, `r`, `n`, `e`, `s`, `w`
    - Two letters like `ne`, `sw`, `ur`, `dl`
    - Words like `north`, `left`, `north-east`, `up-right`

    Returns the new position and the board after the move.
    """
    result = game_service_obj.move_player(store, guild_id, user_id, move.direction)
    return {
        "guild_id": guild_id,
        "user_id": user_id,
        "direction": result.direction,
        "pos_x": result.pos_x,
        "pos_y": result.pos_y,
        "actions": result.actions,
        "message": "Successfully moved, showing board",
        "board": board_response(result.board)
    }


@router.post("/supply", response_model=game_schemas.SupplyResponse)
def supply(
        guild_id: GuildId,
        request: game_schemas.SupplyRequest,
        store: SqlGameStore = Depends(get_store)
):
    """
    Supply action points to players, at most 9 at once.

    `target` is `all` for every player or the list of mentioned users. Users
    who are not playing are reported in `skipped`.
    """
    if isinstance(request.target, str):
        targets = request.target
    else:
        targets = [SupplyTarget(user_id=m.user_id, name=m.name) for m in request.target]

    result = game_service_obj.supply(store, guild_id, request.amount, targets)

    noun = pluralize_actions(result.amount)
    if result.all_players:
        message = f"Supply {result.amount} {noun} to all is complete"
    else:
        message = f"Supply {result.amount} {noun} to each complete: {', '.join(result.updated)}"
        for name in result.skipped:
            message += f"\n{name} is not a current player"

    return {
        "amount": result.amount,
        "all_players": result.all_players,
        "updated_count": result.updated_count,
        "updated": result.updated,
        "skipped": result.skipped,
        "message": message
    }


@router.get("/board", response_model=game_schemas.BoardResponse)
def show_board(guild_id: GuildId, store: SqlGameStore = Depends(get_store)):
    """Render the board with the legend data for each numbered player."""
    return board_response(game_service_obj.board(store, guild_id))


@router.get("/board.png", response_class=Response)
def show_board_png(guild_id: GuildId, store: SqlGameStore = Depends(get_store)):
    """Render the board as a raw PNG."""
    board = game_service_obj.board(store, guild_id)
    return Response(
        content=board.png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{board_filename()}"'}
    )
