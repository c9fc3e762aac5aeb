"""
Exception handlers for the tank game API.

Rule failures become user facing messages. Integrity and database failures
are logged with their traceback since they mean the store and the engine
disagree or the store is unusable.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tankgame.core.config import settings
from tankgame.core.exceptions import (
    GameException, GameNotFound, PlayerNotFound, GameAlreadyExists,
    AlreadyJoined, InvalidDirection, InvalidBoardSize, BlockedByWall,
    OutOfActions, BoardFull, GameIntegrityError
)

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, detail: str, error_code: str, request: Request) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "error_code": error_code,
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def game_not_found_handler(request: Request, exc: GameNotFound) -> JSONResponse:
    """Handle missing game exceptions."""
    return create_error_response(404, str(exc), "GAME_NOT_FOUND", request)


async def player_not_found_handler(request: Request, exc: PlayerNotFound) -> JSONResponse:
    """Handle missing player exceptions."""
    return create_error_response(404, str(exc), "PLAYER_NOT_FOUND", request)


async def game_already_exists_handler(request: Request, exc: GameAlreadyExists) -> JSONResponse:
    return create_error_response(409, str(exc), "GAME_EXISTS", request)


async def already_joined_handler(request: Request, exc: AlreadyJoined) -> JSONResponse:
    return create_error_response(409, str(exc), "ALREADY_JOINED", request)


async def invalid_direction_handler(request: Request, exc: InvalidDirection) -> JSONResponse:
    return create_error_response(400, f"Invalid direction: {exc}", "INVALID_DIRECTION", request)


async def board_full_handler(request: Request, exc: BoardFull) -> JSONResponse:
    return create_error_response(503, str(exc), "BOARD_FULL", request)


async def invalid_board_size_handler(request: Request, exc: InvalidBoardSize) -> JSONResponse:
    return create_error_response(400, str(exc), "INVALID_BOARD_SIZE", request)


async def blocked_by_wall_handler(request: Request, exc: BlockedByWall) -> JSONResponse:
    return create_error_response(400, str(exc), "BLOCKED_BY_WALL", request)


async def out_of_actions_handler(request: Request, exc: OutOfActions) -> JSONResponse:
    return create_error_response(400, str(exc), "OUT_OF_ACTIONS", request)


async def game_exception_handler(request: Request, exc: GameException) -> JSONResponse:
    """Handle generic game exceptions."""
    return create_error_response(400, str(exc), "GAME_ERROR", request)


async def integrity_error_handler(request: Request, exc: GameIntegrityError) -> JSONResponse:
    """Handle store/engine disagreements."""
    logger.error(f"Game integrity failure on {request.url.path}: {exc}", exc_info=exc)
    return create_error_response(500, str(exc), "INTEGRITY_ERROR", request)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database failures, the transaction has already been rolled back."""
    logger.error(f"Database error on {request.url.path}: {exc}", exc_info=exc)

    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "Database unavailable, try again later"

    return create_error_response(500, detail, "DATABASE_ERROR", request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with better formatting."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": errors,
            "error_code": "VALIDATION_ERROR",
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(exc.status_code, exc.detail, f"HTTP_{exc.status_code}", request)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    return create_error_response(500, detail, "INTERNAL_ERROR", request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(GameNotFound, game_not_found_handler)
    app.add_exception_handler(PlayerNotFound, player_not_found_handler)
    app.add_exception_handler(GameAlreadyExists, game_already_exists_handler)
    app.add_exception_handler(AlreadyJoined, already_joined_handler)
    app.add_exception_handler(InvalidDirection, invalid_direction_handler)
    app.add_exception_handler(BoardFull, board_full_handler)
    app.add_exception_handler(InvalidBoardSize, invalid_board_size_handler)
    app.add_exception_handler(BlockedByWall, blocked_by_wall_handler)
    app.add_exception_handler(OutOfActions, out_of_actions_handler)
    app.add_exception_handler(GameException, game_exception_handler)
    app.add_exception_handler(GameIntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
