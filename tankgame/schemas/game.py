from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional, Union

from tankgame.core.game_config import (
    MAX_BOARD_SIZE, MAX_ID, DEFAULT_BOARD_SIZE, DEFAULT_GAME_NAME
)
from tankgame.services.direction import Direction


class GameCreate(BaseModel):
    name: Optional[str] = Field(
        None,
        max_length=100,
        description=f"Display name of the game, defaults to `{DEFAULT_GAME_NAME}`"
    )
    # The minimum size is checked by the engine, it may only be advisory
    width: Optional[int] = Field(
        None, ge=1, le=MAX_BOARD_SIZE,
        description=f"Board width in cells, defaults to {DEFAULT_BOARD_SIZE}"
    )
    height: Optional[int] = Field(
        None, ge=1, le=MAX_BOARD_SIZE,
        description=f"Board height in cells, defaults to {DEFAULT_BOARD_SIZE}"
    )


class GameResponse(BaseModel):
    guild_id: int
    name: str
    width: int
    height: int
    warnings: List[str] = []
    message: str


class GameDestroyedResponse(BaseModel):
    name: str
    players_removed: int
    message: str


class JoinGame(BaseModel):
    user_id: int = Field(..., ge=0, le=MAX_ID, description="ID of the user joining the game")


class PlayerResponse(BaseModel):
    guild_id: int
    user_id: int
    pos_x: int
    pos_y: int
    health: int
    actions: int
    range: int
    message: str


class MoveCreate(BaseModel):
    direction: str = Field(
        ...,
        min_length=1,
        max_length=32,
        description="Numpad digit, compass or screen direction, e.g. `8`, `ne`, `up-right`"
    )


class BoardPlayer(BaseModel):
    index: int
    user_id: int
    pos_x: int
    pos_y: int
    health: int
    actions: int
    range: int

    class Config:
        from_attributes = True


class BoardResponse(BaseModel):
    game_name: str
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    filename: str
    image_png: str = Field(..., description="Base64 encoded PNG")
    players: List[BoardPlayer]


class MoveResponse(BaseModel):
    guild_id: int
    user_id: int
    direction: Direction
    pos_x: int
    pos_y: int
    actions: int
    message: str
    board: BoardResponse


class SupplyMention(BaseModel):
    user_id: int = Field(..., ge=0, le=MAX_ID)
    name: str = Field(..., min_length=1)


class SupplyRequest(BaseModel):
    amount: Optional[Union[int, float, str]] = Field(
        None,
        description="Points to grant, -9 to 9; anything else supplies 1"
    )
    target: Union[Literal["all"], List[SupplyMention]] = Field(
        ...,
        description="`all` for every player, or the mentioned users"
    )

    @field_validator("target", mode="before")
    @classmethod
    def normalize_keyword(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SupplyResponse(BaseModel):
    amount: int
    all_players: bool
    updated_count: int
    updated: List[str]
    skipped: List[str]
    message: str
