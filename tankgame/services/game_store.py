"""
Persistence gateway for games and players.

The engine never touches the ORM session directly: it talks to a GameStore,
which owns the transaction boundary. SqlGameStore is the SQLAlchemy backed
implementation used by the API; tests subclass it to inject failures.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol, runtime_checkable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tankgame.core.exceptions import GameNotFound, PlayerNotFound
from tankgame.models.game import Game
from tankgame.models.player import Player

logger = logging.getLogger(__name__)


@runtime_checkable
class GameStore(Protocol):
    """Transactional access to the games and players relations."""

    def transaction(self) -> "Iterator[GameStore]":
        """Context manager committing on success and rolling back on any error."""
        ...

    def get_game(self, guild_id: int) -> Game:
        ...

    def get_player(self, guild_id: int, user_id: int) -> Player:
        ...

    def find_game(self, guild_id: int) -> Optional[Game]:
        ...

    def find_player(self, guild_id: int, user_id: int) -> Optional[Player]:
        ...

    def list_players(self, guild_id: int) -> List[Player]:
        ...

    def create_game(self, guild_id: int, name: str, width: int, height: int) -> bool:
        ...

    def delete_game(self, guild_id: int) -> int:
        ...

    def delete_players(self, guild_id: int) -> int:
        ...

    def insert_player(self, guild_id: int, user_id: int, pos_x: int, pos_y: int,
                      health: int, actions: int, range_: int) -> bool:
        ...

    def update_player_position(self, guild_id: int, user_id: int,
                               pos_x: int, pos_y: int, action_delta: int) -> int:
        ...

    def update_player_actions(self, guild_id: int, user_id: int, delta: int) -> int:
        ...

    def update_all_player_actions(self, guild_id: int, delta: int) -> int:
        ...


class SqlGameStore:
    """GameStore over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["SqlGameStore"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def find_game(self, guild_id: int) -> Optional[Game]:
        return self.db.query(Game).filter(Game.guild_id == guild_id).first()

    def find_player(self, guild_id: int, user_id: int) -> Optional[Player]:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id,
            Player.user_id == user_id
        ).with_for_update().first()

    def get_game(self, guild_id: int) -> Game:
        game = self.find_game(guild_id)
        if not game:
            raise GameNotFound("Game is not in progress")
        return game

    def get_player(self, guild_id: int, user_id: int) -> Player:
        player = self.find_player(guild_id, user_id)
        if not player:
            raise PlayerNotFound("Player is not in a game")
        return player

    def list_players(self, guild_id: int) -> List[Player]:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id
        ).order_by(Player.user_id).all()

    def create_game(self, guild_id: int, name: str, width: int, height: int) -> bool:
        if self.find_game(guild_id):
            return False
        try:
            with self.db.begin_nested():
                self.db.add(Game(guild_id=guild_id, name=name, width=width, height=height))
        except IntegrityError as e:
            logger.info(f"Game insert rejected for guild {guild_id}: {e.orig}")
            return False
        return True

    def delete_game(self, guild_id: int) -> int:
        return self.db.query(Game).filter(
            Game.guild_id == guild_id
        ).delete(synchronize_session=False)

    def delete_players(self, guild_id: int) -> int:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id
        ).delete(synchronize_session=False)

    def insert_player(self, guild_id: int, user_id: int, pos_x: int, pos_y: int,
                      health: int, actions: int, range_: int) -> bool:
        if self.find_player(guild_id, user_id):
            return False
        try:
            with self.db.begin_nested():
                self.db.add(Player(
                    guild_id=guild_id,
                    user_id=user_id,
                    pos_x=pos_x,
                    pos_y=pos_y,
                    health=health,
                    actions=actions,
                    range=range_
                ))
        except IntegrityError as e:
            logger.warning(f"Failed inserting player {user_id} in guild {guild_id}: {e.orig}")
            return False
        return True

    def update_player_position(self, guild_id: int, user_id: int,
                               pos_x: int, pos_y: int, action_delta: int) -> int:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id,
            Player.user_id == user_id
        ).update({
            Player.pos_x: pos_x,
            Player.pos_y: pos_y,
            Player.actions: Player.actions + action_delta,
        }, synchronize_session=False)

    def update_player_actions(self, guild_id: int, user_id: int, delta: int) -> int:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id,
            Player.user_id == user_id
        ).update({Player.actions: Player.actions + delta}, synchronize_session=False)

    def update_all_player_actions(self, guild_id: int, delta: int) -> int:
        return self.db.query(Player).filter(
            Player.guild_id == guild_id
        ).update({Player.actions: Player.actions + delta}, synchronize_session=False)
