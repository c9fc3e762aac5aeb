"""
Background consistency jobs for the invariants the engine enforces itself.

Players have no foreign key to their game and health/range/position bounds are
checked by the engine rather than the schema, so these jobs look for rows that
slipped past it.
"""
import logging
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tankgame.core.game_config import MAX_HEALTH, MAX_RANGE, MIN_RANGE
from tankgame.models.game import Game
from tankgame.models.player import Player

logger = logging.getLogger(__name__)


class ConsistencyManager:
    """Manages background jobs for data consistency and integrity."""

    def __init__(self, db: Session):
        self.db = db

    def validate_data_integrity(self) -> Dict[str, Any]:
        """Run all data integrity checks."""
        logger.info("Starting data integrity validation")

        issues = {
            "orphaned_players": self._check_orphaned_players(),
            "out_of_bounds_players": self._check_out_of_bounds_players(),
            "invalid_player_stats": self._check_invalid_player_stats(),
        }

        total_issues = sum(len(issue_list) for issue_list in issues.values())

        logger.info(f"Data integrity check completed: {total_issues} total issues found")

        return {
            "timestamp": datetime.now(),
            "total_issues": total_issues,
            "issues": issues
        }

    def _check_orphaned_players(self) -> list:
        """Find players whose guild has no game."""
        orphaned = self.db.query(
            Player.guild_id, Player.user_id
        ).outerjoin(Game, Player.guild_id == Game.guild_id).filter(
            Game.guild_id.is_(None)
        ).all()

        issues = [
            {"guild_id": guild_id, "user_id": user_id}
            for guild_id, user_id in orphaned
        ]

        if issues:
            logger.warning(f"Found {len(issues)} orphaned players")

        return issues

    def _check_out_of_bounds_players(self) -> list:
        """Find players positioned outside their game's board."""
        rows = self.db.query(
            Player.guild_id, Player.user_id, Player.pos_x, Player.pos_y,
            Game.width, Game.height
        ).join(Game, Player.guild_id == Game.guild_id).filter(
            or_(
                Player.pos_x < 0,
                Player.pos_y < 0,
                Player.pos_x >= Game.width,
                Player.pos_y >= Game.height
            )
        ).all()

        issues = [
            {
                "guild_id": guild_id,
                "user_id": user_id,
                "position": (pos_x, pos_y),
                "board": (width, height)
            }
            for guild_id, user_id, pos_x, pos_y, width, height in rows
        ]

        if issues:
            logger.warning(f"Found {len(issues)} players outside their board")

        return issues

    def _check_invalid_player_stats(self) -> list:
        """Find players with health or range the renderer cannot draw."""
        rows = self.db.query(
            Player.guild_id, Player.user_id, Player.health, Player.range
        ).filter(
            or_(
                Player.health < 0,
                Player.health > MAX_HEALTH,
                Player.range < MIN_RANGE,
                Player.range > MAX_RANGE
            )
        ).all()

        issues = [
            {"guild_id": guild_id, "user_id": user_id, "health": health, "range": range_}
            for guild_id, user_id, health, range_ in rows
        ]

        if issues:
            logger.warning(f"Found {len(issues)} players with invalid health or range")

        return issues

    def cleanup_orphaned_players(self) -> int:
        """Delete players left behind by a game that no longer exists."""
        live_guilds = select(Game.guild_id)
        deleted_count = self.db.query(Player).filter(
            Player.guild_id.notin_(live_guilds)
        ).delete(synchronize_session=False)

        self.db.commit()

        logger.info(f"Cleaned up {deleted_count} orphaned players")
        return deleted_count

    def system_stats(self) -> Dict[str, int]:
        return {
            "games": self.db.query(func.count(Game.guild_id)).scalar() or 0,
            "players": self.db.query(func.count(Player.user_id)).scalar() or 0,
            "total_actions": self.db.query(func.sum(Player.actions)).scalar() or 0,
        }
