from sqlalchemy import Column, BigInteger, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from tankgame.core.database import Base


class Game(Base):
    __tablename__ = "games"

    guild_id = Column(BigInteger, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False, default="Game")
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        # Minimum size is an application setting, only the storage bounds live here
        CheckConstraint('width BETWEEN 1 AND 255', name='valid_width'),
        CheckConstraint('height BETWEEN 1 AND 255', name='valid_height'),
    )

    def is_valid_position(self, x: int, y: int) -> bool:
        """Check if a cell lies on this game's board."""
        return 0 <= x < self.width and 0 <= y < self.height

    def __repr__(self):
        return f"<Game guild={self.guild_id} name={self.name!r} {self.width}x{self.height}>"
