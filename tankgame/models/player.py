from sqlalchemy import Column, BigInteger, Integer, DateTime, CheckConstraint
from sqlalchemy.sql import func

from tankgame.core.database import Base


class Player(Base):
    __tablename__ = "players"

    # No foreign key to games: destroy deletes the game row before its players
    guild_id = Column(BigInteger, primary_key=True, autoincrement=False)
    user_id = Column(BigInteger, primary_key=True, autoincrement=False, index=True)
    pos_x = Column(Integer, nullable=False)
    pos_y = Column(Integer, nullable=False)
    health = Column(Integer, nullable=False, default=3)
    actions = Column(Integer, nullable=False, default=0)
    range = Column(Integer, nullable=False, default=1)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        # Upper bounds depend on the game's size and are validated by the engine
        CheckConstraint('pos_x >= 0', name='valid_pos_x_min'),
        CheckConstraint('pos_y >= 0', name='valid_pos_y_min'),
    )

    def __repr__(self):
        return (
            f"<Player guild={self.guild_id} user={self.user_id} at=({self.pos_x}, {self.pos_y}) "
            f"h={self.health} a={self.actions} r={self.range}>"
        )
