"""
Database migration script to set up the initial schema.
"""
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./tankgame.db"
)

def run_migrations():
    """Run database migrations."""
    engine = create_engine(DATABASE_URL)

    with engine.connect() as conn:
        # Create tables
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS games (
                guild_id BIGINT NOT NULL PRIMARY KEY,
                name VARCHAR(100) NOT NULL DEFAULT 'Game',
                width INTEGER NOT NULL CHECK (width BETWEEN 1 AND 255),
                height INTEGER NOT NULL CHECK (height BETWEEN 1 AND 255),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """))

        # No foreign key: destroying a game deletes the game row before its players
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS players (
                guild_id BIGINT NOT NULL,
                user_id BIGINT NOT NULL,
                pos_x INTEGER NOT NULL CHECK (pos_x >= 0),
                pos_y INTEGER NOT NULL CHECK (pos_y >= 0),
                health INTEGER NOT NULL DEFAULT 3,
                actions INTEGER NOT NULL DEFAULT 0,
                range INTEGER NOT NULL DEFAULT 1,
                joined_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, user_id)
            )
        """))

        # Create indexes for performance (SQLite-compatible)
        for index_name, sql in [
            ("ix_players_user_id", "CREATE INDEX ix_players_user_id ON players (user_id);"),
        ]:
            result = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='index' AND name=:name"),
                {"name": index_name}
            )
            if not result.fetchone():
                conn.execute(text(sql))

        conn.commit()

    print("Database migrations completed successfully.")


if __name__ == "__main__":
    print("Starting database migration...")

    # Run migrations
    run_migrations()

    print("Migration complete!")
