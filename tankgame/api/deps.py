"""
Dependency injection for API endpoints.
"""
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from tankgame.core.database import SessionLocal
from tankgame.services.game_store import SqlGameStore


def get_db() -> Generator:
    """
    Database dependency that ensures proper session cleanup.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> SqlGameStore:
    """Game store bound to the request's session."""
    return SqlGameStore(db)
