import os
import tempfile

# Settings are read at import time, keep tests off any real database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "False"
os.environ["ENFORCE_MIN_BOARD_SIZE"] = "True"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tankgame.api.deps import get_db
from tankgame.core.database import Base, enable_sqlite_savepoints
from tankgame.models.game import Game
from tankgame.models.player import Player
from tankgame.services.board_renderer import BoardRenderer
from tankgame.services.game_service import GameService
from tankgame.services.game_store import SqlGameStore
from main import app


@pytest.fixture(scope="session")
def test_db():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    enable_sqlite_savepoints(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)

@pytest.fixture
def db_session(test_db):
    session = test_db()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture(autouse=True)
def db_cleanup(db_session):
    yield
    db_session.rollback()
    for model in [Player, Game]:
        db_session.query(model).delete()
    db_session.commit()

@pytest.fixture
def store(db_session):
    return SqlGameStore(db_session)

@pytest.fixture
def service():
    return GameService(renderer=BoardRenderer(tile_size=25), enforce_min_board_size=True)

@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def fixed_coordinates():
    """Factory for coordinate sources handing out cells in order, repeating the last."""
    def make(*cells):
        remaining = list(cells)

        def source(width, height):
            if len(remaining) > 1:
                return remaining.pop(0)
            return remaining[0]

        return source

    return make
