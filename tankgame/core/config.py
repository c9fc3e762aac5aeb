from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./tankgame.db"
    )
    DEBUG: bool = os.getenv("DEBUG", "True") == "True"
    DB_TIMEOUT_SECONDS: float = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))
    ENFORCE_MIN_BOARD_SIZE: bool = os.getenv("ENFORCE_MIN_BOARD_SIZE", "True") == "True"
    TILE_SIZE: int = int(os.getenv("TILE_SIZE", "25"))

    class Config:
        env_file = ".env"

settings = Settings()
