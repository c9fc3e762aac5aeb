"""
Router registration for the tank game API.
"""
from fastapi import FastAPI

from tankgame.api import games


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(games.status_router, prefix="/api/v1", tags=["status"])
    app.include_router(games.router, prefix="/api/v1", tags=["games"])
