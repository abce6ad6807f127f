"""Session dependency for the API routes."""

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.database.connection import ConnectionManager


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connections


def get_db(connections: ConnectionManager = Depends(get_connection_manager)) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a session per request
    and guarantees it is closed afterwards.
    """
    db = connections.connect().session_factory()
    try:
        yield db
    finally:
        db.close()
