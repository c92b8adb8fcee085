"""API dependencies"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from savings.core.db import SessionLocal
from savings.services.quote_service import QuoteGateway


def get_db() -> Generator[Session, None, None]:
    """Database session per request; always closed, never committed here."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_quote_gateway(request: Request) -> QuoteGateway:
    """Quote gateway built by the app lifespan."""
    return request.app.state.quote_gateway


def sync_rate_limit(request: Request) -> None:
    request.app.state.sync_limiter(request)


def read_rate_limit(request: Request) -> None:
    request.app.state.read_limiter(request)
