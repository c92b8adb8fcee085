"""Health routes - liveness and readiness checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from savings.api.deps import get_db
from savings.schemas.api import HealthResponse
from savings.services.data_service import DataService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health():
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/ready")
def readiness(response: Response, db: Session = Depends(get_db)):
    """
    Readiness probe - checks if the service can reach the ledger store.

    Returns 200 with the ledger size if ready, 503 if database is unreachable.
    """
    try:
        db.execute(text("SELECT 1"))
        transactions = DataService(db).get_transaction_count()
        return {"status": "ready", "transactions": transactions, "timestamp": datetime.now(timezone.utc).isoformat()}
    except SQLAlchemyError as e:
        response.status_code = 503
        return {"status": "not_ready", "error": str(e), "timestamp": datetime.now(timezone.utc).isoformat()}
