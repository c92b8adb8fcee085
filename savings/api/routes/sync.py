"""Sync routes - operator-triggered upsert of spreadsheet rows."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from savings.api.deps import get_db, sync_rate_limit
from savings.core.config import settings
from savings.core.errors import BadRequestError
from savings.schemas.api import SyncRequest, SyncResponse
from savings.services.sync_service import SyncService

router = APIRouter(prefix="/api", tags=["sync"])


@router.post(
    "/sync-payments",
    response_model=SyncResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(sync_rate_limit)],
    responses={207: {"model": SyncResponse, "description": "Partial success"}},
)
def sync_payments(payload: Any = Body(None), db: Session = Depends(get_db)):
    """
    Upsert a batch of transactions keyed on (date, amount, asset, usd value).

    The body is read as raw JSON and checked here rather than by FastAPI, so
    malformed envelopes get the same error bodies as the sync service.

    - 200: every row synced
    - 207: some rows skipped; ``errors`` lists why
    - 400: body is not a JSON object, or missing / empty batch
    - 401: wrong, missing or non-string password
    - 500: database failure, nothing from the batch was kept
    """
    if not isinstance(payload, dict):
        raise BadRequestError("Invalid payments data", details="request body must be a JSON object")
    request = SyncRequest.model_validate(payload)

    report = SyncService(db, settings.SYNC_PASSWORD).sync(request.credential, request.records)

    body = SyncResponse(
        message=report.message,
        inserted=report.inserted,
        updated=report.updated,
        errors=report.errors or None,
    )
    if report.is_partial:
        return JSONResponse(status_code=207, content=body.model_dump())
    return body
