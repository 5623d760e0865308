"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return database status and loaded definition counts."""
    registry = getattr(request.app.state, "registry", None)
    definitions = (
        {domain: registry.count(domain) for domain in registry.domains()}
        if registry is not None
        else {}
    )
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "definitions": definitions}
    except Exception:
        return {"status": "error", "database": "disconnected", "definitions": definitions}
