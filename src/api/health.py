"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()

ENGINE_ATTRS = ("taming_engine", "bonding_engine", "trick_engine")


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return application, database and engine status."""
    engines = {
        name: hasattr(request.app.state, name) for name in ENGINE_ATTRS
    }
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "engines": engines}
    except Exception:
        return {"status": "error", "database": "disconnected", "engines": engines}
