# carwash/routers/health_routes.py

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from carwash import __version__
from carwash.db import get_session

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["health"],
)


@router.get("/health")
def health_check(session: Session = Depends(get_session)):
    body = {
        "status": "ok",
        "database": "ok",
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
    }
    try:
        session.connection().execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        body["status"] = "degraded"
        body["database"] = "unavailable"
        return JSONResponse(status_code=503, content=body)
    return body
