"""
Liveness and readiness checks.
"""
import os
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..logging_config import api_logger
from ..responses import error_response, success

router = APIRouter(tags=["health"])

MIN_FREE_BYTES = 100 * 1024 * 1024  # 100 MB


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity"""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "healthy"}
    except Exception as e:
        api_logger.error("Database check failed", error=e)
        return {"status": "unhealthy", "error": "database unavailable"}


def check_storage(path: str) -> Dict[str, Any]:
    """Check that the upload directory exists and has room left"""
    if not os.path.isdir(path):
        return {"status": "unhealthy", "error": "upload directory missing"}

    usage = psutil.disk_usage(path)
    return {
        "status": "healthy" if usage.free >= MIN_FREE_BYTES else "unhealthy",
        "free_gb": round(usage.free / (1024 ** 3), 2),
        "percent_used": usage.percent,
    }


@router.get("/health")
def health():
    """Liveness check."""
    return success({"status": "ok"})


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    """Readiness check: database and upload storage."""
    checks = {
        "database": check_database(db),
        "storage": check_storage(get_settings().media_upload_path),
    }
    if all(c["status"] == "healthy" for c in checks.values()):
        return success({"status": "ready", "checks": checks})
    return error_response(503, "INTERNAL_SERVER_ERROR", "service not ready", details=checks)
