# mobile_service/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + email provider reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from mobile_service.database import get_db
from mobile_service.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Email provider: "disabled" without an API key, otherwise reachability
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "email": "disabled",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    if settings.RESEND_API_KEY:
        try:
            resp = requests.get(
                settings.RESEND_API_URL.rsplit("/", 1)[0] + "/domains",
                headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
                timeout=3,
            )
            result["email"] = "ok" if resp.status_code < 400 else f"http_{resp.status_code}"
        except requests.exceptions.RequestException:
            result["email"] = "unreachable"
            result["status"] = "degraded"

    return result
