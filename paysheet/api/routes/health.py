from datetime import datetime, timezone

from fastapi import APIRouter

from paysheet.api.responses import ok


router = APIRouter()


@router.get("/health")
def health():
    body = ok(message="Paysheet API is running")
    body["status"] = "ok"
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body
