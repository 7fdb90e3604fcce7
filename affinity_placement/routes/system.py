from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

from affinity_placement.logger import get_logger

router = APIRouter()
_logger = get_logger("api.system")


@router.get("/health", tags=["system"])
async def health() -> Dict[str, str]:
    now = datetime.now(timezone.utc).isoformat()
    _logger.debug("health.check", "Health check", status="ok")
    return {"status": "ok", "time": now}
