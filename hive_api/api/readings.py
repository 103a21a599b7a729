import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from hive_api.api.deps import get_ingestion_service, get_query_service
from hive_api.core.errors import HiveApiError
from hive_api.services.ingestion_service import IngestionService
from hive_api.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_limit(raw: Optional[str], default: int) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


@router.post("/readings", status_code=202)
async def ingest_reading(
    payload: Any = Body(...),
    service: IngestionService = Depends(get_ingestion_service),
):
    identity = await service.ingest(payload)
    return {"status": "accepted", "identity": identity}


@router.get("/query")
async def query_readings(
    request: Request,
    service: QueryService = Depends(get_query_service),
):
    """Latest readings of one hive (array) or several hives (object by hive)."""
    hives = [hive for hive in request.query_params.getlist("hive") if hive]
    if not hives:
        return JSONResponse(
            status_code=400, content={"error": "Missing hive query parameter"}
        )

    limit = parse_limit(request.query_params.get("limit"), service.default_limit)

    try:
        if len(hives) == 1:
            return await service.query_one(hives[0], limit)
        return await service.query_many(hives, limit)
    except HiveApiError as e:
        logger.error(f"Query for hives {hives} failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Query failed"})
