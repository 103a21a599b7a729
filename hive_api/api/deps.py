from fastapi import Request

from hive_api.services.ingestion_service import IngestionService
from hive_api.services.query_service import QueryService


def get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service
