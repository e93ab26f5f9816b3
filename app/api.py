"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from app.schemas import ArchivalEnvelope, ArchiveObject, WeatherRecord
from datastore.weather_table import WeatherTable, build_default_table
from errors import DecodeError, NotFoundError, StoreError
from services.history import HistoryRequest, HistoryService, build_default_history_service
from storage.weather_archive import ARCHIVE_PREFIX, WeatherArchive, build_default_archive

router = APIRouter()

_ALL_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE", "TRACE"]


def get_history_service() -> HistoryService:
    return build_default_history_service()


def get_table() -> WeatherTable:
    return build_default_table()


def get_archive() -> WeatherArchive:
    return build_default_archive()


@router.api_route(
    "/weather/history",
    methods=_ALL_METHODS,
    summary="Weather records for a city over a recent time window.",
)
def weather_history(
    request: Request,
    service: HistoryService = Depends(get_history_service),
) -> Response:
    result = service.handle(
        HistoryRequest(
            method=request.method,
            headers=dict(request.headers),
            query=dict(request.query_params),
        )
    )
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )


@router.get(
    "/weather/records/{record_id}",
    response_model=WeatherRecord,
    summary="Fetch a single stored weather record.",
)
def get_weather_record(
    record_id: str,
    timestamp: str = Query(..., description="ISO-8601 collection timestamp of the record."),
    table: WeatherTable = Depends(get_table),
) -> WeatherRecord:
    try:
        return table.get_by_key(record_id, timestamp)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve weather record",
        ) from exc


@router.get(
    "/weather/archive",
    response_model=List[ArchiveObject],
    summary="List archived weather payloads under a key prefix.",
)
def list_archive(
    prefix: str = Query(ARCHIVE_PREFIX),
    archive: WeatherArchive = Depends(get_archive),
) -> List[ArchiveObject]:
    try:
        descriptors = archive.list(prefix)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list archived weather data",
        ) from exc
    return [
        ArchiveObject(key=item.key, size=item.size, last_modified=item.last_modified)
        for item in descriptors
    ]


@router.get(
    "/weather/archive/{key:path}",
    response_model=ArchivalEnvelope,
    summary="Fetch one archived weather payload.",
)
def get_archived_payload(
    key: str,
    archive: WeatherArchive = Depends(get_archive),
) -> ArchivalEnvelope:
    try:
        return archive.get(key)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except (StoreError, DecodeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve archived weather data",
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
