"""
HTMLVault Backend — Content Route Handlers
============================================

What:  The five content endpoints under /api.
How:   Extract the path id and JSON body, delegate to ContentService, wrap the
       result in its response envelope. Errors raised by the service are
       turned into JSON bodies by the global handlers in main.py.

    POST   /api/upload         create   → 201
    GET    /api/content        list     → 200
    GET    /api/content/{id}   get      → 200
    PUT    /api/content/{id}   update   → 200
    DELETE /api/content/{id}   delete   → 200

The id is taken as a plain string and parsed by the service, so a
non-numeric id yields the API's own 400 body rather than FastAPI's 422.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from htmlvault.database import get_db_session
from htmlvault.schemas.content import (
    ContentDetailResponse,
    ContentListResponse,
    ContentPayload,
    DeleteResponse,
    ErrorResponse,
    UpdateResponse,
    UploadResponse,
)
from htmlvault.services.content_service import content_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Content"])


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={
        400: {"description": "Missing or empty title/html", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Store a new HTML document",
)
async def upload_content(
    payload: ContentPayload,
    db: AsyncSession = Depends(get_db_session),
) -> UploadResponse:
    created = await content_service.create_content(db, payload.title, payload.html)
    return UploadResponse(data=created)


@router.get(
    "/content",
    response_model=ContentListResponse,
    responses={500: {"description": "Database error", "model": ErrorResponse}},
    summary="List all documents, newest first",
    description="Each item carries the HTML length instead of the HTML itself.",
)
async def list_content(
    db: AsyncSession = Depends(get_db_session),
) -> ContentListResponse:
    items = await content_service.list_content(db)
    return ContentListResponse(data=items, count=len(items))


@router.get(
    "/content/{content_id}",
    response_model=ContentDetailResponse,
    responses={
        400: {"description": "Invalid id", "model": ErrorResponse},
        404: {"description": "Content not found", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Get one document including its HTML",
)
async def get_content(
    content_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ContentDetailResponse:
    record = await content_service.get_content(db, content_id)
    return ContentDetailResponse(data=record)


@router.put(
    "/content/{content_id}",
    response_model=UpdateResponse,
    responses={
        400: {"description": "Invalid id or missing fields", "model": ErrorResponse},
        404: {"description": "Content not found", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Replace a document's title and HTML",
)
async def update_content(
    content_id: str,
    payload: ContentPayload,
    db: AsyncSession = Depends(get_db_session),
) -> UpdateResponse:
    updated = await content_service.update_content(
        db, content_id, payload.title, payload.html
    )
    return UpdateResponse(data=updated)


@router.delete(
    "/content/{content_id}",
    response_model=DeleteResponse,
    responses={
        400: {"description": "Invalid id", "model": ErrorResponse},
        404: {"description": "Content not found", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="Delete a document permanently",
)
async def delete_content(
    content_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    deleted = await content_service.delete_content(db, content_id)
    return DeleteResponse(data=deleted)
