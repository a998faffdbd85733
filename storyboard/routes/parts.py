"""
Storyboard Backend — Parts Route Handlers
==========================================

What:  REST resource for parts: list, get, create, update, reorder, delete.
How:   Extracts path/body data, delegates to PartService, returns JSON.
Who:   Called by the browser page and storyboard.client.StoryboardAPI.

Access:
    GET  /api/parts            public
    GET  /api/parts/{id}       public
    POST /api/parts            require_auth
    PUT  /api/parts/reorder    require_auth  (declared before /{id})
    PUT  /api/parts/{id}       require_auth
    DELETE /api/parts/{id}     require_auth
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.database import get_db_session
from storyboard.dependencies import require_auth
from storyboard.schemas.part import (
    DeleteResponse,
    ErrorResponse,
    PartPayload,
    PartResponse,
    ReorderRequest,
)
from storyboard.services.part_service import part_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/parts", tags=["Parts"])

_AUTH_ERROR = {401: {"description": "Authentication required", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[PartResponse],
    summary="List all parts in display order",
)
async def list_parts(db: AsyncSession = Depends(get_db_session)) -> List[PartResponse]:
    return await part_service.list_all(db)


@router.get(
    "/{part_id}",
    response_model=PartResponse,
    responses={404: {"description": "Part not found", "model": ErrorResponse}},
    summary="Get a single part",
)
async def get_part(
    part_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> PartResponse:
    return await part_service.get_by_id(db, part_id)


@router.post(
    "",
    status_code=201,
    response_model=PartResponse,
    dependencies=[Depends(require_auth)],
    responses={
        400: {"description": "Title or content missing", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Create a part at the end of the list",
)
async def create_part(
    payload: PartPayload,
    db: AsyncSession = Depends(get_db_session),
) -> PartResponse:
    return await part_service.create(db, payload)


@router.put(
    "/reorder",
    response_model=List[PartResponse],
    dependencies=[Depends(require_auth)],
    responses={
        400: {"description": "parts is not an array", "model": ErrorResponse},
        404: {"description": "Unknown part id in batch", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Reposition parts as one atomic batch",
)
async def reorder_parts(
    payload: ReorderRequest,
    db: AsyncSession = Depends(get_db_session),
) -> List[PartResponse]:
    """
    Body: {"parts": [{"id": 3, "order_index": 1}, {"id": 1, "order_index": 2}]}

    Either every listed part is repositioned or none is.
    """
    return await part_service.reorder(db, payload.parts)


@router.put(
    "/{part_id}",
    response_model=PartResponse,
    dependencies=[Depends(require_auth)],
    responses={
        400: {"description": "Title or content missing", "model": ErrorResponse},
        404: {"description": "Part not found", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Replace the editable fields of a part",
)
async def update_part(
    part_id: int,
    payload: PartPayload,
    db: AsyncSession = Depends(get_db_session),
) -> PartResponse:
    return await part_service.update(db, part_id, payload)


@router.delete(
    "/{part_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_auth)],
    responses={
        404: {"description": "Part not found", "model": ErrorResponse},
        **_AUTH_ERROR,
    },
    summary="Delete a part and its image",
)
async def delete_part(
    part_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    await part_service.delete(db, part_id)
    return DeleteResponse()
