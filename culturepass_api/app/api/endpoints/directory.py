"""
Shared routes for the moderated directory kinds.

``add_directory_routes`` attaches the same five routes to the
organisation, business and artist routers:

* ``GET ""`` and ``GET /{id}`` are public (listing shows active only);
* ``POST ""``, ``PUT /{id}`` and ``DELETE /{id}`` need an admin.

Kind‑specific routes must be registered on the router before calling
it, otherwise ``/{id}`` would capture them.
"""

from typing import List, Type

from fastapi import APIRouter, Depends, status

from culturepass_api.app.core.security import require_admin
from culturepass_api.app.schemas.common import ApiModel, OkResponse
from culturepass_api.app.schemas.directory import DirectoryRead
from culturepass_api.app.schemas.user import AccountRead
from culturepass_api.app.services.directory_service import DirectoryService


def add_directory_routes(
    router: APIRouter,
    service: Type[DirectoryService],
    create_schema: Type[ApiModel],
    update_schema: Type[ApiModel],
    read_schema: Type[DirectoryRead],
) -> APIRouter:
    @router.get("", response_model=List[read_schema], name=f"list_{service.table}")
    async def list_entries() -> list:
        return await service.list_public()

    @router.get("/{entity_id}", response_model=read_schema, name=f"get_{service.kind.value}")
    async def get_entry(entity_id: str):
        return await service.get_by_id(entity_id)

    @router.post(
        "",
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        name=f"create_{service.kind.value}",
    )
    async def create_entry(
        payload: create_schema,
        admin: AccountRead = Depends(require_admin),
    ):
        """Create an entry that is active immediately."""
        return await service.create(payload)

    @router.put("/{entity_id}", response_model=read_schema, name=f"update_{service.kind.value}")
    async def update_entry(
        entity_id: str,
        updates: update_schema,
        admin: AccountRead = Depends(require_admin),
    ):
        return await service.update(entity_id, updates.model_dump(exclude_none=True))

    @router.delete("/{entity_id}", response_model=OkResponse, name=f"delete_{service.kind.value}")
    async def delete_entry(
        entity_id: str,
        admin: AccountRead = Depends(require_admin),
    ) -> OkResponse:
        await service.delete(entity_id)
        return OkResponse()

    return router
