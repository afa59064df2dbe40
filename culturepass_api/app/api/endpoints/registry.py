"""CPID lookup: resolve a public code to the entity it was issued to."""

from fastapi import APIRouter

from culturepass_api.app.schemas.registry import RegistryEntry
from culturepass_api.app.services.registry_service import IdentifierRegistry

router = APIRouter()


@router.get("/{cpid}", response_model=RegistryEntry)
async def lookup_cpid(cpid: str) -> RegistryEntry:
    return await IdentifierRegistry.lookup(cpid)
