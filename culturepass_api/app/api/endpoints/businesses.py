"""Business endpoints: the shared directory routes only."""

from fastapi import APIRouter

from culturepass_api.app.schemas.directory import BusinessCreate, BusinessRead, BusinessUpdate
from culturepass_api.app.services.directory_service import BusinessService

from .directory import add_directory_routes

router = APIRouter()

add_directory_routes(router, BusinessService, BusinessCreate, BusinessUpdate, BusinessRead)
