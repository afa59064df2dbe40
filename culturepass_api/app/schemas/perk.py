"""Pydantic models for perks (business discount offers)."""

from typing import Optional

from pydantic import Field

from .common import ApiModel
from .directory import EntityStatus


class PerkCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: str
    business_id: Optional[str] = None
    business_name: str
    discount: str = Field(..., examples=["15% off"])
    code: str
    valid_until: str = Field(..., examples=["2026-12-31"])
    category: str = ""
    image_url: str = ""
    status: EntityStatus = EntityStatus.ACTIVE


class PerkUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    business_id: Optional[str] = None
    business_name: Optional[str] = None
    discount: Optional[str] = None
    code: Optional[str] = None
    valid_until: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[EntityStatus] = None


class PerkRead(PerkCreate):
    id: str
    created_at: Optional[str] = None
