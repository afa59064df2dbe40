"""
Pydantic models for venues and the map overview.

Venues always carry coordinates, so every approved venue can be placed
on the map.  ``MapData`` bundles the three map layers.
"""

from typing import List, Optional

from pydantic import Field

from .common import ApiModel, SocialLinks
from .directory import BusinessRead
from .event import EventRead


class VenueCreate(ApiModel):
    name: str = Field(..., min_length=1, examples=["Sydney Town Hall"])
    address: str = Field(..., min_length=1, examples=["483 George St, Sydney"])
    country: str = "Australia"
    state: str
    city: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=0)
    venue_type: str = "hall"
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    contact: str = ""
    phone: str = ""
    website: str = ""
    description: str = ""
    approved: bool = True
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class VenueUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=0)
    venue_type: Optional[str] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    approved: Optional[bool] = None
    social_links: Optional[SocialLinks] = None


class VenueRead(VenueCreate):
    id: str
    cpid: Optional[str] = None
    created_at: Optional[str] = None


class MapData(ApiModel):
    events: List[EventRead] = Field(default_factory=list)
    venues: List[VenueRead] = Field(default_factory=list)
    businesses: List[BusinessRead] = Field(default_factory=list)
