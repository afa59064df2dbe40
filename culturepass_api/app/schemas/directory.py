"""
Pydantic models for the moderated directory: organisations, businesses
and artists.

Create schemas carry only descriptive fields.  ``status``,
``owner_id``, ``cpid`` and counters are set by the service, so a
submitter cannot publish their own entry by sending
``"status": "active"``.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import ApiModel, SocialLinks


class EntityStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class DirectoryRead(ApiModel):
    id: str
    status: EntityStatus
    owner_id: Optional[str] = None
    cpid: Optional[str] = None
    created_at: Optional[str] = None


# -- organisations ---------------------------------------------------------

class OrganisationCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: str
    city: str
    state: str
    image_url: str = ""
    established: str = ""
    categories: List[str] = Field(default_factory=list)
    slug: Optional[str] = None
    website: str = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class OrganisationUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    image_url: Optional[str] = None
    established: Optional[str] = None
    categories: Optional[List[str]] = None
    slug: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[SocialLinks] = None


class OrganisationRead(OrganisationCreate, DirectoryRead):
    member_count: int = 0


# -- businesses ------------------------------------------------------------

class BusinessCreate(ApiModel):
    name: str = Field(..., min_length=1)
    description: str
    category: str
    city: str
    state: str
    country: str = "Australia"
    phone: str = ""
    website: str = ""
    image_url: str = ""
    rating: float = Field(0, ge=0, le=5)
    is_sponsor: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None
    service_locations: List[str] = Field(default_factory=list)
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class BusinessUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_sponsor: Optional[bool] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    service_locations: Optional[List[str]] = None
    social_links: Optional[SocialLinks] = None


class BusinessRead(BusinessCreate, DirectoryRead):
    pass


# -- artists ---------------------------------------------------------------

class ArtistCreate(ApiModel):
    name: str = Field(..., min_length=1)
    genre: str
    bio: str
    city: str
    state: str
    image_url: str = ""
    featured: bool = False
    performances: int = Field(0, ge=0)
    slug: Optional[str] = None
    website: str = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class ArtistUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    genre: Optional[str] = None
    bio: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    image_url: Optional[str] = None
    featured: Optional[bool] = None
    performances: Optional[int] = Field(None, ge=0)
    slug: Optional[str] = None
    website: Optional[str] = None
    social_links: Optional[SocialLinks] = None


class ArtistRead(ArtistCreate, DirectoryRead):
    pass


class SubmissionsRead(ApiModel):
    """Directory entries grouped by kind (pending queue, own submissions)."""

    organisations: List[OrganisationRead] = Field(default_factory=list)
    businesses: List[BusinessRead] = Field(default_factory=list)
    artists: List[ArtistRead] = Field(default_factory=list)
