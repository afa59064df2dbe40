"""
Pydantic models for the CPID registry.

Every created user, event, organisation, business, artist and venue
receives a public code ``<prefix><6 chars>``; the prefix identifies the
kind.
"""

from enum import Enum
from typing import Optional

from .common import ApiModel


class EntityKind(str, Enum):
    USER = "user"
    EVENT = "event"
    ORGANISATION = "organisation"
    BUSINESS = "business"
    ARTIST = "artist"
    VENUE = "venue"

    @property
    def prefix(self) -> str:
        return CPID_PREFIXES[self]


CPID_PREFIXES = {
    EntityKind.USER: "CP-U-",
    EntityKind.EVENT: "CP-E-",
    EntityKind.ORGANISATION: "CP-ORG-",
    EntityKind.BUSINESS: "CP-B-",
    EntityKind.ARTIST: "CP-AR-",
    EntityKind.VENUE: "CP-V-",
}


class RegistryEntry(ApiModel):
    cpid: str
    entity_type: EntityKind
    entity_id: str
    created_at: Optional[str] = None
