"""
Pydantic models for event data.

``EventBase`` contains the descriptive fields shared by creation and
reads; ``EventCreate`` additionally accepts an initial
``tickets_sold`` value, while ``EventUpdate`` deliberately has no
``tickets_sold`` field: after creation the counter only moves through
orders.
"""

from datetime import date as Date
from enum import Enum
from typing import Optional

from pydantic import Field

from .common import ApiModel


class EventCategory(str, Enum):
    MUSIC = "Music"
    DANCE = "Dance"
    FESTIVAL = "Festival"
    FOOD = "Food"
    THEATRE = "Theatre"
    MOVIE = "Movie"
    WORKSHOP = "Workshop"
    SPORTS = "Sports"


class EventBase(ApiModel):
    title: str = Field(..., min_length=1, examples=["Diwali Night Market"])
    description: str = Field(..., examples=["Food stalls, music and fireworks"])
    category: EventCategory = Field(..., examples=["Festival"])
    date: Date = Field(..., examples=["2026-11-08"])
    time: str = Field(..., examples=["18:00"])
    end_time: str = Field(..., examples=["23:00"])
    venue: str
    venue_id: Optional[str] = None
    city: str
    state: str
    country: str = "Australia"
    image_url: str = ""
    price: float = Field(0, ge=0)
    currency: str = "AUD"
    org_id: Optional[str] = None
    org_name: str = ""
    artist_id: Optional[str] = None
    featured: bool = False
    trending: bool = False
    published: bool = True
    tickets_available: int = Field(100, ge=0)
    lat: Optional[float] = None
    lng: Optional[float] = None


class EventCreate(EventBase):
    """Schema for creating an event."""

    tickets_sold: int = Field(0, ge=0)


class EventUpdate(ApiModel):
    """Schema for updating an event.

    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[EventCategory] = None
    date: Optional[Date] = None
    time: Optional[str] = None
    end_time: Optional[str] = None
    venue: Optional[str] = None
    venue_id: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    org_id: Optional[str] = None
    org_name: Optional[str] = None
    artist_id: Optional[str] = None
    featured: Optional[bool] = None
    trending: Optional[bool] = None
    published: Optional[bool] = None
    tickets_available: Optional[int] = Field(None, ge=0)
    lat: Optional[float] = None
    lng: Optional[float] = None


class EventRead(EventBase):
    """Schema for reading an event from the API."""

    id: str
    tickets_sold: int = 0
    cpid: Optional[str] = None
    created_at: Optional[str] = None
