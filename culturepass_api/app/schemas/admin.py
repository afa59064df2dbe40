"""Pydantic models for the admin dashboard and service health."""

from .common import ApiModel


class AdminStats(ApiModel):
    users: int
    events: int
    organisations: int
    businesses: int
    artists: int
    orders: int
    memberships: int
    tickets_sold: int
    pending_organisations: int
    pending_businesses: int
    pending_artists: int
    total_pending: int


class HealthRead(ApiModel):
    status: str
    version: str
    name: str
