"""Data models for Meetup groups, events and hosts."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Group:
    """Community group returned by the group search."""
    id: Optional[str]
    name: str
    urlname: str
    past_event_count: int = 0
    upcoming_event_count: int = 0
    members: Optional[int] = None
    city: Optional[str] = None
    country: Optional[str] = None
    resource: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def full_url(self) -> str:
        return f"https://www.meetup.com/{self.urlname}/"


@dataclass
class Event:
    """Normalized event; every field except resource may be None."""
    id: Optional[str]
    name: Optional[str]
    created: Optional[datetime]
    status: Optional[str]
    time: Optional[datetime]
    local_date: Optional[date]
    local_time: Optional[str]
    waitlist_count: Optional[int]
    yes_rsvp_count: Optional[int]
    venue_id: Optional[int]
    venue_name: Optional[str]
    venue_lat: Optional[float]
    venue_lon: Optional[float]
    venue_address_1: Optional[str]
    venue_city: Optional[str]
    venue_state: Optional[str]
    venue_zip: Optional[str]
    venue_country: Optional[str]
    description: Optional[str]
    link: Optional[str]
    resource: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Host:
    """Event host with the per-group host count reported by the API."""
    name: Optional[str]
    host_count: Optional[int]
    id: Optional[str] = None


@dataclass
class AggregatedHost:
    """Host with a count resolved across all groups."""
    name: str
    host_count: int
