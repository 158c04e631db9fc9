"""Group, event and host queries built on the paginated API client."""
import logging
from typing import List, Optional, Sequence, Union

from client.meetup_api import MeetupApiClient
from processor.event_processor import EventProcessor, safe_get, validate_status
from processor.models import Event, Group, Host

logger = logging.getLogger(__name__)

StatusFilter = Union[str, Sequence[str], None]


class MeetupEventsClient:
    """Queries for Meetup groups and their events."""

    def __init__(self, api: MeetupApiClient, processor: Optional[EventProcessor] = None):
        """
        Initialize the events client.

        Args:
            api: Paginated API client used for every request
            processor: Event processor (default: a new EventProcessor)
        """
        self.api = api
        self.processor = processor or EventProcessor()

    def find_groups(self, text: str, fields: Optional[str] = None) -> List[Group]:
        """
        Search groups by free text.

        Args:
            text: Search query
            fields: Optional comma-separated extra fields to request

        Returns:
            List of Group objects in API order
        """
        logger.info(f"Searching groups matching '{text}'")
        raw_groups = self.api.fetch_results('find/groups', text=text, fields=fields)
        return [self._to_group(raw) for raw in raw_groups]

    def get_events(
        self,
        urlname: str,
        event_status: StatusFilter = 'upcoming',
        fields: Optional[str] = None
    ) -> List[Event]:
        """
        Fetch and normalize the events of a group.

        Args:
            urlname: Group identifier used in the API path
            event_status: Status filter (single, comma-joined or list)
            fields: Optional comma-separated extra fields to request

        Returns:
            List of Event objects

        Raises:
            ValidationError: If event_status is not allowed (before any request)
        """
        raw_events = self._fetch_events(urlname, event_status, fields)
        return self.processor.process_events(raw_events)

    def get_hosts(
        self,
        urlname: str,
        event_status: StatusFilter = 'past',
        fields: Optional[str] = None
    ) -> List[List[Host]]:
        """
        Fetch the events of a group and keep only their host lists.

        Args:
            urlname: Group identifier used in the API path
            event_status: Status filter (single, comma-joined or list)
            fields: Optional comma-separated extra fields; event_hosts must be
                among them for hosts to be returned

        Returns:
            One list of Host objects per event

        Raises:
            ValidationError: If event_status is not allowed (before any request)
        """
        raw_events = self._fetch_events(urlname, event_status, fields)
        return self.processor.extract_hosts(raw_events)

    def _fetch_events(self, urlname: str, event_status: StatusFilter, fields: Optional[str]):
        status = validate_status(event_status)
        return self.api.fetch_results(f"{urlname}/events", status, fields=fields)

    def _to_group(self, raw: dict) -> Group:
        members = safe_get(raw, 'members')
        group_id = safe_get(raw, 'id')
        return Group(
            id=None if group_id is None else str(group_id),
            name=str(safe_get(raw, 'name', default='')),
            urlname=str(safe_get(raw, 'urlname', default='')),
            past_event_count=int(safe_get(raw, 'past_event_count', default=0)),
            upcoming_event_count=int(safe_get(raw, 'upcoming_event_count', default=0)),
            members=None if members is None else int(members),
            city=safe_get(raw, 'city'),
            country=safe_get(raw, 'country'),
            resource=raw,
        )
