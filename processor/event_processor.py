"""Event processor for validating and normalizing Meetup event payloads."""
import logging
import warnings
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from client.exceptions import ConversionWarning, ValidationError
from processor.models import Event, Host

logger = logging.getLogger(__name__)

EVENT_STATUSES = ("cancelled", "draft", "past", "proposed", "suggested", "upcoming")

_MISSING = object()


def safe_get(document: Any, *path: str, default: Any = None) -> Any:
    """
    Look up a nested key path in a decoded JSON document.

    Any missing intermediate key, or an intermediate value that is not a
    mapping, yields the default instead of raising.

    Args:
        document: Decoded JSON value (usually a dict)
        *path: Keys to follow, outermost first
        default: Value returned when the path cannot be followed

    Returns:
        The value found at the path, or default
    """
    current = document
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return default
    return default if current is None else current


def validate_status(event_status: Union[str, Sequence[str], None]) -> Optional[str]:
    """
    Validate an event status filter and join it for the API.

    Args:
        event_status: A status, a comma-joined list of statuses, a list of
            statuses, or None for the API default

    Returns:
        Comma-joined status string, or None

    Raises:
        ValidationError: If any status is outside EVENT_STATUSES
    """
    if event_status is None:
        return None

    if isinstance(event_status, str):
        statuses = [part.strip() for part in event_status.split(",")]
    else:
        statuses = [str(part).strip() for part in event_status]

    invalid = [status for status in statuses if status not in EVENT_STATUSES]
    if not statuses or invalid:
        raise ValidationError(
            f"Event status {event_status!r} not allowed; "
            f"expected a combination of: {', '.join(EVENT_STATUSES)}"
        )

    return ",".join(statuses)


# Logged on every call; the warnings filter may show repeats only once
def _warn(message: str, field_name: str, value: Any) -> None:
    logger.warning(message, extra={'field': field_name, 'value': repr(value)})
    warnings.warn(message, ConversionWarning, stacklevel=3)


def convert_timestamp(value: Any, field_name: str = 'time') -> Optional[datetime]:
    """
    Convert milliseconds since epoch to a UTC datetime.

    Args:
        value: Milliseconds as a number or numeric string
        field_name: Field name reported when conversion fails

    Returns:
        Timezone-aware datetime, or None if the value is missing or
        cannot be converted (a ConversionWarning is emitted for the latter)
    """
    if value is None:
        return None

    if isinstance(value, bool):
        _warn(f"Date {value!r} could not be converted properly", field_name, value)
        return None

    try:
        millis = float(value)
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        _warn(f"Date {value!r} could not be converted properly", field_name, value)
        return None


def convert_date(value: Any, field_name: str = 'local_date') -> Optional[date]:
    """Parse an ISO 8601 local date (YYYY-MM-DD)."""
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        _warn(f"Local date {value!r} could not be converted properly", field_name, value)
        return None


def _to_int(value: Any, field_name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        _warn(f"Field '{field_name}' value {value!r} is not an integer", field_name, value)
        return None


def _to_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        _warn(f"Field '{field_name}' value {value!r} is not a number", field_name, value)
        return None


def _to_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class EventProcessor:
    """Processor turning raw event payloads into Event and Host records."""

    def process_events(self, raw_events: Iterable[Dict[str, Any]]) -> List[Event]:
        """
        Normalize a batch of raw event payloads.

        Args:
            raw_events: Decoded event objects from the events endpoint

        Returns:
            List of Event objects in input order
        """
        events = [self.process_event(raw) for raw in raw_events]
        logger.info(f"Processed {len(events)} events")
        return events

    def process_event(self, raw: Dict[str, Any]) -> Event:
        """
        Normalize a single raw event payload, null-filling missing fields.

        Args:
            raw: Decoded event object

        Returns:
            Event object
        """
        return Event(
            # Event ids stay strings; large numeric ids lose precision otherwise
            id=_to_str(safe_get(raw, "id")),
            name=_to_str(safe_get(raw, "name")),
            created=convert_timestamp(safe_get(raw, "created"), "created"),
            status=_to_str(safe_get(raw, "status")),
            time=convert_timestamp(safe_get(raw, "time")),
            local_date=convert_date(safe_get(raw, "local_date")),
            local_time=_to_str(safe_get(raw, "local_time")),
            waitlist_count=_to_int(safe_get(raw, "waitlist_count"), "waitlist_count"),
            yes_rsvp_count=_to_int(safe_get(raw, "yes_rsvp_count"), "yes_rsvp_count"),
            venue_id=_to_int(safe_get(raw, "venue", "id"), "venue.id"),
            venue_name=_to_str(safe_get(raw, "venue", "name")),
            venue_lat=_to_float(safe_get(raw, "venue", "lat"), "venue.lat"),
            venue_lon=_to_float(safe_get(raw, "venue", "lon"), "venue.lon"),
            venue_address_1=_to_str(safe_get(raw, "venue", "address_1")),
            venue_city=_to_str(safe_get(raw, "venue", "city")),
            venue_state=_to_str(safe_get(raw, "venue", "state")),
            venue_zip=_to_str(safe_get(raw, "venue", "zip")),
            venue_country=_to_str(safe_get(raw, "venue", "country")),
            description=_to_str(safe_get(raw, "description")),
            link=_to_str(safe_get(raw, "link")),
            resource=raw if isinstance(raw, dict) else {},
        )

    def extract_hosts(self, raw_events: Iterable[Dict[str, Any]]) -> List[List[Host]]:
        """
        Project the event_hosts list out of each raw event payload.

        Args:
            raw_events: Decoded event objects requested with fields=event_hosts

        Returns:
            One list of Host objects per event; empty when an event has none
        """
        return [self._hosts_for_event(raw) for raw in raw_events]

    def _hosts_for_event(self, raw: Dict[str, Any]) -> List[Host]:
        entries = safe_get(raw, "event_hosts", default=[])
        if not isinstance(entries, list):
            logger.warning(
                f"Ignoring malformed event_hosts for event {safe_get(raw, 'id')!r}"
            )
            return []

        return [
            Host(
                name=_to_str(safe_get(entry, "name")),
                host_count=_to_int(safe_get(entry, "host_count"), "host_count"),
                id=_to_str(safe_get(entry, "id")),
            )
            for entry in entries
            if isinstance(entry, dict)
        ]
