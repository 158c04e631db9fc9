"""Error kinds raised while talking to the Meetup API."""


class MeetupError(Exception):
    """Base class for all report errors."""


class ConfigurationError(MeetupError):
    """Missing or invalid configuration, such as the API key."""


class ValidationError(MeetupError, ValueError):
    """Invalid argument detected before any network access."""


class MeetupApiError(MeetupError):
    """The API answered with a payload we cannot use."""


class PaginationError(MeetupApiError):
    """A next-page link was required but could not be read."""


class EmptyResultError(MeetupApiError):
    """Zero records matched the query."""

    def __init__(self, api_method: str):
        super().__init__(
            f"Zero records match your filter for '{api_method}'. Nothing to return."
        )
        self.api_method = api_method


class ConversionWarning(UserWarning):
    """A field value could not be converted and was replaced by None."""
