"""Paginated client for the Meetup REST API."""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

from client.exceptions import (
    ConfigurationError,
    EmptyResultError,
    MeetupApiError,
    PaginationError,
)

logger = logging.getLogger(__name__)


class MeetupApiClient:
    """Client that walks cursor-paginated Meetup API methods to completion."""

    BASE_URL = "https://api.meetup.com/"
    TOTAL_COUNT_HEADER = "X-Total-Count"

    def __init__(self, api_key: str, timeout: int = 30):
        """
        Initialize the API client.

        Args:
            api_key: Meetup API key sent as the 'key' query parameter
            timeout: HTTP request timeout in seconds (default: 30)

        Raises:
            ConfigurationError: If api_key is not a non-empty string
        """
        if not isinstance(api_key, str):
            raise ConfigurationError("api_key must be a character string")
        if not api_key:
            raise ConfigurationError("api_key must not be empty")

        self.api_key = api_key
        self.timeout = timeout

    def fetch_results(
        self,
        api_method: str,
        event_status: Optional[str] = None,
        **params: Any
    ) -> List[Dict[str, Any]]:
        """
        Fetch every record of an API method, following next-page links.

        Args:
            api_method: Method path relative to the API root (e.g. 'find/groups')
            event_status: Optional status filter sent as the 'status' parameter
            **params: Extra query parameters; None values are omitted

        Returns:
            All records, in the order the API returned them

        Raises:
            requests.HTTPError: On a non-success response
            EmptyResultError: If the first page holds no records
            PaginationError: If a required next-page link is missing or malformed,
                or a later page comes back empty
        """
        url = f"{self.BASE_URL}{api_method}"
        query = {'key': self.api_key, 'status': event_status, **params}
        query = {name: value for name, value in query.items() if value is not None}

        records, response = self._quick_fetch(url, query, api_method)
        if not records:
            raise EmptyResultError(api_method)

        total_records = self._total_count(response)
        logger.info(
            f"Downloading {total_records} record(s) from {api_method}",
            extra={'api_method': api_method, 'total_records': total_records}
        )

        if len(records) >= total_records or not response.headers.get('Link'):
            return records

        extra_calls = math.ceil(total_records / len(records)) - 1
        all_records = list(records)

        for page in range(extra_calls):
            next_url = self._next_page_url(response)
            logger.info(f"Fetching page {page + 2}/{extra_calls + 1} of {api_method}")
            page_records, response = self._quick_fetch(
                next_url, self._next_page_params(next_url), api_method
            )
            if not page_records:
                raise PaginationError(
                    f"Page {page + 2} of {api_method} was empty after "
                    f"{len(all_records)} of {total_records} record(s)"
                )
            all_records.extend(page_records)

        return all_records

    def _quick_fetch(
        self,
        url: str,
        params: Dict[str, Any],
        api_method: str
    ) -> Tuple[List[Dict[str, Any]], requests.Response]:
        """
        Make a single GET request and decode the record list.

        Args:
            url: Endpoint or next-page URL
            params: Query parameters
            api_method: Method name used in error messages

        Returns:
            Tuple of (records, response)
        """
        response = requests.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()

        try:
            records = response.json()
        except ValueError as e:
            raise MeetupApiError(f"Response from {api_method} is not valid JSON: {e}") from e

        if not isinstance(records, list):
            raise MeetupApiError(
                f"Expected a list of records from {api_method}, "
                f"got {type(records).__name__}"
            )

        return records, response

    def _total_count(self, response: requests.Response) -> int:
        """Read the total record count header; 1 when absent or unparsable."""
        raw_total = response.headers.get(self.TOTAL_COUNT_HEADER)
        if raw_total is None:
            return 1
        try:
            return int(raw_total)
        except ValueError:
            logger.warning(f"Ignoring unparsable {self.TOTAL_COUNT_HEADER}: {raw_total!r}")
            return 1

    def _next_page_url(self, response: requests.Response) -> str:
        """
        Extract the next-page URL from a response's Link header.

        Raises:
            PaginationError: If the header carries no usable rel="next" link
        """
        next_url = response.links.get('next', {}).get('url')
        if not next_url or not urlparse(next_url).scheme:
            raise PaginationError(
                f"Could not read next page from Link header: "
                f"{response.headers.get('Link')!r}"
            )
        return next_url

    def _next_page_params(self, next_url: str) -> Dict[str, Any]:
        """Parameters to add to a next-page URL; only the key, if it is missing."""
        if 'key' in parse_qs(urlparse(next_url).query):
            return {}
        return {'key': self.api_key}
