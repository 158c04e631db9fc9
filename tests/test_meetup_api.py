"""Unit tests for MeetupApiClient."""
import pytest
import responses
from requests.exceptions import HTTPError

from client.exceptions import (
    ConfigurationError,
    EmptyResultError,
    MeetupApiError,
    PaginationError,
)
from client.meetup_api import MeetupApiClient

EVENTS_URL = "https://api.meetup.com/rladies-tokyo/events"


def _records(start, stop):
    return [{'id': str(i), 'name': f"Event {i}"} for i in range(start, stop)]


def _link(page):
    return f'<{EVENTS_URL}?status=past&page={page}>; rel="next"'


class TestMeetupApiClient:
    """Test cases for MeetupApiClient class."""

    def test_rejects_non_string_key(self):
        """Test that a non-string API key is a configuration error."""
        with pytest.raises(ConfigurationError):
            MeetupApiClient(api_key=12345)

    def test_rejects_empty_key(self):
        """Test that an empty API key is a configuration error."""
        with pytest.raises(ConfigurationError):
            MeetupApiClient(api_key="")

    @responses.activate
    def test_single_page_without_total_header(self):
        """Test that a missing total header means exactly one request."""
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(0, 3),
            headers={'Link': _link(2)},
            status=200
        )

        client = MeetupApiClient(api_key="secret")
        records = client.fetch_results("rladies-tokyo/events", "past")

        assert [r['id'] for r in records] == ['0', '1', '2']
        assert len(responses.calls) == 1

    @responses.activate
    def test_query_parameters(self):
        """Test that key, status and extra params are sent and None is omitted."""
        responses.add(responses.GET, EVENTS_URL, json=_records(0, 1), status=200)

        client = MeetupApiClient(api_key="secret")
        client.fetch_results("rladies-tokyo/events", "past", fields="event_hosts", page=None)

        request_url = responses.calls[0].request.url
        assert "key=secret" in request_url
        assert "status=past" in request_url
        assert "fields=event_hosts" in request_url
        assert "page=" not in request_url

    @responses.activate
    def test_status_omitted_when_none(self):
        """Test that no status parameter is sent when none is given."""
        responses.add(
            responses.GET,
            "https://api.meetup.com/find/groups",
            json=[{'urlname': 'rladies-tokyo'}],
            status=200
        )

        client = MeetupApiClient(api_key="secret")
        client.fetch_results("find/groups", text="r-ladies")

        assert "status=" not in responses.calls[0].request.url

    @pytest.mark.parametrize("total,page_size", [(450, 200), (400, 200), (7, 3), (3, 1)])
    def test_pagination_completeness(self, total, page_size):
        """Test that all pages are fetched in order with one request per page."""
        pages = [
            _records(start, min(start + page_size, total))
            for start in range(0, total, page_size)
        ]

        with responses.RequestsMock() as rsps:
            for number, page in enumerate(pages, start=1):
                headers = {'X-Total-Count': str(total)}
                if number < len(pages):
                    headers['Link'] = _link(number + 1)
                rsps.add(responses.GET, EVENTS_URL, json=page, headers=headers, status=200)

            client = MeetupApiClient(api_key="secret")
            records = client.fetch_results("rladies-tokyo/events", "past")

            assert len(rsps.calls) == len(pages)

        assert len(records) == total
        assert [r['id'] for r in records] == [str(i) for i in range(total)]

    @responses.activate
    def test_next_page_follows_link(self):
        """Test that next pages are requested from the Link header URL."""
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(0, 2),
            headers={'X-Total-Count': '3', 'Link': _link(2)},
            status=200
        )
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(2, 3),
            headers={'X-Total-Count': '3'},
            status=200
        )

        client = MeetupApiClient(api_key="secret")
        client.fetch_results("rladies-tokyo/events", "past")

        next_request_url = responses.calls[1].request.url
        assert "page=2" in next_request_url
        assert "key=secret" in next_request_url
        assert next_request_url.count("status=past") == 1

    @responses.activate
    def test_unparsable_total_means_single_page(self):
        """Test that a non-integer total header is treated as 1."""
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(0, 2),
            headers={'X-Total-Count': 'lots', 'Link': _link(2)},
            status=200
        )

        client = MeetupApiClient(api_key="secret")
        records = client.fetch_results("rladies-tokyo/events", "past")

        assert len(records) == 2
        assert len(responses.calls) == 1

    @responses.activate
    def test_malformed_link_raises(self):
        """Test that an unreadable Link header fails instead of truncating."""
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(0, 2),
            headers={'X-Total-Count': '4', 'Link': 'not a link'},
            status=200
        )

        client = MeetupApiClient(api_key="secret")

        with pytest.raises(PaginationError):
            client.fetch_results("rladies-tokyo/events", "past")

    @responses.activate
    def test_http_error_is_not_retried(self):
        """Test that a non-success status fails immediately."""
        responses.add(responses.GET, EVENTS_URL, body="Server Error", status=500)

        client = MeetupApiClient(api_key="secret")

        with pytest.raises(HTTPError) as exc_info:
            client.fetch_results("rladies-tokyo/events", "past")

        assert exc_info.value.response.status_code == 500
        assert len(responses.calls) == 1

    @responses.activate
    def test_empty_result_raises(self):
        """Test that zero records raise EmptyResultError."""
        responses.add(responses.GET, EVENTS_URL, json=[], status=200)

        client = MeetupApiClient(api_key="secret")

        with pytest.raises(EmptyResultError):
            client.fetch_results("rladies-tokyo/events", "past")

    @responses.activate
    def test_non_list_payload_raises(self):
        """Test that an object payload is rejected."""
        responses.add(responses.GET, EVENTS_URL, json={'errors': []}, status=200)

        client = MeetupApiClient(api_key="secret")

        with pytest.raises(MeetupApiError):
            client.fetch_results("rladies-tokyo/events", "past")

    @responses.activate
    def test_empty_later_page_raises_pagination_error(self):
        """Test that an empty page after the first fails as a pagination error."""
        responses.add(
            responses.GET,
            EVENTS_URL,
            json=_records(0, 2),
            headers={'X-Total-Count': '3', 'Link': _link(2)},
            status=200
        )
        responses.add(responses.GET, EVENTS_URL, json=[], status=200)

        client = MeetupApiClient(api_key="secret")

        with pytest.raises(PaginationError) as exc_info:
            client.fetch_results("rladies-tokyo/events", "past")

        assert not isinstance(exc_info.value, EmptyResultError)
        assert len(responses.calls) == 2
