"""Ranked report of the people who host the most R-Ladies events."""
import json
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from client.exceptions import ConfigurationError, EmptyResultError
from client.meetup_api import MeetupApiClient
from client.meetup_events import MeetupEventsClient
from processor.group_filter import GroupFilter
from processor.host_aggregator import HostAggregator
from processor.models import Host
from storage.csv_writer import HostReportWriter

API_KEY_URL = "https://secure.meetup.com/meetup_api/key/"
GROUP_FIELDS = "past_event_count,upcoming_event_count"


# Attributes every LogRecord carries; anything else was passed via extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """JSON formatter that keeps the extra= context of each record."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including extra fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Install a single JSON handler on the root logger.

    Calling it again replaces the handler and level.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class ReportConfig:
    """Run configuration read from the environment."""
    api_key: str
    output_path: str = 'docs/data/rladies_hosts.csv'
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    search_text: str = 'r-ladies'


@dataclass
class ReportResult:
    """Summary of a report run."""
    groups_found: int
    groups_used: int
    hosts_written: int
    output_path: str
    skipped_groups: List[str] = field(default_factory=list)


def load_config(environ: Optional[Mapping[str, str]] = None) -> ReportConfig:
    """
    Read the run configuration from environment variables.

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        ReportConfig

    Raises:
        ConfigurationError: If MEETUP_KEY is unset or TIMEOUT_SECONDS is invalid
    """
    environ = os.environ if environ is None else environ

    api_key = environ.get('MEETUP_KEY', '')
    if not api_key:
        raise ConfigurationError(
            "You have not set a MEETUP_KEY environment variable.\n"
            "If you do not yet have a meetup.com API key, you can retrieve one here:\n"
            f"  * {API_KEY_URL}"
        )

    try:
        timeout_seconds = int(environ.get('TIMEOUT_SECONDS', '30'))
    except ValueError as e:
        raise ConfigurationError(f"TIMEOUT_SECONDS must be an integer: {e}") from e

    return ReportConfig(
        api_key=api_key,
        output_path=environ.get('OUTPUT_PATH', 'docs/data/rladies_hosts.csv'),
        log_level=environ.get('LOG_LEVEL', 'INFO'),
        timeout_seconds=timeout_seconds,
        search_text=environ.get('SEARCH_TEXT', 'r-ladies'),
    )


def run_report(config: ReportConfig) -> ReportResult:
    """
    Find R-Ladies groups, collect past event hosts and write the CSV report.

    Groups without past events are skipped; any other error propagates.

    Args:
        config: Run configuration

    Returns:
        ReportResult summary
    """
    logger = logging.getLogger(__name__)

    api = MeetupApiClient(api_key=config.api_key, timeout=config.timeout_seconds)
    events_client = MeetupEventsClient(api)
    group_filter = GroupFilter()
    aggregator = HostAggregator()
    writer = HostReportWriter()

    groups = events_client.find_groups(config.search_text, fields=GROUP_FIELDS)
    urlnames = group_filter.urlnames(group_filter.filter_groups(groups))

    hosts_by_group: Dict[str, List[List[Host]]] = {}
    skipped_groups = []
    for urlname in urlnames:
        try:
            hosts_by_group[urlname] = events_client.get_hosts(
                urlname, event_status='past', fields='event_hosts'
            )
        except EmptyResultError:
            logger.warning(
                f"No past events for group '{urlname}', skipping",
                extra={'urlname': urlname}
            )
            skipped_groups.append(urlname)

    hosts = aggregator.aggregate(hosts_by_group)
    output_path = writer.write(hosts, config.output_path)

    return ReportResult(
        groups_found=len(groups),
        groups_used=len(hosts_by_group),
        hosts_written=len(hosts),
        output_path=str(output_path),
        skipped_groups=skipped_groups,
    )


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run the report end to end.

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        Process exit status: 0 on success, 1 on any failure
    """
    environ = os.environ if environ is None else environ
    setup_logging()
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info("Report run started")

    try:
        config = load_config(environ)
        setup_logging(config.log_level)
        result = run_report(config)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Report run failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return 1

    duration = time.time() - start_time
    logger.info(
        f"Report run completed: {result.hosts_written} hosts from "
        f"{result.groups_used} groups written to {result.output_path}",
        extra={
            'duration_seconds': round(duration, 2),
            'groups_found': result.groups_found,
            'groups_used': result.groups_used,
            'skipped_groups': result.skipped_groups
        }
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
