"""CSV writer for the ranked host report."""
import csv
import logging
from pathlib import Path
from typing import Sequence, Union

from processor.models import AggregatedHost

logger = logging.getLogger(__name__)


class HostReportWriter:
    """Writes aggregated hosts as a ranked CSV file."""

    FIELDNAMES = ['rank', 'name', 'host_count']

    def write(self, hosts: Sequence[AggregatedHost], path: Union[str, Path]) -> Path:
        """
        Write hosts to a CSV file, replacing any existing file.

        Args:
            hosts: Hosts in report order
            path: Destination file; parent directories are created

        Returns:
            Path of the written file
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with output_path.open('w', encoding='utf-8', newline='') as handle:
            writer = csv.DictWriter(handle, fieldnames=self.FIELDNAMES)
            writer.writeheader()
            for rank, host in enumerate(hosts, start=1):
                writer.writerow({
                    'rank': rank,
                    'name': host.name,
                    'host_count': host.host_count,
                })

        logger.info(f"Wrote {len(hosts)} hosts to {output_path}")
        return output_path
