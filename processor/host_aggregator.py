"""Aggregation of per-group event hosts into a ranked host table."""
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from processor.models import AggregatedHost, Host

logger = logging.getLogger(__name__)

HostEntry = Tuple[str, str, int]


class HostAggregator:
    """
    Ranks hosts across groups.

    A host's count for one group is the largest host_count seen for that
    name in the group's events (the API repeats the same per-group count on
    every event the person hosted). The global count is the sum of the
    per-group counts.
    """

    def aggregate(self, hosts_by_group: Mapping[str, Sequence[Sequence[Host]]]) -> List[AggregatedHost]:
        """
        Flatten, resolve and rank hosts.

        Args:
            hosts_by_group: Mapping of group urlname to per-event host lists

        Returns:
            One AggregatedHost per distinct name, sorted descending by count
        """
        entries = self.flatten(hosts_by_group)
        hosts = self.rank(self.resolve(entries))
        logger.info(
            f"Aggregated {len(entries)} host entries into {len(hosts)} hosts",
            extra={'groups': len(hosts_by_group)}
        )
        return hosts

    def flatten(self, hosts_by_group: Mapping[str, Sequence[Sequence[Host]]]) -> List[HostEntry]:
        """
        Flatten group -> event -> host nesting into (group, name, count) entries.

        Hosts without a name are dropped; a missing count counts as 0.
        """
        entries = []
        for urlname, events in hosts_by_group.items():
            for event_hosts in events:
                for host in event_hosts or []:
                    if not host.name:
                        logger.warning(f"Skipping unnamed host in group '{urlname}'")
                        continue
                    entries.append((urlname, host.name, host.host_count or 0))
        return entries

    def resolve(self, entries: Sequence[HostEntry]) -> List[AggregatedHost]:
        """Collapse entries to one host per name, keeping first-seen order."""
        per_group: Dict[Tuple[str, str], int] = {}
        for urlname, name, count in entries:
            key = (urlname, name)
            per_group[key] = max(per_group.get(key, count), count)

        totals: Dict[str, int] = {}
        for (_, name), count in per_group.items():
            totals[name] = totals.get(name, 0) + count

        return [AggregatedHost(name=name, host_count=count) for name, count in totals.items()]

    def rank(self, hosts: Sequence[AggregatedHost]) -> List[AggregatedHost]:
        return sorted(hosts, key=lambda host: host.host_count, reverse=True)
