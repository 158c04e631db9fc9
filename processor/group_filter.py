"""Filtering and ranking of R-Ladies groups."""
import logging
import re
from typing import Iterable, List

from processor.models import Group

logger = logging.getLogger(__name__)


class GroupFilter:
    """Keeps R-Ladies groups with public past events, busiest first."""

    NAME_PATTERN = re.compile(r"\br[\s_-]?ladies\b", re.IGNORECASE)

    # Groups that do not make their event hosts public
    RESTRICTED_GROUPS = frozenset({'rladies-natal', 'rladies-xalapa'})

    def __init__(self, restricted_groups: Iterable[str] = RESTRICTED_GROUPS):
        self.restricted_groups = frozenset(restricted_groups)

    def matches_name(self, group: Group) -> bool:
        return bool(self.NAME_PATTERN.search(group.name))

    def filter_groups(self, groups: Iterable[Group]) -> List[Group]:
        """
        Filter groups to the community and rank them by past events.

        Args:
            groups: Groups from the group search

        Returns:
            Matching groups sorted descending by past_event_count
        """
        groups = list(groups)
        kept = []

        for group in groups:
            if not self.matches_name(group):
                logger.debug(f"Skipping group '{group.name}': name does not match")
                continue
            if group.past_event_count == 0:
                logger.debug(f"Skipping group '{group.urlname}': no past events")
                continue
            if group.urlname in self.restricted_groups:
                logger.info(f"Skipping group '{group.urlname}': hosts are not public")
                continue
            kept.append(group)

        kept.sort(key=lambda group: group.past_event_count, reverse=True)
        logger.info(f"Kept {len(kept)} of {len(groups)} groups")
        return kept

    @staticmethod
    def urlnames(groups: Iterable[Group]) -> List[str]:
        return [group.urlname for group in groups]
