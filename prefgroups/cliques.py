"""
Maximal groups of people who all mutually want to work together.

A person is a candidate for a partial group only if they said yes to every
member and every member said yes to them. The search grows groups one
person at a time and backtracks, much like n-queens; a group is recorded
once nobody in the population can be added to it. Results overlap: the
same person can sit in several maximal groups.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Hashable, List, Sequence, Set

from .logging_config import get_logger
from .preferences import PreferenceTable

logger = get_logger(__name__)

PersonId = Hashable


class MaximalMutualGroupFinder:
    """Enumerate maximal mutual-yes cliques in a PreferenceTable."""

    def __init__(self, table: PreferenceTable):
        self.table = table
        self._order: Dict[PersonId, int] = {pid: i for i, pid in enumerate(table)}

    def mutual_yeses(self, partial_group: Sequence[PersonId], candidate_pool: Sequence[PersonId]) -> List[PersonId]:
        """Candidates from the pool who mutually want every member of partial_group."""
        members = set(partial_group)
        return [
            cand for cand in candidate_pool
            if cand not in members
            and all(self.table.mutual_yes(cand, m) for m in partial_group)
        ]

    def _expand(self, partial: List[PersonId], pool: List[PersonId], found: List[List[PersonId]]) -> None:
        candidates = self.mutual_yeses(partial, pool)
        if not candidates:
            found.append(list(partial))
            return
        for cand in candidates:
            narrowed = [p for p in candidates if p != cand and self.table.mutual_yes(cand, p)]
            partial.append(cand)
            try:
                self._expand(partial, narrowed, found)
            finally:
                partial.pop()

    def find(self) -> List[List[PersonId]]:
        """All maximal mutual groups, deduplicated, largest first.

        Members of each group are listed in table order. Someone with no
        mutual partner comes back as a group of one.
        """
        if not self.table:
            return []
        found: List[List[PersonId]] = []
        self._expand([], list(self.table), found)

        seen: Set[FrozenSet[PersonId]] = set()
        groups: List[List[PersonId]] = []
        for group in found:
            key = frozenset(group)
            if key in seen:
                continue
            seen.add(key)
            groups.append(sorted(group, key=self._order.__getitem__))
        groups.sort(key=len, reverse=True)
        logger.debug(f"Found {len(groups)} maximal mutual groups from {len(found)} search leaves")
        return groups


def find_maximal_mutual_groups(table: PreferenceTable) -> List[List[PersonId]]:
    """Shortcut for MaximalMutualGroupFinder(table).find()."""
    return MaximalMutualGroupFinder(table).find()
