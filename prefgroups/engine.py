"""
Single randomized allocation attempts.

allocate_once is the preference-aware allocator: it walks people from
fewest to most stated "yes" answers and does its best to put each one with
someone they asked for, never breaking a veto. clique_attempt is the plain
graph alternative that only guarantees everyone in a group is compatible.

Either raises AttemptInfeasible when the attempt cannot place someone; the
optimizer discards the attempt and tries again with fresh state.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Hashable, List, Optional

import numpy as np

from .errors import AttemptInfeasible, LocalSearchExhausted
from .graph import CompatibilityGraph
from .logging_config import get_logger
from .preferences import PreferenceTable

logger = get_logger(__name__)

PersonId = Hashable


def group_budget(population: int, max_group_size: int) -> int:
    """Most groups an allocation may open: ceil(population / max_group_size)."""
    return math.ceil(population / max_group_size) if population > 0 else 0


class Grouping:
    """Groups plus a member -> group index. Private to one attempt."""

    def __init__(self, max_group_size: int):
        self.max_group_size = max_group_size
        self.groups: List[List[PersonId]] = []
        self._index: Dict[PersonId, int] = {}

    @classmethod
    def from_lists(cls, groups: List[List[PersonId]], max_group_size: int) -> "Grouping":
        grouping = cls(max_group_size)
        for members in groups:
            grouping.new_group(*members)
        return grouping

    def __len__(self) -> int:
        return len(self.groups)

    def is_placed(self, pid: PersonId) -> bool:
        return pid in self._index

    def group_index(self, pid: PersonId) -> Optional[int]:
        return self._index.get(pid)

    def group_of(self, pid: PersonId) -> Optional[List[PersonId]]:
        gi = self._index.get(pid)
        return None if gi is None else self.groups[gi]

    def is_full(self, gi: int) -> bool:
        return len(self.groups[gi]) >= self.max_group_size

    def new_group(self, *members: PersonId) -> int:
        gi = len(self.groups)
        self.groups.append([])
        for pid in members:
            self.add(pid, gi)
        return gi

    def add(self, pid: PersonId, gi: int) -> None:
        if pid in self._index:
            raise ValueError(f"{pid!r} is already in group {self._index[pid]}")
        if self.is_full(gi):
            raise ValueError(f"Group {gi} already has {self.max_group_size} members")
        self.groups[gi].append(pid)
        self._index[pid] = gi

    def is_complete(self, ids) -> bool:
        """True if every id is placed exactly once and nobody else is."""
        ids = list(ids)
        return len(self._index) == len(ids) and all(pid in self._index for pid in ids)

    def as_lists(self) -> List[List[PersonId]]:
        return [list(g) for g in self.groups]


def allocate_once(
    table: PreferenceTable,
    max_group_size: int = 4,
    max_local_attempts: int = 20,
    rng: Optional[np.random.Generator] = None,
) -> Grouping:
    """Run one preference-aware allocation and return the complete Grouping.

    Raises AttemptInfeasible if someone cannot be placed without breaking a
    veto or opening more than ceil(n / max_group_size) groups.
    """
    rng = rng if rng is not None else np.random.default_rng()
    grouping = Grouping(max_group_size)
    budget = group_budget(len(table), max_group_size)

    def pick(items: List):
        return items[int(rng.integers(len(items)))]

    def unplaced_wanted(pid: PersonId, members: List[PersonId]) -> List[PersonId]:
        """Unplaced people pid wants who could join members without a veto."""
        return [
            q for q in table.yes_list(pid)
            if not grouping.is_placed(q) and table.compatible(q, members)
        ]

    def draw_group(pid: PersonId, want_partner: bool) -> int:
        """Randomly look for an open group pid may join; bounded by max_local_attempts."""
        if grouping.groups:
            for _ in range(max_local_attempts):
                gi = int(rng.integers(len(grouping.groups)))
                members = grouping.groups[gi]
                if grouping.is_full(gi) or not table.compatible(pid, members):
                    continue
                if want_partner and not table.wants_any(pid, members):
                    continue
                return gi
        raise LocalSearchExhausted(f"No open group for {pid!r} in {max_local_attempts} draws")

    def place(pid: PersonId) -> None:
        # 1) a compatible group that already holds someone they want
        try:
            grouping.add(pid, draw_group(pid, want_partner=True))
            return
        except LocalSearchExhausted:
            pass

        # 2) a new group with someone they want
        if len(grouping) < budget:
            wanted = unplaced_wanted(pid, [pid])
            if wanted:
                grouping.new_group(pid, pick(wanted))
                return

        # 3) any compatible group
        try:
            grouping.add(pid, draw_group(pid, want_partner=False))
            return
        except LocalSearchExhausted:
            pass

        # 4) a group of their own
        if len(grouping) < budget:
            grouping.new_group(pid)
            return

        raise AttemptInfeasible(f"Cannot place {pid!r} with {len(grouping)} of {budget} groups open")

    by_fewest_yeses = sorted(table.ids, key=lambda pid: len(table.yes(pid)))
    for pid in by_fewest_yeses:
        gi = grouping.group_index(pid)
        if gi is None:
            place(pid)
            continue
        # Placed earlier as someone else's partner: pull in one of their own.
        members = grouping.groups[gi]
        if grouping.is_full(gi) or table.wants_any(pid, members):
            continue
        wanted = unplaced_wanted(pid, members)
        if wanted:
            grouping.add(pick(wanted), gi)

    return grouping


def clique_attempt(
    graph: CompatibilityGraph,
    max_group_size: int = 4,
    max_draws: int = 100,
    rng: Optional[np.random.Generator] = None,
    max_attempts: int = 100,
) -> Grouping:
    """CompatibilityGraph.create_grouping wrapped as a Grouping.

    Raises AttemptInfeasible when none of the max_attempts partitions succeed.
    """
    groups = graph.create_grouping(max_group_size, rng, max_draws, max_attempts)
    if groups is None:
        raise AttemptInfeasible(f"No clique partition in {max_attempts} attempts")
    return Grouping.from_lists(groups, max_group_size)


Attempt = Callable[[np.random.Generator], Grouping]


def make_attempt(table: PreferenceTable, config) -> Attempt:
    """Bind a strategy from a GroupingConfig to a single-argument attempt function."""
    if config.strategy == "cliques":
        graph = CompatibilityGraph.from_preferences(table)
        return lambda rng: clique_attempt(
            graph, config.max_group_size, config.max_fill_draws, rng, config.max_partition_attempts)
    return lambda rng: allocate_once(table, config.max_group_size, config.max_local_attempts, rng)
