"""
Undirected compatibility graph over person ids.

An edge a-b means neither person vetoes the other. Backed by a networkx
Graph, so adjacency is symmetric by construction and a node without an
entry is absent from the graph rather than isolated.
"""

from __future__ import annotations

from typing import AbstractSet, Dict, Hashable, List, Optional

import networkx as nx
import numpy as np

from .errors import AttemptInfeasible, LocalSearchExhausted, UnknownNodeError
from .logging_config import get_logger

logger = get_logger(__name__)

Node = Hashable


class CompatibilityGraph:
    """Who may share a group with whom."""

    def __init__(self):
        self._graph = nx.Graph()

    @classmethod
    def from_preferences(cls, table) -> "CompatibilityGraph":
        """Connect every pair in a PreferenceTable that has no veto in either direction."""
        graph = cls()
        ids = list(table)
        for pid in ids:
            graph.add_node(pid)
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                if not table.vetoed(a, b):
                    graph.add_edge(a, b)
        logger.debug(f"Compatibility graph: {len(ids)} nodes, {graph.num_edges} edges")
        return graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node: Node) -> bool:
        return node in self._graph

    @property
    def nodes(self) -> List[Node]:
        """Nodes in insertion order."""
        return list(self._graph.nodes)

    @property
    def num_edges(self) -> int:
        return self._graph.number_of_edges()

    def neighbors(self, node: Node) -> AbstractSet[Node]:
        if node not in self._graph:
            raise UnknownNodeError(node)
        return self._graph.adj[node].keys()

    def add_node(self, node: Node) -> AbstractSet[Node]:
        """Ensure node exists and return its live, read-only neighbor set.

        Adding an existing node leaves its edges untouched.
        """
        if node not in self._graph:
            self._graph.add_node(node)
        return self._graph.adj[node].keys()

    def remove_node(self, node: Node) -> bool:
        """Remove node and every edge touching it; False if it was not present."""
        if node not in self._graph:
            return False
        self._graph.remove_node(node)
        return True

    def _require(self, *nodes: Node) -> None:
        for node in nodes:
            if node not in self._graph:
                raise UnknownNodeError(node)

    def add_edge(self, a: Node, b: Node) -> None:
        """Connect a and b. Self-loops are ignored; everyone is compatible with themselves."""
        self._require(a, b)
        if a != b:
            self._graph.add_edge(a, b)

    def remove_edge(self, a: Node, b: Node) -> None:
        self._require(a, b)
        if self._graph.has_edge(a, b):
            self._graph.remove_edge(a, b)

    def is_connected(self, a: Node, b: Node) -> bool:
        return b in self._graph.adj.get(a, {})

    def is_clique(self, members: List[Node]) -> bool:
        """True if every pair in members is connected."""
        return all(
            self.is_connected(a, b)
            for i, a in enumerate(members)
            for b in members[i + 1:]
        )

    def _order(self) -> Dict[Node, int]:
        return {node: i for i, node in enumerate(self._graph.nodes)}

    def get_components(self) -> List[List[Node]]:
        """Connected components, each listed in insertion order.

        Components are ordered by their earliest node. Every node appears in
        exactly one component.
        """
        order = self._order()
        components = [sorted(c, key=order.__getitem__) for c in nx.connected_components(self._graph)]
        components.sort(key=lambda c: order[c[0]])
        return components

    def get_mutual_groups(self) -> List[List[Node]]:
        """Split the nodes into groups whose members are all pairwise connected.

        Starts from one group holding everyone; each node in insertion order
        splits its current group into the part compatible with it (itself
        included) and the rest. The result is a partition and every group is
        a clique, but it depends on node order and is not a minimum clique
        cover.
        """
        nodes = self.nodes
        if not nodes:
            return []
        groups: List[List[Node]] = [list(nodes)]
        group_of: Dict[Node, int] = {node: 0 for node in nodes}

        for node in nodes:
            gi = group_of[node]
            current = groups[gi]
            compatible = [m for m in current if m == node or self.is_connected(node, m)]
            if len(compatible) == len(current):
                continue
            keep = set(compatible)
            groups[gi] = [m for m in current if m not in keep]
            groups.append(compatible)
            for m in compatible:
                group_of[m] = len(groups) - 1
        return groups

    def nodes_by_num_edges(self) -> List[Node]:
        """Nodes ordered from fewest to most edges (ties keep insertion order)."""
        return sorted(self._graph.nodes, key=self._graph.degree)

    def to_networkx(self) -> nx.Graph:
        return self._graph.copy()

    def _fill_group(
        self,
        group: List[Node],
        available: List[Node],
        max_group_size: int,
        max_draws: int,
        rng: np.random.Generator,
    ) -> None:
        """Grow group with random available nodes that keep it a clique."""
        misses = 0
        while len(group) < max_group_size and available:
            idx = int(rng.integers(len(available)))
            cand = available[idx]
            if all(self.is_connected(cand, m) for m in group):
                group.append(cand)
                available.pop(idx)
                misses = 0
                continue
            misses += 1
            if misses >= max_draws:
                raise LocalSearchExhausted(
                    f"No compatible member for {group} after {max_draws} draws"
                )

    def partition_attempt(
        self,
        max_group_size: int = 4,
        max_draws: int = 100,
        rng: Optional[np.random.Generator] = None,
    ) -> List[List[Node]]:
        """One randomized pass that splits every node into clique groups.

        Raises AttemptInfeasible when a group cannot be filled; the partial
        partition is discarded and the caller starts over.
        """
        rng = rng if rng is not None else np.random.default_rng()
        available = self.nodes
        groups: List[List[Node]] = []
        while available:
            group: List[Node] = []
            try:
                self._fill_group(group, available, max_group_size, max_draws, rng)
            except LocalSearchExhausted as e:
                raise AttemptInfeasible(str(e)) from e
            groups.append(group)
        return groups

    def create_grouping(
        self,
        max_group_size: int = 4,
        rng: Optional[np.random.Generator] = None,
        max_draws: int = 100,
        max_attempts: int = 100,
    ) -> Optional[List[List[Node]]]:
        """Partition the graph into cliques of at most max_group_size.

        Retries the whole partition up to max_attempts times and returns None
        when none succeeds. Groups fill up to max_group_size before a new one
        starts, so there are never more than ceil(n / max_group_size) groups.
        """
        rng = rng if rng is not None else np.random.default_rng()
        for attempt in range(max_attempts):
            try:
                return self.partition_attempt(max_group_size, max_draws, rng)
            except AttemptInfeasible as e:
                logger.debug(f"Partition attempt {attempt + 1}/{max_attempts} failed: {e}")
        logger.warning(f"No clique partition found in {max_attempts} attempts")
        return None
