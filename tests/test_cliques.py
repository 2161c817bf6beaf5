"""Tests for MaximalMutualGroupFinder."""

from __future__ import annotations

import networkx as nx

from prefgroups.cliques import MaximalMutualGroupFinder, find_maximal_mutual_groups

from conftest import make_table, random_table


def mutual_graph(table) -> nx.Graph:
    G = nx.Graph()
    G.add_nodes_from(table)
    G.add_edges_from((a, b) for a in table for b in table.yes(a) if table.mutual_yes(a, b))
    return G


def test_clique_plus_isolated_person():
    table = make_table(yes={"A": ["B", "C"], "B": ["A", "C"], "C": ["A", "B"]})
    groups = find_maximal_mutual_groups(table)
    assert groups[0] == ["A", "B", "C"]
    assert ["D"] in groups
    assert all("D" not in g for g in groups if len(g) > 1)
    assert len(groups) == 2


def test_one_way_yes_is_not_mutual():
    table = make_table(yes={"A": ["B"], "B": ["A", "C"]}, people="ABC")
    groups = find_maximal_mutual_groups(table)
    assert ["A", "B"] in groups
    assert ["C"] in groups
    assert not any({"B", "C"} <= set(g) for g in groups)


def test_overlapping_groups_are_all_reported():
    # A-B-C and B-C-D are mutual triangles that share B and C.
    pairs = [("A", "B"), ("A", "C"), ("B", "C"), ("B", "D"), ("C", "D")]
    yes = {p: [] for p in "ABCD"}
    for a, b in pairs:
        yes[a].append(b)
        yes[b].append(a)
    groups = find_maximal_mutual_groups(make_table(yes=yes))
    assert sorted(groups) == [["A", "B", "C"], ["B", "C", "D"]]


def test_sorted_largest_first_without_duplicates():
    groups = find_maximal_mutual_groups(random_table(14, seed=2, p_yes=0.6))
    sizes = [len(g) for g in groups]
    assert sizes == sorted(sizes, reverse=True)
    assert len({frozenset(g) for g in groups}) == len(groups)


def test_matches_networkx_maximal_cliques():
    table = random_table(14, seed=8, p_yes=0.6)
    ours = {frozenset(g) for g in find_maximal_mutual_groups(table)}
    theirs = {frozenset(c) for c in nx.find_cliques(mutual_graph(table))}
    assert ours == theirs


def test_mutual_yeses_filters_by_every_member():
    table = make_table(yes={"A": ["B", "C"], "B": ["A"], "C": ["A", "B"]}, people="ABC")
    finder = MaximalMutualGroupFinder(table)
    assert finder.mutual_yeses([], ["A", "B", "C"]) == ["A", "B", "C"]
    assert finder.mutual_yeses(["A"], ["A", "B", "C"]) == ["B", "C"]
    # C wants B but B does not want C
    assert finder.mutual_yeses(["A", "B"], ["A", "B", "C"]) == []


def test_empty_table():
    assert find_maximal_mutual_groups(make_table(people="")) == []
