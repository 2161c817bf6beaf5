"""Tests for the single-attempt allocators."""

from __future__ import annotations

import numpy as np
import pytest

from prefgroups.engine import Grouping, allocate_once, clique_attempt, group_budget
from prefgroups.errors import AttemptInfeasible
from prefgroups.graph import CompatibilityGraph

from conftest import assert_valid_grouping, make_table, random_table


class TestGrouping:
    def test_index_tracks_members(self):
        grouping = Grouping(max_group_size=3)
        gi = grouping.new_group("A", "B")
        grouping.add("C", gi)
        assert grouping.group_of("C") == ["A", "B", "C"]
        assert grouping.group_index("A") == 0
        assert grouping.is_full(gi)
        assert grouping.is_complete("ABC")
        assert not grouping.is_complete("ABCD")

    def test_cannot_place_twice(self):
        grouping = Grouping(max_group_size=3)
        grouping.new_group("A")
        with pytest.raises(ValueError):
            grouping.new_group("A")

    def test_cannot_overfill(self):
        grouping = Grouping(max_group_size=1)
        gi = grouping.new_group("A")
        with pytest.raises(ValueError):
            grouping.add("B", gi)

    def test_as_lists_is_a_copy(self):
        grouping = Grouping.from_lists([["A", "B"], ["C"]], max_group_size=2)
        lists = grouping.as_lists()
        lists[0].append("X")
        assert grouping.groups[0] == ["A", "B"]


def test_group_budget():
    assert group_budget(5, 2) == 3
    assert group_budget(8, 4) == 2
    assert group_budget(0, 4) == 0


def test_vetoed_pair_never_shares_a_group(vetoed_pair_table):
    for seed in range(50):
        grouping = allocate_once(vetoed_pair_table, max_group_size=2, rng=np.random.default_rng(seed))
        assert grouping.group_index("A") != grouping.group_index("B")
        assert_valid_grouping(grouping.groups, vetoed_pair_table, 2)


def test_mutual_pair_placed_together(mutual_pair_table):
    for seed in range(20):
        grouping = allocate_once(mutual_pair_table, max_group_size=3, rng=np.random.default_rng(seed))
        assert grouping.group_index("A") == grouping.group_index("B")


def test_all_vetoes_is_infeasible(all_veto_table, rng):
    with pytest.raises(AttemptInfeasible):
        allocate_once(all_veto_table, max_group_size=2, rng=rng)


def test_all_vetoes_fits_when_everyone_can_be_alone(all_veto_table, rng):
    grouping = allocate_once(all_veto_table, max_group_size=1, rng=rng)
    assert sorted(grouping.as_lists()) == [["A"], ["B"], ["C"], ["D"], ["E"]]


def test_new_group_pairs_person_with_someone_they_want(rng):
    # D opens a group of its own; B, going last, joins the group holding D.
    table = make_table(yes={"B": ["D"]})
    grouping = allocate_once(table, max_group_size=2, rng=rng)
    assert grouping.group_index("B") == grouping.group_index("D")


def test_desired_partner_who_vetoes_is_not_pulled_in(rng):
    table = make_table(yes={"A": ["B"]}, no={"B": ["A"]})
    for seed in range(20):
        grouping = allocate_once(table, max_group_size=2, rng=np.random.default_rng(seed))
        assert grouping.group_index("A") != grouping.group_index("B")


def test_placed_person_pulls_in_a_partner(rng):
    # A opens [A, B]; on B's turn the group holds nobody B wants, so B pulls in E.
    table = make_table(yes={"A": ["B"], "B": ["E", "C"], "E": ["B", "C", "D"]}, people="ABCDE")
    grouping = allocate_once(table, max_group_size=3, rng=rng)
    assert grouping.group_of("C") == ["C", "D"]
    assert grouping.group_of("B") == ["A", "B", "E"]


def test_random_tables_never_break_vetoes():
    successes = 0
    for seed in range(60):
        table = random_table(18, seed=seed, p_no=0.08)
        try:
            grouping = allocate_once(table, max_group_size=4, rng=np.random.default_rng(seed))
        except AttemptInfeasible:
            continue
        successes += 1
        assert grouping.is_complete(table.ids)
        assert_valid_grouping(grouping.groups, table, 4)
    assert successes > 0


def test_same_seed_same_grouping():
    table = random_table(16, seed=4)
    first = allocate_once(table, rng=np.random.default_rng(42)).as_lists()
    second = allocate_once(table, rng=np.random.default_rng(42)).as_lists()
    assert first == second


def test_clique_attempt_wraps_partition(vetoed_pair_table):
    graph = CompatibilityGraph.from_preferences(vetoed_pair_table)
    for seed in range(20):
        try:
            grouping = clique_attempt(graph, max_group_size=2, rng=np.random.default_rng(seed))
        except AttemptInfeasible:
            continue
        assert grouping.is_complete("ABCD")
        assert_valid_grouping(grouping.groups, vetoed_pair_table, 2)
