"""Shared fixtures for grouping tests."""

from __future__ import annotations

import logging

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from prefgroups.preferences import PreferenceTable


def make_table(yes=None, no=None, people="ABCD") -> PreferenceTable:
    """Build a table from {id: [ids]} yes/no dicts; names equal ids."""
    yes = yes or {}
    no = no or {}
    return PreferenceTable.from_records({
        pid: {"name": pid, "yes": yes.get(pid, ()), "no": no.get(pid, ())}
        for pid in people
    })


def random_table(n: int, seed: int, p_yes: float = 0.15, p_no: float = 0.1) -> PreferenceTable:
    """Random survey over ids 0..n-1."""
    rng = np.random.default_rng(seed)
    records = {}
    for i in range(n):
        others = [j for j in range(n) if j != i]
        records[i] = {
            "name": f"P{i}",
            "yes": [j for j in others if rng.random() < p_yes],
            "no": [j for j in others if rng.random() < p_no],
        }
    return PreferenceTable.from_records(records)


def assert_valid_grouping(groups, table: PreferenceTable, max_group_size: int):
    """No veto inside any group, sizes bounded, everyone placed once, group count bounded."""
    placed = [pid for g in groups for pid in g]
    assert sorted(placed, key=str) == sorted(table.ids, key=str)
    assert len(groups) <= -(-len(table) // max_group_size)
    for g in groups:
        assert 1 <= len(g) <= max_group_size
        for a in g:
            for b in g:
                if a != b:
                    assert a not in table.no(b), f"{b} vetoed {a} but they share {g}"


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def vetoed_pair_table():
    # B refuses A
    return make_table(no={"B": ["A"]})


@pytest.fixture
def mutual_pair_table():
    return make_table(yes={"A": ["B"], "B": ["A"]}, people="ABC")


@pytest.fixture
def all_veto_table():
    people = "ABCDE"
    return make_table(no={p: [q for q in people if q != p] for p in people}, people=people)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
