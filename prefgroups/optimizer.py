"""
Repeat one allocation strategy many times and keep the best result.

Every trial gets its own child seed from numpy's SeedSequence, so trial i
draws the same numbers whether it runs in this process or in a worker.
Outcomes are reduced in trial order: highest satisfied count wins and ties
keep the earliest trial.
"""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Hashable, List, Optional, Tuple, Union

import numpy as np

from .config import GroupingConfig
from .engine import Grouping, make_attempt
from .errors import AttemptInfeasible
from .logging_config import get_logger
from .preferences import PreferenceTable

logger = get_logger(__name__)

PersonId = Hashable


@dataclass
class GroupingResult:
    """Best successful trial."""
    groups: List[List[PersonId]]
    satisfied_count: int
    unsatisfied_ids: List[PersonId]
    trial: int
    trials_run: int
    scores: List[int] = field(default_factory=list)
    seed_entropy: Optional[int] = None
    ok = True

    @property
    def successes(self) -> int:
        return len(self.scores)


@dataclass
class NoFeasibleGrouping:
    """Every trial failed; there is no grouping to report."""
    trials_run: int
    reason: str = "no trial produced a grouping that honors every veto"
    seed_entropy: Optional[int] = None
    ok = False


OptimizeOutcome = Union[GroupingResult, NoFeasibleGrouping]

# (trial index, groups, satisfied count, unsatisfied ids) or (trial index, None, 0, [])
TrialOutcome = Tuple[int, Optional[List[List[PersonId]]], int, List[PersonId]]


def score_grouping(grouping: Grouping, table: PreferenceTable) -> Tuple[int, List[PersonId]]:
    """Count people whose group holds someone they want; list the rest in table order."""
    unsatisfied: List[PersonId] = []
    for pid in table:
        members = grouping.group_of(pid) or []
        if not table.wants_any(pid, members):
            unsatisfied.append(pid)
    return len(table) - len(unsatisfied), unsatisfied


def _run_trials(
    table: PreferenceTable,
    config: GroupingConfig,
    seeds: List[Tuple[int, np.random.SeedSequence]],
) -> List[TrialOutcome]:
    """Run the given trials in order; module level so worker processes can call it."""
    attempt = make_attempt(table, config)
    outcomes: List[TrialOutcome] = []
    for index, seed_seq in seeds:
        rng = np.random.default_rng(seed_seq)
        try:
            grouping = attempt(rng)
        except AttemptInfeasible as e:
            logger.debug(f"Trial {index} failed: {e}")
            outcomes.append((index, None, 0, []))
            continue
        satisfied, unsatisfied = score_grouping(grouping, table)
        outcomes.append((index, grouping.as_lists(), satisfied, unsatisfied))
    return outcomes


def _chunks(items: List, n: int) -> List[List]:
    size = -(-len(items) // n)
    return [items[i:i + size] for i in range(0, len(items), size)]


class TrialOptimizer:
    """Run config.trials independent attempts and keep the best success."""

    def __init__(self, table: PreferenceTable, config: Optional[GroupingConfig] = None):
        self.table = table
        self.config = (config or GroupingConfig()).validate()

    def _seeds(self) -> Tuple[np.random.SeedSequence, List[Tuple[int, np.random.SeedSequence]]]:
        root = np.random.SeedSequence(self.config.seed)
        return root, list(enumerate(root.spawn(self.config.trials)))

    def _collect(self, seeds) -> List[TrialOutcome]:
        workers = min(self.config.workers, os.cpu_count() or 1, len(seeds))
        if workers <= 1:
            return _run_trials(self.table, self.config, seeds)
        logger.info(f"Running {len(seeds)} trials on {workers} workers")
        chunks = _chunks(seeds, workers)
        with ProcessPoolExecutor(max_workers=workers) as pool:
            parts = pool.map(_run_trials, [self.table] * len(chunks), [self.config] * len(chunks), chunks)
            return [outcome for part in parts for outcome in part]

    def run(self) -> OptimizeOutcome:
        """Return the best GroupingResult, or NoFeasibleGrouping if every trial failed."""
        root, seeds = self._seeds()
        logger.info(f"Seed entropy {root.entropy}; pass it as the seed to reproduce this run")
        if len(self.table) == 0:
            return GroupingResult(groups=[], satisfied_count=0, unsatisfied_ids=[],
                                  trial=0, trials_run=0, seed_entropy=root.entropy)

        outcomes = sorted(self._collect(seeds), key=lambda o: o[0])
        best: Optional[TrialOutcome] = None
        scores: List[int] = []
        for outcome in outcomes:
            index, groups, satisfied, _ = outcome
            if groups is None:
                continue
            scores.append(satisfied)
            if best is None or satisfied > best[2]:
                best = outcome

        if best is None:
            logger.warning(f"All {len(outcomes)} trials failed ({self.config.strategy} strategy)")
            return NoFeasibleGrouping(trials_run=len(outcomes), seed_entropy=root.entropy)

        index, groups, satisfied, unsatisfied = best
        logger.info(
            f"{len(scores)}/{len(outcomes)} trials succeeded; best trial {index} "
            f"satisfies {satisfied}/{len(self.table)}"
        )
        return GroupingResult(
            groups=groups,
            satisfied_count=satisfied,
            unsatisfied_ids=unsatisfied,
            trial=index,
            trials_run=len(outcomes),
            scores=scores,
            seed_entropy=root.entropy,
        )


def optimize(table: PreferenceTable, config: Optional[GroupingConfig] = None, **overrides) -> OptimizeOutcome:
    """Convenience wrapper: TrialOptimizer(table, GroupingConfig(**overrides)).run()."""
    if config is None:
        config = GroupingConfig(**overrides)
    elif overrides:
        config = GroupingConfig(**{**config.as_dict(), **overrides})
    return TrialOptimizer(table, config).run()
