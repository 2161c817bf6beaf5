"""Assign people to small groups from yes/no preferences without breaking a veto."""

from .cliques import MaximalMutualGroupFinder, find_maximal_mutual_groups
from .config import GroupingConfig
from .engine import Grouping, allocate_once, clique_attempt
from .errors import (
    AttemptInfeasible,
    ConfigError,
    InputError,
    LocalSearchExhausted,
    PrefGroupsError,
    UnknownNodeError,
)
from .graph import CompatibilityGraph
from .optimizer import GroupingResult, NoFeasibleGrouping, TrialOptimizer, optimize, score_grouping
from .preferences import Person, PreferenceTable, load_survey, load_tapout, with_vetoes

__version__ = "0.1.0"

__all__ = [
    "AttemptInfeasible",
    "CompatibilityGraph",
    "ConfigError",
    "Grouping",
    "GroupingConfig",
    "GroupingResult",
    "InputError",
    "LocalSearchExhausted",
    "MaximalMutualGroupFinder",
    "NoFeasibleGrouping",
    "Person",
    "PreferenceTable",
    "PrefGroupsError",
    "TrialOptimizer",
    "UnknownNodeError",
    "allocate_once",
    "clique_attempt",
    "find_maximal_mutual_groups",
    "load_survey",
    "load_tapout",
    "optimize",
    "score_grouping",
    "with_vetoes",
]
