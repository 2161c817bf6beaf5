"""Exception classes for grouping.

Bounded searches raise and catch these internally; only configuration and
input problems are meant to reach the user as exceptions.
"""

from __future__ import annotations


class PrefGroupsError(Exception):
    """Base exception for all grouping errors."""

    pass


class ConfigError(PrefGroupsError, ValueError):
    """Raised when a configuration value fails validation."""

    pass


class InputError(PrefGroupsError, ValueError):
    """Raised when survey or tapout input cannot be interpreted."""

    pass


class UnknownNodeError(PrefGroupsError, KeyError):
    """Raised when an edge operation references a node that was never added."""

    def __init__(self, node):
        super().__init__(node)
        self.node = node

    def __str__(self) -> str:
        return f"Unknown node {self.node!r}"


class LocalSearchExhausted(PrefGroupsError):
    """Raised when a bounded random search runs out of draws."""

    pass


class AttemptInfeasible(PrefGroupsError):
    """Raised when one trial cannot place someone under the veto constraints."""

    pass
