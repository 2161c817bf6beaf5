"""
Preference data: who wants to work with whom ("yes") and who must never
share a group ("no"), plus readers for the survey matrix and tapout lists.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Hashable, Iterable, Iterator, List, Optional

import pandas as pd

from .errors import InputError
from .logging_config import get_logger

logger = get_logger(__name__)

PersonId = Hashable

YES = "yes"
NO = "no"


@dataclass(frozen=True)
class Person:
    """One respondent's display name and stated preferences.

    preferred_no is reserved for a soft-avoid list; nothing reads it yet.
    """
    name: str
    yes: FrozenSet[PersonId] = frozenset()
    no: FrozenSet[PersonId] = frozenset()
    preferred_no: FrozenSet[PersonId] = field(default=frozenset(), repr=False)


class PreferenceTable(Mapping):
    """Read-only mapping person id -> Person, in a fixed id order."""

    def __init__(self, people: Mapping):
        def known(ids, pid):
            return frozenset(i for i in ids if i in people and i != pid)

        cleaned: Dict[PersonId, Person] = {}
        for pid, person in people.items():
            cleaned[pid] = Person(
                name=person.name,
                yes=known(person.yes, pid),
                no=known(person.no, pid),
                preferred_no=known(person.preferred_no, pid),
            )
        self._people = MappingProxyType(cleaned)
        self._ids: List[PersonId] = list(cleaned)
        self._by_name: Dict[str, PersonId] = {}
        for pid, p in cleaned.items():
            key = p.name.strip().lower()
            if key in self._by_name:
                logger.warning(f"Name '{p.name}' is shared by {self._by_name[key]!r} and {pid!r}; "
                               f"name lookups resolve to {self._by_name[key]!r}")
                continue
            self._by_name[key] = pid
        self._yes_lists = {pid: self.ordered(p.yes) for pid, p in cleaned.items()}

    @classmethod
    def from_records(cls, records: Mapping) -> "PreferenceTable":
        """Build from {id: {"name": str, "yes": ids, "no": ids}}; unknown ids are dropped."""
        people = {}
        for pid, rec in records.items():
            people[pid] = Person(
                name=str(rec.get("name", pid)),
                yes=frozenset(rec.get("yes", ())),
                no=frozenset(rec.get("no", ())),
                preferred_no=frozenset(rec.get("preferred_no", ())),
            )
        return cls(people)

    def __getitem__(self, pid: PersonId) -> Person:
        return self._people[pid]

    def __iter__(self) -> Iterator[PersonId]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"PreferenceTable({len(self)} people)"

    @property
    def ids(self) -> List[PersonId]:
        return list(self._ids)

    def name(self, pid: PersonId) -> str:
        return self._people[pid].name

    def yes(self, pid: PersonId) -> FrozenSet[PersonId]:
        return self._people[pid].yes

    def no(self, pid: PersonId) -> FrozenSet[PersonId]:
        return self._people[pid].no

    def yes_list(self, pid: PersonId) -> List[PersonId]:
        """pid's yes set as a list in table order."""
        return list(self._yes_lists[pid])

    def id_for_name(self, name: str) -> Optional[PersonId]:
        """Case-insensitive lookup of a display name."""
        return self._by_name.get(name.strip().lower())

    def vetoed(self, a: PersonId, b: PersonId) -> bool:
        """True if either person vetoes the other."""
        return a in self._people[b].no or b in self._people[a].no

    def compatible(self, pid: PersonId, members: Iterable[PersonId]) -> bool:
        """True if pid may join a group holding members (no veto in either direction)."""
        return not any(self.vetoed(pid, m) for m in members)

    def wants_any(self, pid: PersonId, members: Iterable[PersonId]) -> bool:
        """True if any of members is in pid's yes set."""
        wanted = self._people[pid].yes
        return any(m in wanted for m in members)

    def mutual_yes(self, a: PersonId, b: PersonId) -> bool:
        return b in self._people[a].yes and a in self._people[b].yes

    def ordered(self, ids: Iterable[PersonId]) -> List[PersonId]:
        """ids in table order; sets iterate in hash order, which varies between runs."""
        wanted = set(ids)
        return [pid for pid in self._ids if pid in wanted]

    def __reduce__(self):
        return (PreferenceTable, (dict(self._people),))


def with_vetoes(table: PreferenceTable, groups: Iterable[Iterable[PersonId]]) -> PreferenceTable:
    """Return a new table where everyone in each group vetoes everyone else in it."""
    extra: Dict[PersonId, set] = {pid: set() for pid in table}
    for group in groups:
        members = list(group)
        for pid in members:
            if pid not in table:
                raise InputError(f"Unknown person id {pid!r} in veto group")
            extra[pid].update(m for m in members if m != pid)
    people = {
        pid: Person(name=p.name, yes=p.yes, no=p.no | extra[pid], preferred_no=p.preferred_no)
        for pid, p in table.items()
    }
    return PreferenceTable(people)


def load_survey(path: str, sep: str = "\t") -> PreferenceTable:
    """Read a survey matrix (header of names, one answer row per respondent).

    Person ids are the 1-based column positions of the header names. Cells
    hold "yes", "no" or nothing; a respondent's own cell is ignored.
    """
    try:
        df = pd.read_csv(path, sep=sep, header=None, dtype=str, keep_default_na=False).fillna("")
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise InputError(f"Survey '{path}' is not a rectangular table: {e}") from e
    if df.empty or df.shape[1] < 2:
        raise InputError(f"Survey '{path}' needs a header row listing at least one name.")

    header = [str(c).strip() for c in df.iloc[0].tolist()]
    names: Dict[int, str] = {}
    for j, name in enumerate(header):
        if j == 0 or not name:
            continue
        if name.lower() in {n.lower() for n in names.values()}:
            raise InputError(f"Duplicate name '{name}' in survey header.")
        names[j] = name
    lower_to_id = {n.lower(): j for j, n in names.items()}

    answers: Dict[int, Dict[str, set]] = {j: {YES: set(), NO: set()} for j in names}
    for _, row in df.iloc[1:].iterrows():
        respondent = str(row.iloc[0]).strip()
        if not respondent:
            continue
        pid = lower_to_id.get(respondent.lower())
        if pid is None:
            raise InputError(f"Respondent '{respondent}' does not appear in the survey header.")
        for j in names:
            if j == pid or j >= len(row):
                continue
            cell = str(row.iloc[j]).strip().lower()
            if cell in (YES, NO):
                answers[pid][cell].add(j)
            elif cell:
                logger.debug(f"Ignoring cell '{cell}' for {respondent} -> {names[j]}")

    people = {
        j: Person(name=names[j], yes=frozenset(answers[j][YES]), no=frozenset(answers[j][NO]))
        for j in names
    }
    logger.info(f"Loaded {len(people)} people from {path}")
    return PreferenceTable(people)


def read_tapout(path: str, table: PreferenceTable) -> List[List[PersonId]]:
    """Read comma-separated tapout lines into lists of person ids."""
    groups: List[List[PersonId]] = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            names = [n.strip() for n in line.split(",") if n.strip()]
            if not names:
                continue
            ids = []
            for name in names:
                pid = table.id_for_name(name)
                if pid is None:
                    raise InputError(f"{path}:{lineno}: unknown name '{name}' in tapout list.")
                ids.append(pid)
            groups.append(ids)
    return groups


def load_tapout(path: str, table: PreferenceTable) -> PreferenceTable:
    """Return table with every tapout group turned into mutual vetoes."""
    groups = read_tapout(path, table)
    logger.info(f"Applying {len(groups)} tapout groups from {path}")
    return with_vetoes(table, groups)
