"""
Team alias table: resolves free-text team names to a canonical entry.
Built from configuration (ReconcilerSettings.team_aliases), never from module state.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional

_WHITESPACE = re.compile(r"\s+")


def clean_name(name: Optional[str]) -> str:
    """Lower-case, drop periods, collapse whitespace to single spaces."""
    s = (name or "").lower().replace(".", "")
    return _WHITESPACE.sub(" ", s).strip()


class TeamAliasTable:
    """
    Canonical team -> aliases lookup.

    A name resolves to a canonical team when it equals one of the aliases, or
    contains one as a whole-word phrase ("Tottenham Hotspur FC" -> tottenham).
    Longer aliases are tried first so "man utd" never loses to a shorter hit.
    """

    def __init__(self, aliases: Mapping[str, Iterable[str]]) -> None:
        self._exact: dict[str, str] = {}
        patterns: list[tuple[str, str]] = []
        for canonical, names in aliases.items():
            canon = clean_name(canonical)
            if not canon:
                continue
            for alias in {canon, *(clean_name(n) for n in names)}:
                if not alias:
                    continue
                self._exact.setdefault(alias, canon)
                patterns.append((alias, canon))
        patterns.sort(key=lambda p: len(p[0]), reverse=True)
        self._patterns = [
            (re.compile(rf"(?<![a-z0-9]){re.escape(alias)}(?![a-z0-9])"), canon)
            for alias, canon in patterns
        ]

    def __len__(self) -> int:
        return len({canon for canon in self._exact.values()})

    def resolve(self, name: Optional[str]) -> Optional[str]:
        """Canonical team for name, or None when the table does not know it."""
        s = clean_name(name)
        if not s:
            return None
        hit = self._exact.get(s)
        if hit:
            return hit
        for pattern, canon in self._patterns:
            if pattern.search(s):
                return canon
        return None

    def same_team(self, a: Optional[str], b: Optional[str]) -> bool:
        """True when both names resolve, and resolve to the same canonical team."""
        ca = self.resolve(a)
        return ca is not None and ca == self.resolve(b)
