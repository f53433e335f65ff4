"""Read-only index over one snapshot of matches."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from bracket_pool.bracket.topology import MatchKey, round_index
from bracket_pool.ingest.schema import Match


def key_of(match: Match) -> MatchKey:
    """Return the coordinates of *match*."""
    return MatchKey(match.round, match.region, match.match_number)


class MatchIndex:
    """Lookup of a match snapshot by id and by coordinates.

    Args:
        matches: The caller's snapshot.  Later duplicates of the same
            coordinates are rejected since exactly one match may exist per
            ``(round, region, match_number)``.

    Raises:
        ValueError: If two matches share an id or coordinates.
    """

    def __init__(self, matches: Iterable[Match]) -> None:
        self._by_id: dict[str, Match] = {}
        self._by_key: dict[MatchKey, Match] = {}
        for match in matches:
            key = key_of(match)
            if match.match_id in self._by_id:
                msg = f"Duplicate match id {match.match_id!r} in snapshot"
                raise ValueError(msg)
            if key in self._by_key:
                msg = f"Two matches at {key} ({self._by_key[key].match_id!r}, {match.match_id!r})"
                raise ValueError(msg)
            self._by_id[match.match_id] = match
            self._by_key[key] = match

    def __iter__(self) -> Iterator[Match]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._by_id

    def by_id(self, match_id: str) -> Match:
        """Return the match with *match_id*.

        Raises:
            KeyError: If no such match is in the snapshot.
        """
        return self._by_id[match_id]

    def at(self, key: MatchKey) -> Match | None:
        """Return the match at *key*, or ``None`` if the snapshot lacks it."""
        return self._by_key.get(key)

    def first_round_entrant_ids(self) -> set[str]:
        """Return every entrant id stored in a Round-of-64 slot."""
        ids: set[str] = set()
        for match in self._by_id.values():
            if match.round == "R64":
                ids.update(eid for eid in match.entrant_ids if eid is not None)
        return ids

    def in_round_order(self) -> list[Match]:
        """Return the snapshot sorted by round, then region, then match number."""
        return sorted(
            self._by_id.values(),
            key=lambda m: (round_index(m.round), m.region or "", m.match_number),
        )
