"""Cascade invalidation of downstream picks after a pick changes.

When a bracket replaces its pick on a match, the previously picked entrant
no longer advances out of that match in the bracket's projection.  Two
kinds of later pick become inconsistent:

* any pick in a later round that still selects the un-picked entrant;
* any pick on the changed match's successor chain whose entrant is no
  longer one of that match's virtual occupants once the deletions above
  are taken into account.

The result is the set of pick identities to delete.  Nothing is mutated;
the caller removes the whole set in one write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bracket_pool.bracket.snapshot import MatchIndex, key_of
from bracket_pool.bracket.topology import downstream_keys, feeder_slots, round_index
from bracket_pool.ingest.schema import Match, Pick

logger = logging.getLogger(__name__)


def invalidate(
    bracket_picks: Iterable[Pick],
    all_matches: Iterable[Match] | MatchIndex,
    changed_match: Match,
    old_picked_entrant_id: str,
    new_picked_entrant_id: str | None = None,
) -> frozenset[str]:
    """Return the ids of picks made inconsistent by changing one pick.

    Args:
        bracket_picks: All picks of one bracket.  The pick on
            *changed_match* may hold either the old or the new entrant.
        all_matches: Snapshot of every match.
        changed_match: Match whose pick is being overwritten.
        old_picked_entrant_id: Entrant the bracket picked before the change.
        new_picked_entrant_id: Entrant picked after the change, when known.
            Passing the same entrant as *old_picked_entrant_id* is a no-op.

    Returns:
        Pick ids (see :attr:`Pick.pick_id`) to delete.  Never contains the
        pick on *changed_match* itself.
    """
    if new_picked_entrant_id == old_picked_entrant_id:
        return frozenset()

    index = all_matches if isinstance(all_matches, MatchIndex) else MatchIndex(all_matches)
    picks_by_match: dict[str, Pick] = {p.match_id: p for p in bracket_picks}
    surviving: dict[str, str] = {mid: p.picked_entrant_id for mid, p in picks_by_match.items()}
    if new_picked_entrant_id is not None:
        surviving[changed_match.match_id] = new_picked_entrant_id

    changed_idx = round_index(changed_match.round)
    chain = set(downstream_keys(key_of(changed_match)))
    deleted: set[str] = set()

    for match in index.in_round_order():
        if round_index(match.round) <= changed_idx:
            continue
        picked = surviving.get(match.match_id)
        if picked is None:
            continue

        orphaned = False
        if picked == old_picked_entrant_id:
            orphaned = True
        elif key_of(match) in chain:
            occupants = {
                surviving.get(feeder.match_id)
                for feeder in (index.at(k) for k in feeder_slots(*key_of(match)))
                if feeder is not None
            }
            orphaned = picked not in occupants

        if orphaned:
            deleted.add(picks_by_match[match.match_id].pick_id)
            del surviving[match.match_id]

    if deleted:
        logger.info(
            "Un-picking %s on %s invalidates %d downstream pick(s)",
            old_picked_entrant_id,
            changed_match.match_id,
            len(deleted),
        )
    return frozenset(deleted)
