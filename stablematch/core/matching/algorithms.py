"""
Stable matching decoders.

Both decoders turn a proposal order (the candidate vector) into a
``Matches`` instance. Every proposer keeps a pointer into its own ranking
that advances on each proposal, so no candidate is proposed to twice by the
same proposer and the loops always terminate.

Individuals of every set propose, and a rejected proposer never revisits a
candidate it has passed. A receiver that later loses a partner is not
approached again by earlier rejecters, so a decoded matching can contain
blocking pairs. Search over proposal orders is what drives the result
towards a fit, low-conflict matching.
"""

from collections import deque
from typing import Optional, Sequence

from stablematch.core.matching.data import MatchingData
from stablematch.core.matching.matches import Matches
from stablematch.core.matching.preferences import PreferenceListWrapper


def deferred_acceptance(
    data: MatchingData,
    preferences: PreferenceListWrapper,
    order: Sequence[int],
) -> Matches:
    """
    Capacity-aware deferred acceptance for two-set problems.

    Individuals propose in ``order`` to their most preferred candidates
    until full or out of candidates. A full receiver keeps its preferred
    partners and the rejected one proposes again later.
    """
    matches = Matches(data.size)
    next_rank = [0] * data.size
    queue = deque(order)

    while queue:
        node = queue.popleft()
        node_capacity = data.get_capacity_of(node)
        ranking = preferences[node].get_ranking()

        while not matches.is_full(node, node_capacity) and next_rank[node] < len(ranking):
            target = ranking[next_rank[node]]
            next_rank[node] += 1

            if data.is_excluded(node, target) or matches.is_matched(node, target):
                continue

            target_capacity = data.get_capacity_of(target)
            if not matches.is_full(target, target_capacity):
                matches.add_match_bi(node, target)
                continue

            loser = preferences.get_least_score_node(
                target, node, matches.get_set_of(target), target_capacity
            )
            if loser is None or loser == node:
                continue

            matches.remove_match_bi(target, loser)
            matches.add_match_bi(node, target)
            queue.append(loser)

    return matches


def triplet_matching(
    data: MatchingData,
    preferences: PreferenceListWrapper,
    order: Sequence[int],
) -> Matches:
    """
    Group matching for three-set problems.

    A proposer looks for one acceptable partner in each other set. Only a
    complete group changes the state: the groups of its partners are
    dissolved, their other members queued again, and the new group is
    connected as a clique.
    """
    matches = Matches(data.size)
    other_sets = {
        set_index: [s for s in range(data.set_count) if s != set_index]
        for set_index in range(data.set_count)
    }
    next_rank: dict[tuple[int, int], int] = {}
    queue = deque(order)

    while queue:
        node = queue.popleft()
        if matches.is_matched(node):
            continue

        group = [node]
        for target_set in other_sets[data.get_set_of(node)]:
            partner = _find_group_partner(data, preferences, matches, next_rank, group, target_set)
            if partner is None:
                break
            group.append(partner)

        if len(group) != data.set_count:
            continue

        for partner in group[1:]:
            if not matches.is_matched(partner):
                continue
            members = matches.get_matches_and_target(partner)
            for member in members:
                matches.dis_match(member, members)
                if member not in group:
                    queue.append(member)

        matches.add_match_for_group(group)

    return matches


def _find_group_partner(
    data: MatchingData,
    preferences: PreferenceListWrapper,
    matches: Matches,
    next_rank: dict[tuple[int, int], int],
    group: list[int],
    target_set: int,
) -> Optional[int]:
    node = group[0]
    node_set = data.get_set_of(node)
    ranking = preferences[node].get_ranking(target_set)
    key = (node, target_set)

    while next_rank.get(key, 0) < len(ranking):
        candidate = ranking[next_rank.get(key, 0)]
        next_rank[key] = next_rank.get(key, 0) + 1

        if any(data.is_excluded(member, candidate) for member in group):
            continue
        if not matches.is_matched(candidate):
            return candidate

        mates = [m for m in matches.get_set_of(candidate) if data.get_set_of(m) == node_set]
        if mates and preferences.is_preferred_over(node, mates[0], candidate):
            return candidate

    return None
