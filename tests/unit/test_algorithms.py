"""
Tests for stablematch.core.matching.algorithms — deferred acceptance and
triplet group matching.

Preferences use the ``P1`` evaluation function, so every individual ranks
its candidates by their first property.
"""

import numpy as np
import pytest

from stablematch.core.matching import build_problem, deferred_acceptance, triplet_matching
from stablematch.data.sample import generate_sample_problem
from stablematch.utils.constants import MatchingProblemType


def _assert_symmetric(matches):
    for node, partners in enumerate(matches.to_list()):
        for partner in partners:
            assert node in matches.get_set_of(partner)


# ── deferred_acceptance ──────────────────────────────────────────────────────


class TestDeferredAcceptanceOneToOne:
    def test_known_matching(self, oto_problem):
        matches = deferred_acceptance(oto_problem.data, oto_problem.preferences, [0, 1, 2, 3])
        assert matches.to_list() == [[2], [3], [0], [1]]

    def test_rejected_proposer_moves_on(self, oto_problem):
        # 3 takes 1, then 2 is rejected by 1 and ends with 0
        matches = deferred_acceptance(oto_problem.data, oto_problem.preferences, [3, 2, 1, 0])
        assert matches.to_list() == [[2], [3], [0], [1]]

    def test_order_changes_result(self, oto_problem):
        matches = deferred_acceptance(oto_problem.data, oto_problem.preferences, [2, 0, 1, 3])
        assert matches.to_list() == [[3], [2], [1], [0]]

    def test_partial_order_leaves_others_free(self, oto_problem):
        matches = deferred_acceptance(oto_problem.data, oto_problem.preferences, [0])
        assert matches.to_list() == [[3], [], [], [0]]
        assert matches.get_left_overs() == [1, 2]

    def test_excluded_pair_is_never_formed(self, make_problem):
        problem = make_problem(excluded_pairs=[(1, 3)])
        matches = deferred_acceptance(problem.data, problem.preferences, [0, 1, 2, 3])
        assert not matches.is_matched(1, 3)
        assert matches.to_list() == [[3], [2], [1], [0]]

    def test_all_candidates_excluded(self, make_problem):
        problem = make_problem(excluded_pairs=[(0, 2), (0, 3)])
        matches = deferred_acceptance(problem.data, problem.preferences, [0, 1, 2, 3])
        assert matches.get_set_of(0) == ()

    def test_matched_receiver_never_proposes(self, oto_problem, make_preferences):
        # 3 takes 0 before 0 proposes, so 0 and 2 end as a blocking pair
        preferences = make_preferences({
            0: {2: 2.0, 3: 1.0},
            1: {2: 2.0, 3: 1.0},
            2: {0: 2.0, 1: 1.0},
            3: {0: 2.0, 1: 1.0},
        })
        matches = deferred_acceptance(oto_problem.data, preferences, [3, 1, 0, 2])
        assert matches.to_list() == [[3], [2], [1], [0]]
        assert preferences.is_preferred_over(2, 3, 0)
        assert preferences.is_preferred_over(0, 1, 2)


class TestDeferredAcceptanceCapacities:
    def test_many_to_many(self, make_problem):
        problem = make_problem(
            matching_type=MatchingProblemType.MTM,
            capacities=[2, 2, 2, 2],
        )
        matches = deferred_acceptance(problem.data, problem.preferences, [0, 1, 2, 3])
        assert matches.to_list() == [[2, 3], [2, 3], [0, 1], [0, 1]]

    def test_one_to_many(self, make_problem):
        problem = make_problem(
            matching_type=MatchingProblemType.OTM,
            set_indices=[0, 1, 1],
            capacities=[2, 1, 1],
        )
        matches = deferred_acceptance(problem.data, problem.preferences, [0, 1, 2])
        assert matches.to_list() == [[1, 2], [0], [0]]

    def test_full_receiver_drops_weakest(self, make_problem):
        # 0 holds 2 spots; the best candidate 3 displaces the weaker 1
        problem = make_problem(
            matching_type=MatchingProblemType.OTM,
            set_indices=[0, 1, 1, 1],
            capacities=[2, 1, 1, 1],
        )
        matches = deferred_acceptance(problem.data, problem.preferences, [1, 2, 3])
        assert matches.get_set_of(0) == (2, 3)
        assert matches.get_left_overs() == [1]


@pytest.fixture
def random_problem():
    def _factory(matching_type, excluded_pairs=()):
        definition = generate_sample_problem(
            set_sizes=[6, 5],
            matching_type=matching_type,
            seed=7,
        ).model_copy(update={"excluded_pairs": list(excluded_pairs)})
        return build_problem(definition, reject_uniform_preferences=False)

    return _factory


class TestDeferredAcceptanceInvariants:
    @pytest.mark.parametrize(
        "matching_type",
        [MatchingProblemType.OTO, MatchingProblemType.OTM, MatchingProblemType.MTM],
    )
    def test_capacities_and_symmetry(self, random_problem, matching_type):
        problem = random_problem(matching_type, excluded_pairs=[(0, 6), (1, 7), (2, 8)])
        rng = np.random.default_rng(3)
        for _ in range(20):
            matches = problem.decode(problem.new_candidate(rng))
            _assert_symmetric(matches)
            for node, partners in enumerate(matches.to_list()):
                assert len(partners) <= problem.data.get_capacity_of(node)
                for partner in partners:
                    assert problem.data.get_set_of(partner) != problem.data.get_set_of(node)
                    assert not problem.data.is_excluded(node, partner)

    def test_one_to_one_has_single_partners(self, random_problem):
        problem = random_problem(MatchingProblemType.OTO)
        rng = np.random.default_rng(5)
        for _ in range(20):
            matches = problem.decode(problem.new_candidate(rng))
            assert all(matches.count(node) <= 1 for node in range(problem.data.size))
            # Six against five leaves exactly one individual unmatched
            assert len(matches.get_left_overs()) == 1


# ── triplet_matching ─────────────────────────────────────────────────────────


class TestTripletMatching:
    def test_known_groups(self, triplet_problem):
        matches = triplet_matching(
            triplet_problem.data, triplet_problem.preferences, [0, 1, 2, 3, 4, 5]
        )
        assert matches.to_list() == [[2, 4], [3, 5], [0, 4], [1, 5], [0, 2], [1, 3]]

    def test_groups_are_cliques_across_sets(self, triplet_problem):
        rng = np.random.default_rng(11)
        for _ in range(20):
            matches = triplet_problem.decode(triplet_problem.new_candidate(rng))
            _assert_symmetric(matches)
            for node, partners in enumerate(matches.to_list()):
                if not partners:
                    continue
                assert len(partners) == 2
                sets = {triplet_problem.data.get_set_of(n) for n in (node, *partners)}
                assert sets == {0, 1, 2}

    def test_excluded_pair_blocks_group(self, make_problem):
        problem = make_problem(
            matching_type=MatchingProblemType.TRIPLET,
            set_indices=[0, 1, 2],
            excluded_pairs=[(0, 2)],
        )
        matches = triplet_matching(problem.data, problem.preferences, [0, 1, 2])
        assert matches.get_left_overs() == [0, 1, 2]
