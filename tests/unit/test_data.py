"""
Tests for stablematch.core.matching.data — MatchingData validation and accessors.
"""

import numpy as np
import pytest

from stablematch.core.exceptions import ConfigurationError, ZeroWeightSumError


class TestMatchingDataAccessors:
    def test_defaults(self, make_matching_data):
        data = make_matching_data()
        assert data.size == 4
        assert data.set_count == 2
        assert data.property_count == 1
        assert data.capacities == (1, 1, 1, 1)

    def test_set_membership(self, make_matching_data):
        data = make_matching_data(set_indices=[0, 1, 0, 1, 1])
        assert data.get_set_of(1) == 1
        assert data.get_set_indices_of(1) == (1, 3, 4)
        assert data.size_of_set(0) == 2

    def test_excluded_pairs_are_symmetric(self, make_matching_data):
        data = make_matching_data(excluded_pairs=[(3, 1)])
        assert data.is_excluded(1, 3)
        assert data.is_excluded(3, 1)
        assert not data.is_excluded(0, 3)

    def test_arrays_are_read_only(self, make_matching_data):
        data = make_matching_data()
        with pytest.raises(ValueError):
            data.properties[0, 0] = 9.0

    def test_with_capacities(self, make_matching_data):
        data = make_matching_data(capacities=[2, 2, 1, 1])
        updated = data.with_capacities([1, 1, 1, 1])
        assert updated.capacities == (1, 1, 1, 1)
        assert data.capacities == (2, 2, 1, 1)
        assert np.array_equal(updated.properties, data.properties)


class TestMatchingDataValidation:
    def test_too_few_individuals(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="at least two individuals"):
            make_matching_data(set_indices=[0])

    def test_single_set(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="two sets"):
            make_matching_data(set_indices=[0, 0, 0])

    def test_non_contiguous_sets(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="contiguous"):
            make_matching_data(set_indices=[0, 0, 2, 2])

    def test_capacity_count_mismatch(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="capacities"):
            make_matching_data(capacities=[1, 1])

    def test_zero_capacity(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="Capacity of individual 2"):
            make_matching_data(capacities=[1, 1, 0, 1])

    def test_ragged_properties(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="rectangular"):
            make_matching_data(
                properties=[[1.0], [2.0, 3.0], [1.0], [1.0]],
                weights=[[1.0]] * 4,
                requirements=[["5"]] * 4,
            )

    def test_property_row_count_mismatch(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="Properties must have shape"):
            make_matching_data(
                properties=[[1.0], [2.0], [3.0]],
                weights=[[1.0]] * 4,
                requirements=[["5"]] * 4,
            )

    def test_requirement_shape_mismatch(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="Requirements"):
            make_matching_data(requirements=[["5", "5"]] * 4)

    def test_excluded_pair_out_of_range(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="out of range"):
            make_matching_data(excluded_pairs=[(0, 9)])

    def test_excluded_self_pair(self, make_matching_data):
        with pytest.raises(ConfigurationError, match="itself"):
            make_matching_data(excluded_pairs=[(2, 2)])

    def test_zero_weight_sum(self, make_matching_data):
        with pytest.raises(ZeroWeightSumError) as exc_info:
            make_matching_data(weights=[[1.0], [0.0], [1.0], [1.0]])
        assert exc_info.value.individual_index == 1
        assert "zero-sum of weights for the individual: 1" in str(exc_info.value)
