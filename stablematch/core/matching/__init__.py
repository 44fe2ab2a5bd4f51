"""Stable matching data, preferences, decoders and problem contract."""

from .algorithms import deferred_acceptance, triplet_matching
from .data import MatchingData
from .factory import build_problem, create_problem
from .matches import Matches
from .preferences import (
    PreferenceList,
    PreferenceListWrapper,
    PreferenceProvider,
    TripletPreferenceList,
    TwoSetPreferenceList,
)
from .problem import MatchingEvaluation, MatchingProblem
from .requirements import (
    OneBound,
    Requirement,
    ScaleTarget,
    TwoBound,
    decode_requirement,
    decode_requirements,
)
from .results import MatchingSolution, MatchingSolutionInsights

__all__ = [
    "MatchingData",
    "Matches",
    "MatchingEvaluation",
    "MatchingProblem",
    "MatchingSolution",
    "MatchingSolutionInsights",
    "OneBound",
    "PreferenceList",
    "PreferenceListWrapper",
    "PreferenceProvider",
    "Requirement",
    "ScaleTarget",
    "TripletPreferenceList",
    "TwoBound",
    "TwoSetPreferenceList",
    "build_problem",
    "create_problem",
    "decode_requirement",
    "decode_requirements",
    "deferred_acceptance",
    "triplet_matching",
]
