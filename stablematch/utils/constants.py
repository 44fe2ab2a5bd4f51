"""
Application-wide constants for stablematch.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum, IntEnum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "stablematch"
APP_DISPLAY_NAME: Final[str] = "Generalized Stable Matching Engine"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Function Keywords
# =============================================================================

# Keyword selecting the built-in evaluation / fitness function
DEFAULT_FUNC: Final[str] = "default"

# Variable prefixes accepted in evaluation functions
EVAL_VARIABLE_PREFIXES: Final[tuple[str, ...]] = ("P", "W", "R")


# =============================================================================
# Requirement Scaling Constants
# =============================================================================

# Fixed property scale used by target-scale requirements
SCALE_MIN: Final[float] = 0.0
SCALE_MAX: Final[float] = 10.0

# Distances from the target beyond which the score drops
SCALE_CUTOFF_DISTANCE: Final[float] = 7.0
SCALE_FLAT_DISTANCE: Final[float] = 5.0

# Reward for an exact match on a zero bound
ZERO_BOUND_BONUS: Final[float] = 2.0

# Operators of the requirement syntax
INCREASING_OPERATOR: Final[str] = "++"
DECREASING_OPERATOR: Final[str] = "--"
RANGE_OPERATOR: Final[str] = ":"

# Tolerance used when checking for uniform preference lists
UNIFORM_EPSILON: Final[float] = 1e-6


# =============================================================================
# Solver Constants
# =============================================================================

DEFAULT_RUN_COUNT_PER_ALGO: Final[int] = 10

ALLOWED_INSIGHT_ALGORITHMS: Final[tuple[str, ...]] = (
    "RandomSearch",
    "GeneticSearch",
)


# =============================================================================
# Enums
# =============================================================================


class RequirementType(IntEnum):
    """Discriminator of the requirement variants."""

    SCALE_TARGET = 0
    ONE_BOUND = 1
    TWO_BOUND = 2


class MatchingProblemType(str, Enum):
    """Cardinality of a matching problem."""

    OTO = "oto"
    OTM = "otm"
    MTM = "mtm"
    TRIPLET = "triplet"

    @property
    def display_name(self) -> str:
        """Human readable name of the matching type."""
        return {
            MatchingProblemType.OTO: "One-to-One Matching",
            MatchingProblemType.OTM: "One-to-Many Matching",
            MatchingProblemType.MTM: "Many-to-Many Matching",
            MatchingProblemType.TRIPLET: "One-to-One-to-One Matching",
        }[self]

    @property
    def set_count(self) -> int:
        """Number of sets the matching type works on."""
        return 3 if self is MatchingProblemType.TRIPLET else 2
