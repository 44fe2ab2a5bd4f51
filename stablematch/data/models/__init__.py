"""Pydantic data models for stablematch."""

from .problem import MatchingProblemDefinition

__all__ = ["MatchingProblemDefinition"]
