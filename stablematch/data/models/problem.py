"""
Problem definition document.

The document mirrors the raw request a client sends: per-individual arrays
of set indices, capacities, properties, weights and requirement texts, the
evaluation functions per set and the fitness function. Shape and content
checks that need the decoded data live in ``MatchingData``.
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stablematch.utils.constants import DEFAULT_FUNC, MatchingProblemType


class MatchingProblemDefinition(BaseModel):
    """Input document of a stable matching problem."""

    model_config = ConfigDict(use_enum_values=False, extra="ignore")

    problem_name: str = Field(default="", max_length=255)
    matching_type: MatchingProblemType = MatchingProblemType.OTO
    number_of_sets: int = Field(default=2, ge=2, le=3)
    number_of_property: int = Field(ge=1)

    individual_set_indices: list[int] = Field(min_length=2)
    individual_capacities: Optional[list[int]] = None
    individual_requirements: list[list[str]]
    individual_weights: list[list[float]]
    individual_properties: list[list[float]]

    evaluate_functions: list[str] = Field(default_factory=list)
    fitness_function: str = DEFAULT_FUNC
    excluded_pairs: list[tuple[int, int]] = Field(default_factory=list)

    # Search configuration, falls back to the solver settings when unset
    population_size: Optional[int] = Field(default=None, ge=2)
    generation: Optional[int] = Field(default=None, ge=1)
    algorithm: Optional[str] = None

    @field_validator("individual_requirements", mode="before")
    @classmethod
    def stringify_requirements(cls, v: list[list[Union[str, int, float]]]) -> list[list[str]]:
        """Accept bare numbers as requirement texts."""
        if not isinstance(v, list):
            return v
        return [
            [str(item) if isinstance(item, (int, float)) else item for item in row]
            if isinstance(row, list)
            else row
            for row in v
        ]

    @model_validator(mode="after")
    def check_counts(self) -> "MatchingProblemDefinition":
        """Check that the declared counts agree with the arrays."""
        if len(set(self.individual_set_indices)) != self.number_of_sets:
            raise ValueError(
                f"individual_set_indices use {len(set(self.individual_set_indices))} sets, "
                f"number_of_sets is {self.number_of_sets}"
            )
        if len(self.evaluate_functions) > self.number_of_sets:
            raise ValueError("At most one evaluation function per set is allowed")

        for field in ("individual_properties", "individual_weights", "individual_requirements"):
            rows = getattr(self, field)
            if len(rows) != self.number_of_individuals:
                raise ValueError(
                    f"{field} has {len(rows)} rows, expected {self.number_of_individuals}"
                )
            widths = sorted({len(row) for row in rows} - {self.number_of_property})
            if widths:
                raise ValueError(
                    f"{field} rows have {widths[0]} entries, "
                    f"number_of_property is {self.number_of_property}"
                )
        return self

    @property
    def number_of_individuals(self) -> int:
        return len(self.individual_set_indices)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "MatchingProblemDefinition":
        """Load and validate a definition from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
