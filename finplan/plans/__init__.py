"""Scenario (plan) engine package."""

from finplan.plans.engine import (
    ScenarioEngine,
    derive_person_enabled,
    project_impact,
)
from finplan.plans.errors import (
    InvalidInputError,
    PlanCreationError,
    PlanNotFoundError,
    RecordNotFoundError,
    ScenarioError,
)

__all__ = [
    "ScenarioEngine",
    "derive_person_enabled",
    "project_impact",
    # Exceptions
    "InvalidInputError",
    "PlanCreationError",
    "PlanNotFoundError",
    "RecordNotFoundError",
    "ScenarioError",
]
