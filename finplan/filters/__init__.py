"""Person filter state package."""

from finplan.filters.state import FilterState
from finplan.queries.aggregator import ALL_PERSONS

__all__ = ["ALL_PERSONS", "FilterState"]
