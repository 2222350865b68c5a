# EQBAL PLANNER - Core Library
"""
Exports for the API, the CLI and other consumers.
"""

from .collision import (
    consumption_periods,
    find_valid_placement,
    find_valid_placement_all_balances,
    get_next_valid_position,
    is_valid_placement,
    is_valid_placement_all_balances,
    validate_all_placements,
)
from .models import ConsumptionPeriod, Event, PlacementReport
from .timeline import Timeline

__all__ = [
    "Event",
    "ConsumptionPeriod",
    "PlacementReport",
    "Timeline",
    "consumption_periods",
    "is_valid_placement",
    "find_valid_placement",
    "is_valid_placement_all_balances",
    "find_valid_placement_all_balances",
    "get_next_valid_position",
    "validate_all_placements",
]
