"""
Placement API Router - REST endpoints over the collision engine.

Every request carries the caller's full layout; the server keeps no state.

Endpoints:
- POST /api/placement/periods - consumption periods of a balance
- POST /api/placement/check - is an event legal at a time
- POST /api/placement/find - earliest legal position
- POST /api/placement/resolve - nearest legal position for a move
- POST /api/placement/validate - conflicts across the whole layout
"""

import logging

from fastapi import APIRouter, HTTPException

from api.response_models import (
    CheckRequest,
    CheckResponse,
    FindRequest,
    FindResponse,
    PeriodsRequest,
    PeriodsResponse,
    ResolveRequest,
    ResolveResponse,
    ValidateRequest,
    ValidateResponse,
)
from eqbal import collision

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/placement", tags=["placement"])


@router.post("/periods", response_model=PeriodsResponse)
async def periods(request: PeriodsRequest):
    """Consumption periods on one balance, sorted by start."""
    layout = request.layout
    result = collision.consumption_periods(
        request.balance, layout.to_events(), layout.event_values
    )
    return {"balance": request.balance, "periods": [p.to_dict() for p in result]}


@router.post("/check", response_model=CheckResponse)
async def check(request: CheckRequest):
    """Check one placement on a single balance, or jointly when no balance is given."""
    layout = request.layout
    event = request.event.to_event()
    events = layout.to_events()

    if request.balance is not None:
        valid = collision.is_valid_placement(
            event.name, request.time, event, request.balance, events, layout.event_values
        )
        return {"valid": valid, "balances": [request.balance]}

    valid = collision.is_valid_placement_all_balances(
        event.name, request.time, event, events, layout.event_values
    )
    return {"valid": valid, "balances": event.balances()}


@router.post("/find", response_model=FindResponse)
async def find(request: FindRequest):
    """Earliest legal grid position, or null when nothing fits."""
    layout = request.layout
    event = request.event.to_event()
    events = layout.to_events()
    max_time = request.max_time if request.max_time is not None else layout.time_period

    if request.min_time > max_time:
        raise HTTPException(status_code=400, detail="minTime must not exceed maxTime")

    if request.balance is not None:
        time = collision.find_valid_placement(
            event.name,
            event,
            request.balance,
            events,
            layout.event_values,
            request.min_time,
            max_time,
        )
    else:
        time = collision.find_valid_placement_all_balances(
            event.name, event, events, layout.event_values, request.min_time, max_time
        )
    return {"time": time}


@router.post("/resolve", response_model=ResolveResponse)
async def resolve(request: ResolveRequest):
    """Resolve a move of an existing event to the nearest legal position."""
    layout = request.layout
    events = layout.to_events()

    event = next((e for e in events if e.name == request.event_name), None)
    if event is None:
        raise HTTPException(status_code=404, detail=f"Event not found: {request.event_name}")

    balance = request.balance or next(iter(event.balances()), "")
    time = collision.get_next_valid_position(
        event.name,
        request.time,
        event,
        balance,
        events,
        layout.event_values,
        layout.time_period,
    )
    if time == request.time and not collision.is_valid_placement_all_balances(
        event.name, time, event, events, layout.event_values
    ):
        logger.warning(f"No legal position near {request.time} for {event.name}")

    return {
        "event_name": event.name,
        "requested": request.time,
        "time": time,
        "moved": time != request.time,
    }


@router.post("/validate", response_model=ValidateResponse)
async def validate(request: ValidateRequest):
    """Every conflict in the layout at the stored positions."""
    layout = request.layout
    report = collision.validate_all_placements(
        layout.to_events(), layout.event_values, layout.balances
    )
    if not report.valid:
        logger.info(f"Layout has {len(report.conflicts)} conflict(s)")
    return report.to_dict()
