"""
Collision detection and placement resolution.

Pure functions over caller-owned snapshots:
- events: list[Event]
- event_values: dict[str, float] (event name -> start time, missing = 0)

Rules per balance:
- An event that requires a balance may not start inside another event's
  consumption period [start, end). Starting exactly at `end` is allowed.
- An event that consumes a balance may not overlap another consumption of
  that balance, and may not swallow the start of an event requiring it.

Nothing here mutates its inputs. Searches return None when no grid position
fits; the resolver returns the input time unchanged when it cannot improve it.
Malformed input (negative durations, unknown balance names) is not checked;
results for it are unspecified.
"""

import logging
import math
from collections.abc import Iterator, Mapping, Sequence

from eqbal.config import PRECISION, RESOLVER_RADIUS, STEP, TIME_PERIOD
from eqbal.models import ConsumptionPeriod, Event, PlacementReport

logger = logging.getLogger(__name__)

# Digits kept when snapping to the grid or to a period end; anything finer is float noise
_SNAP_DIGITS = 9


def _start_of(event_name: str, event_values: Mapping[str, float]) -> float:
    value = event_values.get(event_name)
    return 0.0 if value is None else value


def _end_of(start: float, duration: float) -> float:
    """start + duration without float noise (0.1 + 0.2 -> 0.3)."""
    return max(start, round(start + duration, _SNAP_DIGITS))


def _grid(min_time: float, upper: float) -> Iterator[float]:
    """
    Yield every grid position in [min_time, upper], ascending.

    Positions are whole multiples of STEP computed by index, so an off-grid
    min_time starts at the next grid point up and nothing drifts.
    """
    first = math.ceil(round(min_time / STEP, _SNAP_DIGITS))
    last = math.floor(round(upper / STEP, _SNAP_DIGITS))
    for i in range(first, last + 1):
        yield round(i * STEP, PRECISION)


def _format_time(t: float) -> str:
    """1.0 -> '1', 1.5 -> '1.5'."""
    t = float(t)
    return str(int(t)) if t.is_integer() else str(t)


# =============================================================================
# Consumption periods
# =============================================================================


def consumption_periods(
    balance: str,
    events: Sequence[Event],
    event_values: Mapping[str, float],
) -> list[ConsumptionPeriod]:
    """
    Periods during which `balance` is occupied, sorted by start.

    Ties keep input order (sorted() is stable).
    """
    periods = []
    for event in events:
        if not event.consumes_balance(balance):
            continue
        start = _start_of(event.name, event_values)
        periods.append(ConsumptionPeriod(start, _end_of(start, event.duration), event.name))
    return sorted(periods, key=lambda p: p.start)


# =============================================================================
# Single-balance placement
# =============================================================================


def is_valid_placement(
    event_name: str,
    candidate_time: float,
    event: Event,
    balance: str,
    events: Sequence[Event],
    event_values: Mapping[str, float],
) -> bool:
    """
    Check whether `event` may start at `candidate_time` on `balance`.

    The event named `event_name` is excluded from the occupancy it is
    checked against, so an event never blocks itself.
    """
    other_events = [e for e in events if e.name != event_name]
    periods = consumption_periods(balance, other_events, event_values)

    if event.requires(balance):
        for period in periods:
            if period.contains(candidate_time):
                return False

    if event.consumes_balance(balance):
        candidate_end = _end_of(candidate_time, event.duration)

        for period in periods:
            if period.overlaps(candidate_time, candidate_end):
                return False

        # Do not swallow the start of an already-placed requirer
        for other in other_events:
            if not other.requires(balance):
                continue
            other_start = _start_of(other.name, event_values)
            if candidate_time <= other_start < candidate_end:
                return False

    return True


def find_valid_placement(
    event_name: str,
    event: Event,
    balance: str,
    events: Sequence[Event],
    event_values: Mapping[str, float],
    min_time: float = 0,
    max_time: float = TIME_PERIOD,
) -> float | None:
    """
    First grid position in [min_time, max_time] where `event` fits on `balance`.

    When the event consumes the balance its whole period must end by max_time.

    Returns:
        Position rounded to the grid, or None if nothing fits
    """
    upper = max_time - (event.duration if event.consumes_balance(balance) else 0)

    for t in _grid(min_time, upper):
        if is_valid_placement(event_name, t, event, balance, events, event_values):
            return t

    logger.debug(
        "No placement for %s on %s in [%s, %s]", event_name, balance, min_time, max_time
    )
    return None


# =============================================================================
# Joint (all balances) placement
# =============================================================================


def is_valid_placement_all_balances(
    event_name: str,
    candidate_time: float,
    event: Event,
    events: Sequence[Event],
    event_values: Mapping[str, float],
) -> bool:
    """A placement is valid only if it is valid on every balance the event touches."""
    return all(
        is_valid_placement(event_name, candidate_time, event, balance, events, event_values)
        for balance in event.balances()
    )


def find_valid_placement_all_balances(
    event_name: str,
    event: Event,
    events: Sequence[Event],
    event_values: Mapping[str, float],
    min_time: float = 0,
    max_time: float = TIME_PERIOD,
) -> float | None:
    """Joint version of find_valid_placement()."""
    upper = max_time - (event.duration if event.consumes else 0)

    for t in _grid(min_time, upper):
        if is_valid_placement_all_balances(event_name, t, event, events, event_values):
            return t

    logger.debug("No joint placement for %s in [%s, %s]", event_name, min_time, max_time)
    return None


# =============================================================================
# Resolver
# =============================================================================


def _log_resolution(phase: str, event_name: str, balance: str, t: float) -> None:
    logger.debug(
        "Resolved %s on %s %s to %s",
        event_name,
        balance,
        phase,
        t,
        extra={"event": event_name, "balance": balance, "time": t},
    )


def get_next_valid_position(
    event_name: str,
    current_time: float,
    event: Event,
    balance: str,
    events: Sequence[Event],
    event_values: Mapping[str, float],
    time_period: float = TIME_PERIOD,
) -> float:
    """
    Resolve a moved event to the nearest valid position.

    Resolution order:
    1. current_time itself, if valid
    2. within RESOLVER_RADIUS: backward candidate, then forward, per step
    3. earliest valid position in [0, current_time]
    4. earliest valid position in [current_time, time_period]
    5. current_time unchanged

    Validity is always joint across every balance the event touches;
    `balance` only identifies the lane the move came from.
    """
    if is_valid_placement_all_balances(event_name, current_time, event, events, event_values):
        return current_time

    upper = round(time_period - (event.duration if event.consumes else 0), _SNAP_DIGITS)
    probes = round(RESOLVER_RADIUS / STEP)

    for k in range(1, probes + 1):
        offset = k * STEP

        backward = round(current_time - offset, PRECISION)
        if 0 <= backward <= upper and is_valid_placement_all_balances(
            event_name, backward, event, events, event_values
        ):
            _log_resolution("backward", event_name, balance, backward)
            return backward

        forward = round(current_time + offset, PRECISION)
        if 0 <= forward <= upper and is_valid_placement_all_balances(
            event_name, forward, event, events, event_values
        ):
            _log_resolution("forward", event_name, balance, forward)
            return forward

    far_backward = find_valid_placement_all_balances(
        event_name, event, events, event_values, min_time=0, max_time=current_time
    )
    if far_backward is not None:
        _log_resolution("far backward", event_name, balance, far_backward)
        return far_backward

    far_forward = find_valid_placement_all_balances(
        event_name, event, events, event_values, min_time=current_time, max_time=time_period
    )
    if far_forward is not None:
        _log_resolution("far forward", event_name, balance, far_forward)
        return far_forward

    logger.debug(
        "Could not resolve %s on %s, keeping %s",
        event_name,
        balance,
        current_time,
        extra={"event": event_name, "balance": balance, "time": current_time},
    )
    return current_time


# =============================================================================
# Bulk validation
# =============================================================================


def validate_all_placements(
    events: Sequence[Event],
    event_values: Mapping[str, float],
    balances: Sequence[str],
) -> PlacementReport:
    """Check every (balance, event) pair at the event's stored start time."""
    conflicts = []

    for balance in balances:
        for event in events:
            start = _start_of(event.name, event_values)
            if not is_valid_placement(event.name, start, event, balance, events, event_values):
                conflicts.append(
                    f"{event.name} conflicts on {balance} at time {_format_time(start)}"
                )

    return PlacementReport(valid=not conflicts, conflicts=conflicts)
