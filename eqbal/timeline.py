"""
Timeline - the caller-side session state for the placement engine.

Owns balances, events, event start times and the time period, and keeps
them consistent:
- Removing a balance removes every event that requires or consumes it
- New events are placed at the first legal grid position
- Moves go through the nearest-valid resolver

Mutations return (success, message) and never raise for bad user input.
"""

import logging
from typing import Any

from eqbal import collision
from eqbal.config import TIME_PERIOD, load_timeline_config
from eqbal.models import ConsumptionPeriod, Event, PlacementReport

logger = logging.getLogger(__name__)


class Timeline:
    """
    A set of balances plus the events laid out on them.

    Responsibilities:
    - Balance and event lifecycle (add, edit, remove, reorder)
    - Initial placement of new events
    - Resolving moves to legal positions
    - Consistency checks
    """

    def __init__(
        self,
        balances: list[str] | None = None,
        events: list[Event] | None = None,
        event_values: dict[str, float] | None = None,
        time_period: float = TIME_PERIOD,
    ):
        self.balances: list[str] = list(balances or [])
        self.events: list[Event] = list(events or [])
        self.event_values: dict[str, float] = dict(event_values or {})
        self.time_period = time_period

    @classmethod
    def default(cls, config: dict | None = None) -> "Timeline":
        """Build a fresh session from config/timeline.yaml (or built-in defaults)."""
        config = config or load_timeline_config()
        timeline = cls(balances=config["balances"], time_period=config["time_period"])
        for raw in config["events"]:
            ok, msg = timeline.add_event(Event.from_dict(raw))
            if not ok:
                logger.warning(f"Skipping default event {raw.get('name')!r}: {msg}")
        return timeline

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_event(self, name: str) -> Event | None:
        for event in self.events:
            if event.name == name:
                return event
        return None

    def start_of(self, name: str) -> float:
        return self.event_values.get(name, 0)

    def consumption_periods(self, balance: str) -> list[ConsumptionPeriod]:
        return collision.consumption_periods(balance, self.events, self.event_values)

    def is_valid(self, name: str) -> bool:
        """Whether the named event's stored position is legal on all its balances."""
        event = self.get_event(name)
        if event is None:
            return False
        return collision.is_valid_placement_all_balances(
            name, self.start_of(name), event, self.events, self.event_values
        )

    def validate(self) -> PlacementReport:
        return collision.validate_all_placements(self.events, self.event_values, self.balances)

    # -------------------------------------------------------------------------
    # Balances
    # -------------------------------------------------------------------------

    def add_balance(self, name: str) -> tuple[bool, str]:
        name = (name or "").strip()
        if not name:
            return False, "Balance name is required"
        if name in self.balances:
            return False, f"Balance {name} already exists"

        self.balances.append(name)
        logger.info(f"Added balance {name}")
        return True, f"Balance {name} added"

    def remove_balance(self, name: str) -> tuple[bool, str]:
        """Remove a balance and every event that depends on it."""
        if name not in self.balances:
            return False, "Balance not found"

        self.balances.remove(name)

        dependent = [e.name for e in self.events if e.touches(name)]
        for event_name in dependent:
            self._drop_event(event_name)

        logger.info(f"Removed balance {name} and {len(dependent)} dependent event(s)")
        if dependent:
            return True, f"Balance {name} removed with events: {', '.join(dependent)}"
        return True, f"Balance {name} removed"

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _check_event(self, event: Event) -> str | None:
        """Return an error message for an event this timeline cannot hold."""
        unknown = [b for b in event.balances() if b not in self.balances]
        if unknown:
            return f"Unknown balance(s): {', '.join(unknown)}"
        if event.duration < 0:
            return "Duration must be non-negative"
        return None

    def add_event(self, event: Event) -> tuple[bool, str]:
        """
        Add an event at the first legal position.

        If no legal position exists the event is still added at 0 and
        reported as conflicting, rather than dropped.
        """
        if not event.name or not event.name.strip():
            return False, "Event name is required"
        if self.get_event(event.name):
            return False, f"Event {event.name} already exists"
        error = self._check_event(event)
        if error:
            return False, error

        self.events.append(event)
        placement = collision.find_valid_placement_all_balances(
            event.name, event, self.events, self.event_values, 0, self.time_period
        )

        if placement is None:
            self.event_values[event.name] = 0
            logger.warning(f"No legal position for {event.name}, placed at 0")
            return True, f"Event {event.name} added at 0 (no legal position)"

        self.event_values[event.name] = placement
        logger.info(f"Added event {event.name} at {placement}")
        return True, f"Event {event.name} added at {placement}"

    def remove_event(self, name: str) -> tuple[bool, str]:
        if not self.get_event(name):
            return False, "Event not found"

        self._drop_event(name)
        logger.info(f"Removed event {name}")
        return True, f"Event {name} removed"

    def update_event(
        self,
        name: str,
        req: list[str] | None = None,
        consumes: list[str] | None = None,
        duration: float | None = None,
    ) -> tuple[bool, str]:
        """
        Replace an event's balances or duration.

        The event keeps its position when that is still legal, otherwise it
        is resolved to the nearest legal one.
        """
        current = self.get_event(name)
        if current is None:
            return False, "Event not found"

        updated = Event(
            name=name,
            req=tuple(req) if req is not None else current.req,
            consumes=tuple(consumes) if consumes is not None else current.consumes,
            duration=duration if duration is not None else current.duration,
        )
        error = self._check_event(updated)
        if error:
            return False, error

        self.events[self.events.index(current)] = updated
        position = self.start_of(name)
        resolved = collision.get_next_valid_position(
            name,
            position,
            updated,
            next(iter(updated.balances()), ""),
            self.events,
            self.event_values,
            self.time_period,
        )
        self.event_values[name] = resolved

        logger.info(f"Updated event {name}")
        if resolved != position:
            return True, f"Event {name} updated and moved to {resolved}"
        return True, f"Event {name} updated"

    def reorder_events(self, names: list[str]) -> tuple[bool, str]:
        """Set display order. `names` must be a permutation of current event names."""
        if sorted(names) != sorted(e.name for e in self.events):
            return False, "Order must list every event exactly once"

        by_name = {e.name: e for e in self.events}
        self.events = [by_name[n] for n in names]
        return True, "Events reordered"

    def move_event(self, name: str, requested_time: float, balance: str | None = None) -> float:
        """
        Move an event toward `requested_time` and return where it landed.

        The request is clamped to [0, time_period] and resolved jointly
        across the event's balances. Unknown events are left alone.
        """
        event = self.get_event(name)
        if event is None:
            logger.warning(f"Move requested for unknown event {name}")
            return requested_time

        requested = min(max(requested_time, 0), self.time_period)
        lane = balance or next(iter(event.balances()), "")
        resolved = collision.get_next_valid_position(
            name, requested, event, lane, self.events, self.event_values, self.time_period
        )
        self.event_values[name] = resolved
        return resolved

    def _drop_event(self, name: str) -> None:
        self.events = [e for e in self.events if e.name != name]
        self.event_values.pop(name, None)

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "balances": list(self.balances),
            "events": [e.to_dict() for e in self.events],
            "eventValues": dict(self.event_values),
            "timePeriod": self.time_period,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Timeline":
        """
        Build a timeline from its dict form.

        Raises:
            ValueError: if the structure is not a layout mapping
        """
        if not isinstance(data, dict):
            raise ValueError("Layout must be a mapping")
        try:
            events = [Event.from_dict(e) for e in data.get("events", [])]
            event_values = {str(k): float(v) for k, v in data.get("eventValues", {}).items()}
            time_period = float(data.get("timePeriod", TIME_PERIOD))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValueError(f"Malformed layout: {e}") from e

        return cls(
            balances=list(data.get("balances", [])),
            events=events,
            event_values=event_values,
            time_period=time_period,
        )
