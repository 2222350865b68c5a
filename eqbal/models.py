"""
Timeline data model.

Objects:
- Event (name, required balances, consumed balances, duration)
- ConsumptionPeriod (derived [start, end) occupancy of one balance)
- PlacementReport (result of a bulk validation sweep)

Event start times are not part of Event; they live in the caller's
event_values mapping (event name -> start time, missing means 0).
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Event:
    """A named activity that requires and/or consumes balances."""

    name: str
    req: tuple[str, ...] = ()
    consumes: tuple[str, ...] = ()
    duration: float = 0.0

    def __post_init__(self):
        # Accept lists from JSON / callers but store hashable tuples
        object.__setattr__(self, "req", tuple(self.req))
        object.__setattr__(self, "consumes", tuple(self.consumes))

    def requires(self, balance: str) -> bool:
        return balance in self.req

    def consumes_balance(self, balance: str) -> bool:
        return balance in self.consumes

    def touches(self, balance: str) -> bool:
        return balance in self.req or balance in self.consumes

    def balances(self) -> list[str]:
        """Union of required and consumed balances, in first-seen order."""
        seen: list[str] = []
        for balance in (*self.req, *self.consumes):
            if balance not in seen:
                seen.append(balance)
        return seen

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "req": list(self.req),
            "consumes": list(self.consumes),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        return cls(
            name=data["name"],
            req=tuple(data.get("req", ())),
            consumes=tuple(data.get("consumes", ())),
            duration=float(data.get("duration", 0)),
        )


@dataclass(frozen=True)
class ConsumptionPeriod:
    """Half-open interval [start, end) during which an event occupies a balance."""

    start: float
    end: float
    event_name: str

    def contains(self, t: float) -> bool:
        """Closed at start, open at end: t == end is free again."""
        return self.start <= t < self.end

    def overlaps(self, start: float, end: float) -> bool:
        return start < self.end and end > self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "eventName": self.event_name}


@dataclass
class PlacementReport:
    """Outcome of validating every (balance, event) pair."""

    valid: bool = True
    conflicts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "conflicts": list(self.conflicts)}
