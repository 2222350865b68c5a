"""
Shared Pydantic request/response models for the placement API.

Layouts use the camelCase keys browser clients already send
(eventValues, timePeriod, eventName); Python code uses the snake_case names.

Usage:
    from api.response_models import LayoutModel, CheckResponse

    @router.post("/check", response_model=CheckResponse)
    async def check(request: CheckRequest): ...
"""

from pydantic import BaseModel, ConfigDict, Field

from eqbal.config import TIME_PERIOD
from eqbal.models import Event

# ==== Layout ====
# Shape: {balances, events, eventValues, timePeriod}


class EventModel(BaseModel):
    """An event definition."""

    name: str = Field(min_length=1, description="Unique event name")
    req: list[str] = Field(default_factory=list, description="Balances the event requires")
    consumes: list[str] = Field(default_factory=list, description="Balances the event consumes")
    duration: float = Field(default=0, ge=0, description="Consumption length")

    def to_event(self) -> Event:
        return Event(
            name=self.name,
            req=tuple(self.req),
            consumes=tuple(self.consumes),
            duration=self.duration,
        )


class LayoutModel(BaseModel):
    """Caller-held timeline state."""

    model_config = ConfigDict(populate_by_name=True)

    balances: list[str] = Field(default_factory=list)
    events: list[EventModel] = Field(default_factory=list)
    event_values: dict[str, float] = Field(default_factory=dict, alias="eventValues")
    time_period: float = Field(default=TIME_PERIOD, gt=0, alias="timePeriod")

    def to_events(self) -> list[Event]:
        return [e.to_event() for e in self.events]


# ==== Requests ====


class PeriodsRequest(BaseModel):
    layout: LayoutModel
    balance: str


class CheckRequest(BaseModel):
    """Validity of one event at one time. No balance means all of the event's balances."""

    layout: LayoutModel
    event: EventModel
    time: float
    balance: str | None = None


class FindRequest(BaseModel):
    """Earliest legal position in [minTime, maxTime]. No balance means joint search."""

    model_config = ConfigDict(populate_by_name=True)

    layout: LayoutModel
    event: EventModel
    balance: str | None = None
    min_time: float = Field(default=0, alias="minTime")
    max_time: float | None = Field(default=None, alias="maxTime")


class ResolveRequest(BaseModel):
    """Move an existing event toward a requested time."""

    model_config = ConfigDict(populate_by_name=True)

    layout: LayoutModel
    event_name: str = Field(alias="eventName")
    time: float
    balance: str | None = None


class ValidateRequest(BaseModel):
    layout: LayoutModel


# ==== Responses ====


class PeriodModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: float
    end: float
    event_name: str = Field(alias="eventName")


class PeriodsResponse(BaseModel):
    balance: str
    periods: list[PeriodModel] = Field(default_factory=list)


class CheckResponse(BaseModel):
    valid: bool
    balances: list[str] = Field(description="Balances the check covered")


class FindResponse(BaseModel):
    time: float | None = Field(description="Earliest legal position, null if none fits")


class ResolveResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_name: str = Field(alias="eventName")
    requested: float
    time: float
    moved: bool


class ValidateResponse(BaseModel):
    valid: bool
    conflicts: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check result."""

    status: str = Field(description="healthy or error")
    version: str = Field(description="API version string")
    timestamp: str = Field(description="ISO timestamp")
