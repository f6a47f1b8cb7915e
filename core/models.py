# core/models.py

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional

TRIP_STYLES = ("luxury", "balanced", "budget")

STATUS_OK = "ok"
STATUS_DEGRADED = "degraded"


def _to_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    # stored records may carry a full ISO timestamp
    return dt.date.fromisoformat(str(value)[:10])


@dataclass
class TripRequest:
    start_location: str
    destination: str
    budget: float
    trip_style: str
    start_date: dt.date
    end_date: dt.date
    travelers: int
    preferences: List[str]
    transportation: List[str]
    dietary_restrictions: Optional[List[str]] = None
    accessibility: Optional[List[str]] = None

    @property
    def day_count(self) -> int:
        """Number of calendar days covered by the trip, never less than one."""
        return max(1, (self.end_date - self.start_date).days + 1)

    def day_dates(self) -> List[dt.date]:
        return [self.start_date + dt.timedelta(days=i) for i in range(self.day_count)]

    @classmethod
    def from_dict(cls, record: dict) -> "TripRequest":
        """
        Build a TripRequest from the JSON record the form layer stored.
        Accepts camelCase (as written by the web form) or snake_case keys.
        Raises ValueError when a date is missing or a list field is not a list.
        """

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in record:
                return record[snake]
            return record.get(camel, default)

        def date_field(snake: str, camel: str) -> dt.date:
            value = pick(snake, camel)
            if value is None or value == "":
                raise ValueError(f"Stored trip request has no {camel}")
            return _to_date(value)

        def list_field(snake: str, camel: str, optional: bool = False) -> Optional[List[str]]:
            value = pick(snake, camel)
            if value is None and optional:
                return None
            if not isinstance(value, list):
                raise ValueError(f"{camel} must be a list, got {type(value).__name__}")
            return [str(v) for v in value]

        return cls(
            start_location=pick("start_location", "startLocation", ""),
            destination=pick("destination", "destination", ""),
            budget=float(pick("budget", "budget", 0)),
            trip_style=pick("trip_style", "tripStyle", "balanced"),
            start_date=date_field("start_date", "startDate"),
            end_date=date_field("end_date", "endDate"),
            travelers=int(pick("travelers", "travelers", 1)),
            preferences=list_field("preferences", "preferences"),
            transportation=list_field("transportation", "transportation"),
            dietary_restrictions=list_field("dietary_restrictions", "dietaryRestrictions", optional=True),
            accessibility=list_field("accessibility", "accessibility", optional=True),
        )


# ──────────────────────────────────────────────────────────────────────────────
# Generated itinerary
# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class MealSuggestion:
    restaurant: str
    cuisine: str
    dietary_options: List[str]
    price_range: str
    specialty: str
    walking_distance: Optional[str] = None
    timing_tip: Optional[str] = None


@dataclass
class Activity:
    time: str
    name: str
    description: str
    location: str
    cost: float
    weather_dependent: bool
    duration: Optional[str] = None
    popularity: Optional[float] = None
    category: Optional[str] = None
    best_time_to_visit: Optional[str] = None
    tip: Optional[str] = None
    meal_suggestion: Optional[MealSuggestion] = None


@dataclass
class DayPlan:
    date: str
    weather: str
    activities: List[Activity]


@dataclass
class Accommodation:
    name: str
    description: str
    location: str
    price: float
    rating: float
    image: str
    amenities: List[str]
    nearby_attractions: Optional[List[str]] = None
    transportation_access: Optional[List[str]] = None


@dataclass
class TransportOption:
    provider: str
    departure_time: str
    arrival_time: str
    duration: str
    price: float
    departure_location: str
    arrival_location: str
    details: str
    recommended_booking_time: Optional[str] = None


@dataclass
class LocalTransportation:
    mode: str
    coverage: str
    cost_per_trip: float
    day_pass_cost: float
    frequency: str
    operating_hours: str
    accessibility: str
    tips: List[str]


@dataclass
class TransportOptions:
    flight: List[TransportOption] = field(default_factory=list)
    train: List[TransportOption] = field(default_factory=list)
    car: List[TransportOption] = field(default_factory=list)
    bus: List[TransportOption] = field(default_factory=list)
    public_transit: List[TransportOption] = field(default_factory=list)
    local_transportation: Optional[List[LocalTransportation]] = None


@dataclass
class BudgetItem:
    name: str
    cost: float


@dataclass
class BudgetCategory:
    name: str
    amount: float
    percentage: float
    items: Optional[List[BudgetItem]] = None
    saving_tip: Optional[str] = None


@dataclass
class LocalCurrencyInfo:
    currency: str
    exchange_rate: str
    payment_tips: List[str]


@dataclass
class BudgetBreakdown:
    total_budget: float
    total_spent: float
    categories: List[BudgetCategory]
    contingency_amount: float
    local_currency: Optional[LocalCurrencyInfo] = None


@dataclass
class PackingItem:
    name: str
    essential: bool
    weather_consideration: Optional[str] = None
    packing_tip: Optional[str] = None


@dataclass
class PackingCategory:
    category: str
    items: List[PackingItem]
    notes: Optional[str] = None


@dataclass
class GeneratedItinerary:
    destination: str
    start_date: str
    end_date: str
    travelers: int
    weather_summary: str
    daily_itinerary: List[DayPlan]
    accommodations: List[Accommodation]
    transport_options: TransportOptions
    budget_breakdown: BudgetBreakdown
    packing_list: List[PackingCategory]
    status: str = STATUS_OK
    degraded_reason: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.status == STATUS_DEGRADED


def itinerary_to_dict(itin: GeneratedItinerary) -> dict:
    """Plain JSON-ready dict (snake_case keys) for the API and CLI."""
    return asdict(itin)
