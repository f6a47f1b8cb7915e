# ai/normalize.py
# ------------------------------------------------------------------------------
"""
Turn whatever JSON the model sent back into a complete GeneratedItinerary.

Every read is a read-with-default, so these functions are total: any input,
including `{}`, `None` or a list, yields a renderable itinerary.

Policy, applied at every level of the tree:
- required text missing, blank or not a string  -> sentinel text
- required list missing, empty or not a list    -> one sentinel entry
- optional field missing or malformed           -> None (an empty optional
  list stays empty)
- numbers that are not int/float (bools, NaN)   -> 0, costs never negative
- booleans that are not bool                    -> False

Keys are read in snake_case first, then camelCase, so that a dict produced by
`itinerary_to_dict` normalizes back to an equal itinerary.
"""

import logging
import math
from typing import Any, Callable, List, Optional, Tuple

from core.models import (
    STATUS_DEGRADED,
    STATUS_OK,
    Accommodation,
    Activity,
    BudgetBreakdown,
    BudgetCategory,
    BudgetItem,
    DayPlan,
    GeneratedItinerary,
    LocalCurrencyInfo,
    LocalTransportation,
    MealSuggestion,
    PackingCategory,
    PackingItem,
    TransportOption,
    TransportOptions,
    TripRequest,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Data not available"
NOT_SPECIFIED = "Not specified"
DEFAULT_IMAGE = "https://images.unsplash.com/photo-1566073771259-6a8506099945"

TRANSPORT_MODES = ("flight", "train", "car", "bus", "public_transit")
DAY_SLOTS = ("morning", "afternoon", "evening")
MAX_RATING = 5.0


# ──────────────────────────────────────────────────────────────────────────────
# Defensive readers
# ──────────────────────────────────────────────────────────────────────────────
def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _get(data: Any, name: str) -> Any:
    if not isinstance(data, dict):
        return None
    if name in data:
        return data[name]
    return data.get(_camel(name))


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _opt_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _number(value: Any, default: float = 0) -> float:
    return value if _is_number(value) else default


def _amount(value: Any) -> float:
    """Prices and costs: numeric and never negative."""
    return max(_number(value), 0)


def _opt_number(value: Any) -> Optional[float]:
    return value if _is_number(value) else None


def _flag(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _names(value: Any) -> List[str]:
    """Strings, or objects with a `name`, from a list; anything else is dropped."""
    if not isinstance(value, list):
        return []
    names = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("name")
        if isinstance(item, str) and item.strip():
            names.append(item)
    return names


def _text_list(value: Any, sentinel: str = NOT_SPECIFIED) -> List[str]:
    return _names(value) or [sentinel]


def _opt_text_list(value: Any) -> Optional[List[str]]:
    return _names(value) if isinstance(value, list) else None


def _entries(value: Any, normalize: Callable[[Any], Any]) -> List[Any]:
    if not isinstance(value, list):
        return []
    return [normalize(item) for item in value]


def _opt_entries(value: Any, normalize: Callable[[Any], Any]) -> Optional[List[Any]]:
    if not isinstance(value, list):
        return None
    return [normalize(item) for item in value]


# ──────────────────────────────────────────────────────────────────────────────
# Activities and days
# ──────────────────────────────────────────────────────────────────────────────
def sentinel_activity(
    time: str = "Time not specified",
    name: str = NOT_AVAILABLE,
    description: str = "Activity details could not be generated",
) -> Activity:
    return Activity(
        time=time,
        name=name,
        description=description,
        location="N/A",
        cost=0,
        weather_dependent=False,
    )


def normalize_meal(data: Any) -> Optional[MealSuggestion]:
    if not isinstance(data, dict):
        return None
    return MealSuggestion(
        restaurant=_text(_get(data, "restaurant"), "Restaurant not specified"),
        cuisine=_text(_get(data, "cuisine"), "Cuisine not specified"),
        dietary_options=_text_list(_get(data, "dietary_options")),
        price_range=_text(_get(data, "price_range"), NOT_SPECIFIED),
        specialty=_text(_get(data, "specialty"), NOT_SPECIFIED),
        walking_distance=_opt_text(_get(data, "walking_distance")),
        timing_tip=_opt_text(_get(data, "timing_tip")),
    )


def normalize_activity(data: Any, default_time: str = "Time not specified") -> Activity:
    if not isinstance(data, dict):
        return sentinel_activity(time=default_time, name="Invalid activity data")
    return Activity(
        time=_text(_get(data, "time"), default_time),
        name=_text(_get(data, "name"), "Activity name not available"),
        description=_text(_get(data, "description"), "No description available"),
        location=_text(_get(data, "location"), "Location not specified"),
        cost=_amount(_get(data, "cost")),
        weather_dependent=_flag(_get(data, "weather_dependent")),
        duration=_opt_text(_get(data, "duration")),
        popularity=_opt_number(_get(data, "popularity")),
        category=_opt_text(_get(data, "category")),
        best_time_to_visit=_opt_text(_get(data, "best_time_to_visit")),
        tip=_opt_text(_get(data, "tip")),
        meal_suggestion=normalize_meal(_get(data, "meal_suggestion")),
    )


def normalize_activities(data: Any) -> List[Activity]:
    """
    A day's activities, in order. Accepts a flat `activities` list or the
    morning / afternoon / evening split, which is flattened in that order.
    """
    activities = _get(data, "activities")
    if isinstance(activities, list) and activities:
        return [normalize_activity(a) for a in activities]

    flattened: List[Activity] = []
    for slot in DAY_SLOTS:
        items = _get(data, slot)
        if isinstance(items, list):
            flattened.extend(normalize_activity(a, default_time=slot.title()) for a in items)
    return flattened or [sentinel_activity()]


def normalize_day(data: Any) -> DayPlan:
    if not isinstance(data, dict):
        return DayPlan(
            date="Date not specified",
            weather="Weather data not available",
            activities=[sentinel_activity(name="Invalid day data")],
        )
    return DayPlan(
        date=_text(_get(data, "date"), "Date not specified"),
        weather=_text(_get(data, "weather"), "Weather data not available"),
        activities=normalize_activities(data),
    )


def default_days(trip: TripRequest) -> List[DayPlan]:
    """One placeholder day per calendar day of the trip."""
    return [
        DayPlan(
            date=f"Day {i} - {d.isoformat()}",
            weather=NOT_AVAILABLE,
            activities=[
                sentinel_activity(
                    time="All day",
                    description="Data could not be generated. Please try again later.",
                )
            ],
        )
        for i, d in enumerate(trip.day_dates(), start=1)
    ]


def normalize_days(data: Any, trip: TripRequest) -> List[DayPlan]:
    if not isinstance(data, list) or not data:
        return default_days(trip)
    if len(data) != trip.day_count:
        logger.warning(
            "Model returned %d days for a %d-day trip; keeping the model's list",
            len(data), trip.day_count,
        )
    return [normalize_day(d) for d in data]


# ──────────────────────────────────────────────────────────────────────────────
# Accommodations
# ──────────────────────────────────────────────────────────────────────────────
def sentinel_accommodation(trip: TripRequest) -> Accommodation:
    return Accommodation(
        name="Accommodation data not available",
        description="Accommodation details could not be generated",
        location=trip.destination,
        price=0,
        rating=0,
        image=DEFAULT_IMAGE,
        amenities=[NOT_AVAILABLE],
    )


def normalize_accommodation(data: Any) -> Accommodation:
    if not isinstance(data, dict):
        data = {}
    rating = _number(_get(data, "rating"))
    return Accommodation(
        name=_text(_get(data, "name"), "Accommodation data not available"),
        description=_text(_get(data, "description"), "Description not available"),
        location=_text(_get(data, "location"), "Location not specified"),
        price=_amount(_get(data, "price")),
        rating=min(max(rating, 0), MAX_RATING),
        image=_text(_get(data, "image"), DEFAULT_IMAGE),
        amenities=_text_list(_get(data, "amenities"), sentinel=NOT_AVAILABLE),
        nearby_attractions=_opt_text_list(_get(data, "nearby_attractions")),
        transportation_access=_opt_text_list(_get(data, "transportation_access")),
    )


def normalize_accommodations(data: Any, trip: TripRequest) -> List[Accommodation]:
    if not isinstance(data, list) or not data:
        return [sentinel_accommodation(trip)]
    return [normalize_accommodation(a) for a in data]


# ──────────────────────────────────────────────────────────────────────────────
# Transport
# ──────────────────────────────────────────────────────────────────────────────
def normalize_transport_option(data: Any) -> TransportOption:
    if not isinstance(data, dict):
        data = {}
    return TransportOption(
        provider=_text(_get(data, "provider"), "Provider not specified"),
        departure_time=_text(_get(data, "departure_time"), NOT_SPECIFIED),
        arrival_time=_text(_get(data, "arrival_time"), NOT_SPECIFIED),
        duration=_text(_get(data, "duration"), NOT_SPECIFIED),
        price=_amount(_get(data, "price")),
        departure_location=_text(_get(data, "departure_location"), NOT_SPECIFIED),
        arrival_location=_text(_get(data, "arrival_location"), NOT_SPECIFIED),
        details=_text(_get(data, "details"), "No details available"),
        recommended_booking_time=_opt_text(_get(data, "recommended_booking_time")),
    )


def normalize_local_transportation(data: Any) -> LocalTransportation:
    if not isinstance(data, dict):
        data = {}
    return LocalTransportation(
        mode=_text(_get(data, "mode"), "Mode not specified"),
        coverage=_text(_get(data, "coverage"), NOT_SPECIFIED),
        cost_per_trip=_amount(_get(data, "cost_per_trip")),
        day_pass_cost=_amount(_get(data, "day_pass_cost")),
        frequency=_text(_get(data, "frequency"), NOT_SPECIFIED),
        operating_hours=_text(_get(data, "operating_hours"), NOT_SPECIFIED),
        accessibility=_text(_get(data, "accessibility"), NOT_SPECIFIED),
        tips=_text_list(_get(data, "tips"), sentinel="No tips available"),
    )


def normalize_transport(data: Any) -> TransportOptions:
    """Every mode list is present; `local_transportation` only when given."""
    return TransportOptions(
        local_transportation=_opt_entries(_get(data, "local_transportation"), normalize_local_transportation),
        **{mode: _entries(_get(data, mode), normalize_transport_option) for mode in TRANSPORT_MODES},
    )


# ──────────────────────────────────────────────────────────────────────────────
# Budget
# ──────────────────────────────────────────────────────────────────────────────
def normalize_budget_item(data: Any) -> BudgetItem:
    if isinstance(data, str) and data.strip():
        return BudgetItem(name=data, cost=0)
    return BudgetItem(
        name=_text(_get(data, "name"), "Item not specified"),
        cost=_amount(_get(data, "cost")),
    )


def normalize_budget_category(data: Any) -> BudgetCategory:
    if not isinstance(data, dict):
        return BudgetCategory(name=NOT_AVAILABLE, amount=0, percentage=0)
    return BudgetCategory(
        name=_text(_get(data, "name"), "Category not specified"),
        amount=_number(_get(data, "amount")),
        percentage=_number(_get(data, "percentage")),
        items=_opt_entries(_get(data, "items"), normalize_budget_item),
        saving_tip=_opt_text(_get(data, "saving_tip")),
    )


def normalize_currency(data: Any) -> Optional[LocalCurrencyInfo]:
    if not isinstance(data, dict):
        return None
    return LocalCurrencyInfo(
        currency=_text(_get(data, "currency"), "Currency not specified"),
        exchange_rate=_text(_get(data, "exchange_rate"), NOT_SPECIFIED),
        payment_tips=_text_list(_get(data, "payment_tips"), sentinel="No payment tips available"),
    )


def sentinel_budget_categories(trip: TripRequest, name: str = NOT_AVAILABLE) -> List[BudgetCategory]:
    return [BudgetCategory(name=name, amount=trip.budget, percentage=100)]


def normalize_budget(data: Any, trip: TripRequest) -> BudgetBreakdown:
    categories = _get(data, "categories")
    if isinstance(categories, list) and categories:
        normalized = [normalize_budget_category(c) for c in categories]
    else:
        normalized = sentinel_budget_categories(trip)
    return BudgetBreakdown(
        total_budget=_number(_get(data, "total_budget"), default=trip.budget),
        total_spent=_number(_get(data, "total_spent")),
        categories=normalized,
        contingency_amount=_number(_get(data, "contingency_amount")),
        local_currency=normalize_currency(_get(data, "local_currency")),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Packing list
# ──────────────────────────────────────────────────────────────────────────────
def normalize_packing_item(data: Any) -> PackingItem:
    if isinstance(data, str) and data.strip():
        return PackingItem(name=data, essential=False)
    return PackingItem(
        name=_text(_get(data, "name"), "Item not specified"),
        essential=_flag(_get(data, "essential")),
        weather_consideration=_opt_text(_get(data, "weather_consideration")),
        packing_tip=_opt_text(_get(data, "packing_tip")),
    )


def normalize_packing_category(data: Any) -> PackingCategory:
    if not isinstance(data, dict):
        data = {}
    items = _entries(_get(data, "items"), normalize_packing_item)
    # older replies name the category under "name"
    label = _get(data, "category") or _get(data, "name")
    return PackingCategory(
        category=_text(label, "Packing category"),
        items=items or [PackingItem(name=NOT_AVAILABLE, essential=False)],
        notes=_opt_text(_get(data, "notes")),
    )


def normalize_packing_list(data: Any) -> List[PackingCategory]:
    if not isinstance(data, list) or not data:
        return [
            PackingCategory(
                category="Essentials",
                items=[PackingItem(name=NOT_AVAILABLE, essential=False)],
            )
        ]
    return [normalize_packing_category(c) for c in data]


# ──────────────────────────────────────────────────────────────────────────────
# Whole itinerary
# ──────────────────────────────────────────────────────────────────────────────
def _travelers(value: Any, trip: TripRequest) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    if _is_number(value) and value >= 1 and value.is_integer():
        return int(value)
    return trip.travelers


def _status(data: dict) -> Tuple[str, Optional[str]]:
    """A degraded flag already set on a stored itinerary is kept."""
    if _get(data, "status") == STATUS_DEGRADED:
        return STATUS_DEGRADED, _opt_text(_get(data, "degraded_reason"))
    return STATUS_OK, None


def normalize_itinerary(data: Any, trip: TripRequest) -> GeneratedItinerary:
    """
    Build a complete itinerary from a parsed (possibly empty or malformed)
    model reply. Values the model left out fall back to the trip request
    where one exists, to sentinels otherwise.
    """
    if not isinstance(data, dict):
        data = {}
    status, degraded_reason = _status(data)
    return GeneratedItinerary(
        destination=_text(_get(data, "destination"), trip.destination),
        start_date=_text(_get(data, "start_date"), trip.start_date.isoformat()),
        end_date=_text(_get(data, "end_date"), trip.end_date.isoformat()),
        travelers=_travelers(_get(data, "travelers"), trip),
        weather_summary=_text(_get(data, "weather_summary"), "Weather data not available"),
        daily_itinerary=normalize_days(_get(data, "daily_itinerary"), trip),
        accommodations=normalize_accommodations(_get(data, "accommodations"), trip),
        transport_options=normalize_transport(_get(data, "transport_options")),
        budget_breakdown=normalize_budget(_get(data, "budget_breakdown"), trip),
        packing_list=normalize_packing_list(_get(data, "packing_list")),
        status=status,
        degraded_reason=degraded_reason,
    )
