# tests/test_normalize.py

import math

import pytest

from ai.fallback import build_fallback_itinerary
from ai.normalize import (
    DEFAULT_IMAGE,
    NOT_AVAILABLE,
    normalize_accommodation,
    normalize_activities,
    normalize_activity,
    normalize_budget,
    normalize_itinerary,
    normalize_packing_list,
    normalize_transport,
)
from ai.parsing import parse_response
from core.models import STATUS_DEGRADED, STATUS_OK, itinerary_to_dict


def test_rome_fence_example(trip):
    """Fenced `{"destination": "Rome"}` gives a complete, sentineled itinerary."""
    parsed = parse_response('```json\n{"destination":"Rome"}\n```')
    itin = normalize_itinerary(parsed.value, trip)

    assert itin.destination == "Rome"
    assert len(itin.daily_itinerary) == trip.day_count == 3
    assert [d.date for d in itin.daily_itinerary] == [
        "Day 1 - 2024-01-01",
        "Day 2 - 2024-01-02",
        "Day 3 - 2024-01-03",
    ]
    assert all(d.activities[0].name == NOT_AVAILABLE for d in itin.daily_itinerary)

    assert len(itin.accommodations) == 1
    assert itin.accommodations[0].name == "Accommodation data not available"
    assert itin.accommodations[0].location == "Rome"

    t = itin.transport_options
    assert t.flight == t.train == t.car == t.bus == t.public_transit == []
    assert t.local_transportation is None


def test_empty_input_falls_back_to_trip_values(trip):
    itin = normalize_itinerary({}, trip)
    assert itin.destination == "Rome"
    assert itin.start_date == "2024-01-01"
    assert itin.end_date == "2024-01-03"
    assert itin.travelers == 2
    assert itin.status == STATUS_OK
    assert itin.budget_breakdown.total_budget == 1500
    assert [c.name for c in itin.budget_breakdown.categories] == [NOT_AVAILABLE]
    assert len(itin.packing_list) == 1
    assert itin.packing_list[0].items[0].name == NOT_AVAILABLE


@pytest.mark.parametrize("data", [None, [], "text", 42, {"dailyItinerary": "nope"}])
def test_any_shape_is_accepted(trip, data):
    itin = normalize_itinerary(data, trip)
    assert len(itin.daily_itinerary) == 3
    assert itin.accommodations and itin.packing_list and itin.budget_breakdown.categories


def test_full_reply_is_carried_through(trip, full_reply):
    itin = normalize_itinerary(full_reply, trip)

    assert itin.weather_summary == "Mild and sunny"
    lunch = itin.daily_itinerary[0].activities[1]
    assert lunch.meal_suggestion.restaurant == "Da Valentino"
    assert lunch.meal_suggestion.dietary_options == ["vegetarian"]
    assert lunch.meal_suggestion.walking_distance is None

    hotel = itin.accommodations[0]
    assert hotel.amenities == ["Free WiFi", "Breakfast included"]
    assert hotel.nearby_attractions == ["Trevi Fountain"]
    assert hotel.transportation_access is None

    assert itin.transport_options.flight[0].provider == "ITA Airways"
    assert itin.transport_options.local_transportation[0].day_pass_cost == 7

    budget = itin.budget_breakdown
    assert budget.local_currency.currency == "Euro"
    assert budget.categories[1].saving_tip == "Eat where locals eat"
    assert budget.categories[0].items is None

    clothing = itin.packing_list[0]
    assert [(i.name, i.essential) for i in clothing.items] == [("Jacket", True), ("Scarf", False)]


def test_normalizing_twice_is_a_no_op(trip, full_reply):
    once = normalize_itinerary(full_reply, trip)
    twice = normalize_itinerary(itinerary_to_dict(once), trip)
    assert twice == once


def test_normalizing_sentinel_itinerary_is_a_no_op(trip):
    once = normalize_itinerary({}, trip)
    assert normalize_itinerary(itinerary_to_dict(once), trip) == once


@pytest.mark.parametrize("reason", ["shape_error", "parse_error"])
def test_normalizing_degraded_itinerary_keeps_the_flag(trip, reason):
    fallback = build_fallback_itinerary(trip, reason)
    again = normalize_itinerary(itinerary_to_dict(fallback), trip)
    assert again.status == STATUS_DEGRADED
    assert again.degraded_reason == reason
    assert again == fallback


def test_empty_optional_lists_survive_normalizing_twice(trip, full_reply):
    once = normalize_itinerary(full_reply, trip)
    once.transport_options.local_transportation = []
    once.budget_breakdown.categories[0].items = []
    once.accommodations[0].nearby_attractions = []

    twice = normalize_itinerary(itinerary_to_dict(once), trip)
    assert twice.transport_options.local_transportation == []
    assert twice.budget_breakdown.categories[0].items == []
    assert twice.accommodations[0].nearby_attractions == []
    assert twice == once


def test_day_count_mismatch_keeps_model_days(trip, full_reply, caplog):
    full_reply["dailyItinerary"] = full_reply["dailyItinerary"][:1]
    itin = normalize_itinerary(full_reply, trip)
    assert len(itin.daily_itinerary) == 1
    assert "keeping the model's list" in caplog.text


def test_one_bad_day_does_not_spoil_the_rest(trip, full_reply):
    full_reply["dailyItinerary"][1] = "garbage"
    itin = normalize_itinerary(full_reply, trip)
    assert itin.daily_itinerary[0].activities[0].name == "Colosseum"
    assert itin.daily_itinerary[1].activities[0].name == "Invalid day data"
    assert itin.daily_itinerary[2].activities[0].name == "Colosseum"


# ──────────────────────────────────────────────────────────────────────────────
# Entities
# ──────────────────────────────────────────────────────────────────────────────
def test_activity_coercions():
    a = normalize_activity(
        {"name": "Forum", "cost": "25", "weatherDependent": "yes", "popularity": "high", "time": ""}
    )
    assert a.name == "Forum"
    assert a.cost == 0
    assert a.weather_dependent is False
    assert a.popularity is None
    assert a.time == "Time not specified"
    assert a.description == "No description available"


@pytest.mark.parametrize("cost", [None, True, float("nan"), float("inf"), -10, [5]])
def test_activity_cost_is_never_bad(cost):
    a = normalize_activity({"cost": cost})
    assert a.cost == 0
    assert not (isinstance(a.cost, float) and math.isnan(a.cost))


def test_non_dict_activity_is_replaced():
    a = normalize_activity(17)
    assert a.name == "Invalid activity data"
    assert a.cost == 0


def test_time_slots_are_flattened_in_order():
    day = {
        "evening": [{"name": "Dinner"}],
        "morning": [{"name": "Museum", "time": "9:00"}],
        "afternoon": [],
    }
    acts = normalize_activities(day)
    assert [a.name for a in acts] == ["Museum", "Dinner"]
    assert acts[0].time == "9:00"
    assert acts[1].time == "Evening"


def test_day_without_activities_gets_a_sentinel():
    acts = normalize_activities({"date": "Day 1"})
    assert len(acts) == 1
    assert acts[0].name == NOT_AVAILABLE


def test_accommodation_rating_is_clamped_and_image_defaulted():
    acc = normalize_accommodation({"name": "Inn", "rating": 9, "price": -3, "amenities": []})
    assert acc.rating == 5.0
    assert acc.price == 0
    assert acc.image == DEFAULT_IMAGE
    assert acc.amenities == [NOT_AVAILABLE]


def test_transport_lists_always_present():
    t = normalize_transport({"flight": "none", "bus": [{"provider": "FlixBus", "price": 19}, 3]})
    assert t.flight == []
    assert t.train == []
    assert [o.provider for o in t.bus] == ["FlixBus", "Provider not specified"]
    assert t.local_transportation is None


def test_budget_category_with_non_numeric_amount(trip):
    budget = normalize_budget(
        {"categories": [{"name": "Food", "amount": "lots", "percentage": 30}, {"name": "Hotel", "amount": 500}]},
        trip,
    )
    food, hotel = budget.categories
    assert food.name == "Food"
    assert food.amount == 0
    assert food.percentage == 30
    assert hotel.amount == 500
    assert budget.total_budget == trip.budget


def test_budget_items_accept_strings(trip):
    budget = normalize_budget(
        {"categories": [{"name": "Food", "amount": 100, "items": ["Pizza", {"name": "Gelato", "cost": 4}]}]},
        trip,
    )
    items = budget.categories[0].items
    assert [(i.name, i.cost) for i in items] == [("Pizza", 0), ("Gelato", 4)]


def test_packing_list_accepts_name_key_and_string_items():
    cats = normalize_packing_list([{"name": "Toiletries", "items": ["Toothbrush"]}, {"category": "Docs"}])
    assert cats[0].category == "Toiletries"
    assert cats[0].items[0].name == "Toothbrush"
    assert cats[1].items[0].name == NOT_AVAILABLE
