# ai/fallback.py

from typing import List

from ai.normalize import DEFAULT_IMAGE, sentinel_activity
from core.models import (
    STATUS_DEGRADED,
    Accommodation,
    BudgetBreakdown,
    BudgetCategory,
    DayPlan,
    GeneratedItinerary,
    PackingCategory,
    PackingItem,
    TransportOptions,
    TripRequest,
)

ERROR_NAME = "Error occurred"
ERROR_TEXT = "There was an error generating this data. Please try again later."


def _error_days(trip: TripRequest) -> List[DayPlan]:
    return [
        DayPlan(
            date=f"Day {i} - {d.isoformat()}",
            weather="Data not available",
            activities=[sentinel_activity(time="All day", name=ERROR_NAME, description=ERROR_TEXT)],
        )
        for i, d in enumerate(trip.day_dates(), start=1)
    ]


def build_fallback_itinerary(trip: TripRequest, reason: str = "generation_failed") -> GeneratedItinerary:
    """
    Last-resort itinerary built from the trip request alone.

    Nothing the model returned is read here, so this cannot fail on bad model
    output; the result is flagged `degraded` with `reason`.
    """
    return GeneratedItinerary(
        destination=trip.destination,
        start_date=trip.start_date.isoformat(),
        end_date=trip.end_date.isoformat(),
        travelers=trip.travelers,
        weather_summary="An error occurred while generating weather data",
        daily_itinerary=_error_days(trip),
        accommodations=[
            Accommodation(
                name="Error generating accommodation data",
                description="There was a problem generating accommodation details",
                location=trip.destination,
                price=0,
                rating=0,
                image=DEFAULT_IMAGE,
                amenities=["Error"],
            )
        ],
        transport_options=TransportOptions(),
        budget_breakdown=BudgetBreakdown(
            total_budget=trip.budget,
            total_spent=0,
            categories=[BudgetCategory(name="Error", amount=trip.budget, percentage=100)],
            contingency_amount=0,
        ),
        packing_list=[
            PackingCategory(
                category="Error",
                items=[PackingItem(name="There was an error generating packing list data", essential=False)],
            )
        ],
        status=STATUS_DEGRADED,
        degraded_reason=reason,
    )
