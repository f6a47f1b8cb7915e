# tests/conftest.py

import datetime

import pytest

from core.models import TripRequest


class FakeTransport:
    """Stands in for GeminiTransport: returns canned text or raises."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.prompts: list[str] = []

    def send(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", reason: str = "OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason


@pytest.fixture
def trip() -> TripRequest:
    return TripRequest(
        start_location="Paris",
        destination="Rome",
        budget=1500,
        trip_style="balanced",
        start_date=datetime.date(2024, 1, 1),
        end_date=datetime.date(2024, 1, 3),
        travelers=2,
        preferences=["history", "food"],
        transportation=["flight", "publicTransit"],
    )


@pytest.fixture
def full_reply() -> dict:
    """A model reply that follows the prompt's JSON example."""
    return {
        "destination": "Rome",
        "startDate": "2024-01-01",
        "endDate": "2024-01-03",
        "travelers": 2,
        "weatherSummary": "Mild and sunny",
        "dailyItinerary": [
            {
                "date": f"Day {i} - 2024-01-0{i}",
                "weather": "Sunny, 14°C",
                "activities": [
                    {
                        "time": "9:00 AM",
                        "name": "Colosseum",
                        "description": "Guided tour",
                        "location": "Piazza del Colosseo",
                        "cost": 25,
                        "weatherDependent": True,
                        "duration": "2 hours",
                        "popularity": 4.8,
                    },
                    {
                        "time": "1:00 PM",
                        "name": "Lunch",
                        "description": "Trattoria",
                        "location": "Monti",
                        "cost": 30,
                        "weatherDependent": False,
                        "mealSuggestion": {
                            "restaurant": "Da Valentino",
                            "cuisine": "Roman",
                            "dietaryOptions": ["vegetarian"],
                            "priceRange": "$$",
                            "specialty": "Cacio e pepe",
                        },
                    },
                ],
            }
            for i in range(1, 4)
        ],
        "accommodations": [
            {
                "name": "Hotel Artemide",
                "description": "Central hotel",
                "location": "Via Nazionale",
                "price": 180,
                "rating": 4.6,
                "image": "https://example.com/artemide.jpg",
                "amenities": [{"name": "Free WiFi"}, "Breakfast included"],
                "nearbyAttractions": ["Trevi Fountain"],
            }
        ],
        "transportOptions": {
            "flight": [
                {
                    "provider": "ITA Airways",
                    "departureTime": "08:00",
                    "arrivalTime": "10:05",
                    "duration": "2h05",
                    "price": 120,
                    "departureLocation": "CDG",
                    "arrivalLocation": "FCO",
                    "details": "Direct",
                }
            ],
            "train": [],
            "localTransportation": [
                {
                    "mode": "Metro",
                    "coverage": "Centre",
                    "costPerTrip": 1.5,
                    "dayPassCost": 7,
                    "frequency": "5 min",
                    "operatingHours": "5:30-23:30",
                    "accessibility": "Partial",
                    "tips": ["Validate your ticket"],
                }
            ],
        },
        "budgetBreakdown": {
            "totalBudget": 1500,
            "totalSpent": 1200,
            "categories": [
                {"name": "Accommodation", "amount": 540, "percentage": 36},
                {"name": "Food", "amount": 400, "percentage": 27, "savingTip": "Eat where locals eat"},
            ],
            "contingencyAmount": 150,
            "localCurrency": {"currency": "Euro", "exchangeRate": "1 USD = 0.92 EUR", "paymentTips": ["Cards OK"]},
        },
        "packingList": [
            {"category": "Clothing", "items": [{"name": "Jacket", "essential": True}, "Scarf"]},
        ],
    }
