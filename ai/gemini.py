# ai/gemini.py
# ------------------------------------------------------------------------------
import json
import logging
import textwrap
from typing import Optional

import requests

from core.config import DEFAULT_BASE_URL, Settings
from core.errors import (
    AuthError,
    ConfigurationError,
    EmptyResponseError,
    ProviderError,
    RateLimitError,
)
from core.models import TripRequest

logger = logging.getLogger(__name__)


def _money(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


# ──────────────────────────────────────────────────────────────────────────────
# Prompt template – the worked JSON example is what the parser expects back
# ──────────────────────────────────────────────────────────────────────────────
_PROMPT_TEMPLATE = textwrap.dedent(
    """\
    You are an expert travel planner. I need a detailed travel itinerary in JSON format for the following trip:

    Starting location: {origin}
    Destination: {destination}
    Dates: {start} to {end} ({days} days)
    Travelers: {travelers} people
    Budget: ${budget}
    Trip style: {style}
    Preferences: {preferences}
    {optional_lines}Transportation: {transportation}

    IMPORTANT: Respond with a valid JSON object that follows this exact structure:

    {{
      "destination": "{destination}",
      "startDate": "{start}",
      "endDate": "{end}",
      "travelers": {travelers},
      "weatherSummary": "Brief weather summary for the trip",
      "dailyItinerary": [
        {{
          "date": "Day 1 - {start}",
          "weather": "Weather forecast for this day",
          "activities": [
            {{
              "time": "8:00 AM - 10:00 AM",
              "name": "Activity name",
              "description": "Detailed description",
              "location": "Location name",
              "cost": 25,
              "weatherDependent": true,
              "duration": "2 hours",
              "popularity": 4.5,
              "category": "Sightseeing",
              "bestTimeToVisit": "Early morning, before the crowds",
              "tip": "Book tickets online to skip the queue"
            }},
            {{
              "time": "12:30 PM - 2:00 PM",
              "name": "Lunch",
              "description": "Local lunch spot",
              "location": "Location name",
              "cost": 30,
              "weatherDependent": false,
              "mealSuggestion": {{
                "restaurant": "Restaurant name",
                "cuisine": "Local cuisine",
                "dietaryOptions": ["vegetarian"],
                "priceRange": "$$",
                "specialty": "Signature dish",
                "walkingDistance": "5 minutes from the previous activity",
                "timingTip": "Arrive before 1 PM"
              }}
            }}
          ]
        }}
      ],
      "accommodations": [
        {{
          "name": "Hotel name",
          "description": "Description of hotel",
          "location": "Address",
          "price": 150,
          "rating": 4.5,
          "image": "https://images.unsplash.com/photo-1566073771259-6a8506099945",
          "amenities": [{{"name": "Free WiFi"}}, {{"name": "Breakfast included"}}],
          "nearbyAttractions": ["Attraction name"],
          "transportationAccess": ["Metro line 1, 3 minutes walk"]
        }}
      ],
      "transportOptions": {{
        "flight": [
          {{
            "provider": "Airline name",
            "departureTime": "10:00 AM",
            "arrivalTime": "12:00 PM",
            "duration": "2 hours",
            "price": 300,
            "departureLocation": "Origin airport",
            "arrivalLocation": "Destination airport",
            "details": "Flight details",
            "recommendedBookingTime": "6 weeks before departure"
          }}
        ],
        "train": [],
        "car": [],
        "bus": [],
        "publicTransit": [],
        "localTransportation": [
          {{
            "mode": "Metro",
            "coverage": "City centre and airport",
            "costPerTrip": 2,
            "dayPassCost": 8,
            "frequency": "Every 5 minutes",
            "operatingHours": "5:30 AM - midnight",
            "accessibility": "Step-free access at major stations",
            "tips": ["Buy a rechargeable card"]
          }}
        ]
      }},
      "budgetBreakdown": {{
        "totalBudget": {budget},
        "totalSpent": 0,
        "categories": [
          {{
            "name": "Accommodation",
            "amount": 500,
            "percentage": 50,
            "items": [{{"name": "Hotel, 3 nights", "cost": 450}}],
            "savingTip": "Book refundable rates early"
          }},
          {{"name": "Food", "amount": 300, "percentage": 30}},
          {{"name": "Activities", "amount": 200, "percentage": 20}}
        ],
        "contingencyAmount": 100,
        "localCurrency": {{
          "currency": "Currency name",
          "exchangeRate": "1 USD = X local",
          "paymentTips": ["Cards are widely accepted"]
        }}
      }},
      "packingList": [
        {{
          "category": "Clothing",
          "items": [
            {{"name": "Rain jacket", "essential": true, "weatherConsideration": "Showers expected", "packingTip": "Pack it on top"}},
            {{"name": "T-shirts", "essential": false}}
          ],
          "notes": "Layers work best"
        }}
      ]
    }}

    The JSON must be valid. Include realistic data for {destination} with appropriate costs, activities, and accommodations for a ${budget} budget. Create daily activities for all {days} days of the trip.
    """
)


def build_prompt(trip: TripRequest) -> str:
    """Return the generation prompt for a validated trip request."""
    optional_lines = ""
    if trip.dietary_restrictions:
        optional_lines += f"Dietary restrictions: {', '.join(trip.dietary_restrictions)}\n"
    if trip.accessibility:
        optional_lines += f"Accessibility needs: {', '.join(trip.accessibility)}\n"

    return _PROMPT_TEMPLATE.format(
        origin=trip.start_location,
        destination=trip.destination,
        start=trip.start_date.isoformat(),
        end=trip.end_date.isoformat(),
        days=trip.day_count,
        travelers=trip.travelers,
        budget=_money(trip.budget),
        style=trip.trip_style,
        preferences=", ".join(trip.preferences),
        optional_lines=optional_lines,
        transportation=", ".join(trip.transportation),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Transport – one POST to generateContent, no retries
# ──────────────────────────────────────────────────────────────────────────────
class GeminiTransport:
    """
    Sends a prompt to the Gemini REST endpoint and returns the generated text.

    Errors:
    - 401 / 403            -> AuthError
    - 429                  -> RateLimitError
    - other non-2xx        -> ProviderError
    - no text in the reply -> EmptyResponseError
    Each error carries the raw response body.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.7,
        top_k: int = 40,
        top_p: float = 0.95,
        max_output_tokens: int = 8192,
        timeout: Optional[float] = 60.0,
    ):
        if not api_key or not api_key.strip():
            raise ConfigurationError("A Gemini API key is required.")
        self._api_key = api_key.strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.generation_config = {
            "temperature": temperature,
            "topK": top_k,
            "topP": top_p,
            "maxOutputTokens": max_output_tokens,
        }
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiTransport":
        return cls(
            api_key=settings.require_api_key(),
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
            max_output_tokens=settings.max_output_tokens,
            timeout=settings.request_timeout,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def send(self, prompt: str) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self.generation_config,
        }
        logger.info("Sending prompt to Gemini (%s, %d chars)", self.model, len(prompt))
        try:
            r = requests.post(
                self.url,
                headers={"x-goog-api-key": self._api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Could not reach Gemini: {e}")

        raw = r.text
        logger.debug("Gemini status %s, %d bytes", r.status_code, len(raw))

        if r.status_code in (401, 403):
            raise AuthError("Invalid API key. Please check your Gemini API key", raw, r.status_code)
        if r.status_code == 429:
            raise RateLimitError("Rate limit exceeded. Please try again later", raw, r.status_code)
        if r.status_code >= 400:
            raise ProviderError(f"API error ({r.status_code}): {r.reason}", raw, r.status_code)

        if not raw.strip():
            raise EmptyResponseError("Received an empty body from Gemini API", raw, r.status_code)

        try:
            envelope = json.loads(raw)
        except ValueError:
            raise ProviderError("Failed to parse API response", raw, r.status_code)

        text = _candidate_text(envelope)
        if text is None:
            raise EmptyResponseError("Unexpected response format from Gemini API", raw, r.status_code)
        if not text.strip():
            raise EmptyResponseError("Received empty text from Gemini API", raw, r.status_code)
        return text


def _candidate_text(envelope) -> Optional[str]:
    """candidates[0].content.parts[0].text, or None when any level is missing."""
    try:
        text = envelope["candidates"][0]["content"]["parts"][0].get("text")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return text if isinstance(text, str) else None
