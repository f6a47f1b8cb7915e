# main.py

import datetime
import logging
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator, model_validator

from ai import planner
from ai.gemini import GeminiTransport
from core.config import Settings
from core.errors import ConfigurationError, RateLimitError, TransportError
from core.log import setup_logging
from core.models import TripRequest, itinerary_to_dict

settings = Settings.from_env()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="AI Travel Planner API",
    description="Generates structured trip itineraries with Gemini.",
    version="1.0.0",
)


# Trip request as posted by the web form
class ItineraryRequest(BaseModel):
    start_location: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    budget: float = Field(gt=0)
    trip_style: Literal["luxury", "balanced", "budget"] = "balanced"
    start_date: datetime.date
    end_date: datetime.date
    travelers: int = Field(ge=1, le=20)
    preferences: List[str] = Field(min_length=1)
    transportation: List[str] = Field(min_length=1)
    dietary_restrictions: Optional[List[str]] = None
    accessibility: Optional[List[str]] = None

    @field_validator("start_location", "destination")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def _dates_in_order(self) -> "ItineraryRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    def to_trip(self) -> TripRequest:
        return TripRequest(**self.model_dump())


def get_transport() -> GeminiTransport:
    try:
        return GeminiTransport.from_settings(settings)
    except ConfigurationError as e:
        logger.error("Gemini is not configured: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/")
def home():
    return {"status": "ok", "message": "Welcome to the AI Travel Planner API"}


@app.post("/api/itinerary", response_model=dict)
def generate_itinerary_endpoint(req: ItineraryRequest, transport=Depends(get_transport)):
    try:
        itin = planner.generate_itinerary(req.to_trip(), transport)
    except RateLimitError as e:
        raise HTTPException(status_code=429, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return itinerary_to_dict(itin)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
