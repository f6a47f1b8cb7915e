# ai/planner.py
# ------------------------------------------------------------------------------
"""
Itinerary generation pipeline.

    IDLE -> PROMPTING -> AWAITING_RESPONSE -> EXTRACTING -> REPAIRING
         -> NORMALIZING -> READY

Any failure after the response arrives moves the run to DEGRADED, which
always resolves to READY with a fallback itinerary. Only configuration and
transport errors reach the caller.
"""

import logging
from dataclasses import replace
from enum import Enum

from ai.fallback import build_fallback_itinerary
from ai.gemini import build_prompt
from ai.normalize import normalize_itinerary
from ai.parsing import extract_json_candidate, repair_json
from core.errors import ShapeError
from core.models import STATUS_DEGRADED, GeneratedItinerary, TripRequest
from core.result import StageResult

logger = logging.getLogger(__name__)

REASON_PARSE_ERROR = "parse_error"
REASON_SHAPE_ERROR = "shape_error"


class PipelineState(str, Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    AWAITING_RESPONSE = "awaiting_response"
    EXTRACTING = "extracting"
    REPAIRING = "repairing"
    NORMALIZING = "normalizing"
    DEGRADED = "degraded"
    READY = "ready"


class ItineraryPipeline:
    """
    One run per trip request. `transport` is anything with a
    `send(prompt) -> str` method (GeminiTransport in production).
    """

    def __init__(self, transport):
        self.transport = transport
        self.state = PipelineState.IDLE

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    def _normalize(self, data: dict, trip: TripRequest) -> StageResult:
        try:
            return StageResult.success(normalize_itinerary(data, trip))
        except Exception as e:  # the normalizer is total; anything here is a bug
            logger.exception("Normalization failed")
            return StageResult.failure(ShapeError(str(e)))

    def run(self, trip: TripRequest) -> GeneratedItinerary:
        logger.info(
            "Generating itinerary for %s (%s → %s, %d days)",
            trip.destination, trip.start_date, trip.end_date, trip.day_count,
        )
        self._enter(PipelineState.PROMPTING)
        prompt = build_prompt(trip)

        self._enter(PipelineState.AWAITING_RESPONSE)
        raw_text = self.transport.send(prompt)
        logger.debug("Raw model text: %s", raw_text[:300])

        self._enter(PipelineState.EXTRACTING)
        candidate = extract_json_candidate(raw_text)

        self._enter(PipelineState.REPAIRING)
        parsed = repair_json(candidate)

        self._enter(PipelineState.NORMALIZING)
        normalized = self._normalize(parsed.value, trip)

        if not normalized.ok:
            self._enter(PipelineState.DEGRADED)
            itinerary = build_fallback_itinerary(trip, reason=REASON_SHAPE_ERROR)
            logger.error("Returning fallback itinerary: %s", normalized.error)
        else:
            itinerary = normalized.value
            if not parsed.ok:
                self._enter(PipelineState.DEGRADED)
                itinerary = replace(
                    itinerary, status=STATUS_DEGRADED, degraded_reason=REASON_PARSE_ERROR
                )

        self._enter(PipelineState.READY)
        return itinerary


def generate_itinerary(trip: TripRequest, transport) -> GeneratedItinerary:
    """
    Ask the model for an itinerary and always hand back something renderable.
    Raises ConfigurationError / TransportError subclasses only.
    """
    return ItineraryPipeline(transport).run(trip)
