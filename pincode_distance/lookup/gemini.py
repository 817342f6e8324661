from __future__ import annotations

import json
import logging
import math
from typing import Any

import jsonschema
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..models.config_models import LookupConfig
from ..models.route import LookupResult
from .base import CredentialFailure, EmptyResponse, LookupFailure, RowFailure

"""Gemini-backed lookup service.

Asks the model for a JSON object with the driving distance (km), travel time
and route summary, validates the payload with jsonschema and classifies every
failure into CredentialFailure / RowFailure / EmptyResponse before it leaves
this module.
"""

__all__ = [
    "GeminiLookupService",
    "classify_error",
    "parse_response_text",
]

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a route calculation expert. Provide the driving distance, estimated time, "
    "and a brief route summary. Respond ONLY with a clean JSON object containing "
    "'distance' (number in km), 'travelTime' (string, e.g., '2 hours 59 mins'), and "
    "'routeSummary' (string, e.g., 'via NH48'). Do not add explanations."
)

PROMPT_TEMPLATE = (
    "Calculate the driving distance in kilometers, estimated travel time, and the main "
    "route summary between {origin}, {country} and {destination}, {country}."
)

EMPTY_RESPONSE_MESSAGE = "Could not find a route. The API returned an empty response."
INVALID_ROUTE_MESSAGE = (
    "Could not determine a valid route. The location may be invalid or too ambiguous."
)

# Substrings (lower-case) that mark an error as credential related
CREDENTIAL_MARKERS = ("api key", "requested entity was not found")
CREDENTIAL_STATUS_CODES = frozenset({401, 403})

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "distance": types.Schema(
            type=types.Type.NUMBER,
            description="Driving distance in kilometers.",
        ),
        "travelTime": types.Schema(
            type=types.Type.STRING,
            description="Estimated travel time by car.",
        ),
        "routeSummary": types.Schema(
            type=types.Type.STRING,
            description="A brief summary of the main route taken, starting with 'via'.",
        ),
    },
    required=["distance", "travelTime", "routeSummary"],
)

# Payload contract checked locally; zero distance is rejected like a missing one
PAYLOAD_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "distance": {"type": "number", "exclusiveMinimum": 0},
        "travelTime": {"type": "string", "pattern": r"\S"},
        "routeSummary": {"type": "string", "pattern": r"\S"},
    },
    "required": ["distance", "travelTime", "routeSummary"],
}


def classify_error(exc: BaseException) -> LookupFailure:
    """Map an exception raised while calling Gemini to a LookupFailure."""
    if isinstance(exc, LookupFailure):
        return exc
    message = str(exc) or "Unknown error"
    if isinstance(exc, genai_errors.APIError) and exc.code in CREDENTIAL_STATUS_CODES:
        return CredentialFailure(message)
    lowered = message.lower()
    if any(marker in lowered for marker in CREDENTIAL_MARKERS):
        return CredentialFailure(message)
    return RowFailure(message)


def parse_response_text(text: str | None) -> LookupResult:
    """Validate the model's JSON text and build a LookupResult.

    Raises:
        EmptyResponse: text is missing or blank
        RowFailure: text is not JSON or does not satisfy the payload contract
    """
    if text is None or not text.strip():
        raise EmptyResponse(EMPTY_RESPONSE_MESSAGE)
    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise RowFailure(f"Malformed response from the routing service: {e}") from e
    try:
        jsonschema.validate(data, PAYLOAD_JSON_SCHEMA)
    except jsonschema.ValidationError as e:
        raise RowFailure(INVALID_ROUTE_MESSAGE) from e
    # 1e400 parses to inf and still satisfies exclusiveMinimum
    if not math.isfinite(data["distance"]):
        raise RowFailure(INVALID_ROUTE_MESSAGE)
    return LookupResult(
        distance=float(data["distance"]),
        travel_time=data["travelTime"].strip(),
        route_summary=data["routeSummary"].strip(),
    )


class GeminiLookupService:
    """LookupService implementation on top of the google-genai client."""

    def __init__(self, api_key: str, config: LookupConfig | None = None, client: Any = None) -> None:
        self.config = config or LookupConfig()
        if client is None:
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(self.config.timeout_seconds * 1000)),
            )
        self._client = client

    def build_prompt(self, origin: str, destination: str) -> str:
        return PROMPT_TEMPLATE.format(
            origin=origin, destination=destination, country=self.config.country
        )

    def lookup(self, origin: str, destination: str) -> LookupResult:
        logger.debug("lookup origin=%s destination=%s model=%s", origin, destination, self.config.model)
        try:
            response = self._client.models.generate_content(
                model=self.config.model,
                contents=self.build_prompt(origin, destination),
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION,
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                ),
            )
            return parse_response_text(response.text)
        except Exception as e:
            failure = classify_error(e)
            logger.debug(
                "lookup failed origin=%s destination=%s type=%s: %s",
                origin,
                destination,
                type(failure).__name__,
                failure,
            )
            if failure is e:
                raise
            raise failure from e
