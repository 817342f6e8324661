from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from ..lookup.base import CredentialFailure, LookupService
from ..models.route import LookupResult
from .credentials import CredentialGate

"""On-demand lookup for one origin pin code and destination city."""

__all__ = [
    "InputValidationError",
    "SingleLookup",
    "SINGLE_CREDENTIAL_MESSAGE",
    "directions_url",
    "lookup_single",
]

PIN_CODE_RE = re.compile(r"^\d{6}$")
SINGLE_CREDENTIAL_MESSAGE = "API Key error. Please select a valid API key and try again."
DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/"


class InputValidationError(ValueError):
    """The origin or destination entered by the user is not usable."""


@dataclass(frozen=True)
class SingleLookup:
    origin: str
    destination: str
    result: LookupResult
    directions_url: str


def directions_url(origin: str, destination: str, country: str = "India") -> str:
    """Google Maps driving directions link for the pair."""
    query = urlencode(
        {
            "api": "1",
            "origin": f"{origin}, {country}",
            "destination": f"{destination}, {country}",
        },
        quote_via=quote,
    )
    return f"{DIRECTIONS_BASE_URL}?{query}"


def lookup_single(
    service: LookupService,
    gate: CredentialGate,
    origin_pin_code: str,
    destination_city: str,
    *,
    country: str = "India",
) -> SingleLookup:
    """Validate the inputs and look up one route.

    Raises:
        InputValidationError: pin code is not six digits or destination is blank
        CredentialFailure: credential rejected (the gate is revoked first)
        LookupFailure: any other classified lookup failure
    """
    origin = origin_pin_code.strip()
    destination = destination_city.strip()
    if not PIN_CODE_RE.match(origin):
        raise InputValidationError("Please enter a valid 6-digit pin code.")
    if not destination:
        raise InputValidationError("Please enter a destination city or town.")

    try:
        result = service.lookup(origin, destination)
    except CredentialFailure as e:
        gate.revoke()
        raise CredentialFailure(SINGLE_CREDENTIAL_MESSAGE) from e

    return SingleLookup(
        origin=origin,
        destination=destination,
        result=result,
        directions_url=directions_url(origin, destination, country),
    )
