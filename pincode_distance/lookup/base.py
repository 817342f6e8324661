from __future__ import annotations

from typing import Protocol

from ..models.route import LookupResult

"""Lookup service contract and its failure classes.

The runner only distinguishes two outcomes of a failed lookup:

- CredentialFailure: the active credential is invalid; every later lookup
  would fail the same way, so the batch stops.
- RowFailure (and its EmptyResponse subclass): only this row is affected.

Concrete services are responsible for classifying their own errors.
"""

__all__ = [
    "LookupFailure",
    "CredentialFailure",
    "RowFailure",
    "EmptyResponse",
    "LookupService",
]


class LookupFailure(Exception):
    """Base class for classified lookup failures."""


class CredentialFailure(LookupFailure):
    """The credential used for lookups is invalid or unrecognised."""


class RowFailure(LookupFailure):
    """The lookup failed for reasons specific to this origin/destination."""


class EmptyResponse(RowFailure):
    """The remote call returned no usable content."""


class LookupService(Protocol):
    def lookup(self, origin: str, destination: str) -> LookupResult:
        """Return driving information or raise a LookupFailure subclass."""
        ...
