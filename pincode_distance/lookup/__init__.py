from .base import CredentialFailure, EmptyResponse, LookupFailure, LookupService, RowFailure

__all__ = [
    "CredentialFailure",
    "EmptyResponse",
    "LookupFailure",
    "LookupService",
    "RowFailure",
]
