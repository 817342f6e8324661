from __future__ import annotations

import os
from collections.abc import Callable, Mapping

"""Credential gate and API key resolution.

The gate is the single flag that says whether a usable credential is
selected. Lookup code only ever closes it (revoke); opening it again is up to
whoever obtains a new credential.
"""

__all__ = [
    "API_KEY_ENV_VARS",
    "CredentialGate",
    "resolve_api_key",
]

# Checked in order; first non-empty value wins
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


class CredentialGate:
    """Observable "credential ready" flag."""

    def __init__(self, ready: bool = False) -> None:
        self._ready = ready
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def ready(self) -> bool:
        return self._ready

    def subscribe(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def _set(self, ready: bool) -> None:
        if ready == self._ready:
            return
        self._ready = ready
        for listener in list(self._listeners):
            listener(ready)

    def grant(self) -> None:
        """Mark a credential as selected (called by the credential owner)."""
        self._set(True)

    def revoke(self) -> None:
        """Mark the current credential unusable."""
        self._set(False)


def resolve_api_key(environ: Mapping[str, str] | None = None) -> str | None:
    env = os.environ if environ is None else environ
    for name in API_KEY_ENV_VARS:
        value = env.get(name, "").strip()
        if value:
            return value
    return None
