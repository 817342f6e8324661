# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from pincode_distance.logging.init import reset_logging
from pincode_distance.models.route import LookupResult


class FakeLookupService:
    """Scripted LookupService: (origin, destination) -> LookupResult or exception.

    Unscripted pairs get a default result derived from the inputs.
    """

    def __init__(self, responses: dict[tuple[str, str], object] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str]] = []

    def lookup(self, origin: str, destination: str) -> LookupResult:
        self.calls.append((origin, destination))
        response = self.responses.get((origin, destination))
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return LookupResult(
                distance=100.0 + len(self.calls),
                travel_time="2 hours",
                route_summary=f"via {destination} highway",
            )
        return response  # type: ignore[return-value]


@pytest.fixture()
def make_service():
    def _make(responses: dict[tuple[str, str], object] | None = None) -> FakeLookupService:
        return FakeLookupService(responses)
    return _make


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """model: gemini-2.5-flash
country: India
timeout_seconds: 30
columns:
  origin: Origin Pin Code
  destination: Destination City
output:
  results_file: out/distance_results.csv
  logs_dir: logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "distance.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "pairs.csv"
    f.write_text(
        "Origin Pin Code,Destination City\n"
        "400001,Pune\n"
        ",Jaipur\n"
        "110001,Jaipur\n",
        encoding="utf-8",
    )
    return f


@pytest.fixture()
def api_key_env(monkeypatch) -> str:
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()
