"""Pin code distance calculator: single and bulk driving-distance lookups."""

__version__ = "0.1.0"
