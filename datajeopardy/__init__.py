"""DataJeopardy: query threat classification and risk-based account locking."""

__version__ = "1.0.0"
