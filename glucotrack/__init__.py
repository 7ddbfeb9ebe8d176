"""GlucoTrack: a personal glucose-meter log served with FastAPI."""

__version__ = "0.1.0"
