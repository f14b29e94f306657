"""Core package for the battery telemetry dashboard."""

__all__ = ["telemetry", "view", "io", "gui"]
__version__ = "0.1.0"
