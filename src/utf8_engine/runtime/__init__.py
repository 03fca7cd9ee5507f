"""Runtime services: telemetry and settings."""

from . import settings, telemetry

__all__ = ["settings", "telemetry"]
