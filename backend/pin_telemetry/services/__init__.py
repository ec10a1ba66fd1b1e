"""
Services Package
================

These are the "workers" that do the actual work.

- generate_api_key: Makes new random API keys
- TelemetryService: Registers devices and saves their readings
"""

from .key_generator import generate_api_key
from .telemetry_service import TelemetryService

__all__ = [
    "generate_api_key",
    "TelemetryService",
]
