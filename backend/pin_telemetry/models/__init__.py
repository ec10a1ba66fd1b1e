"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from pin_telemetry.models import PinState, SignalReading
"""

from .telemetry import (
    # Allowed pin values
    PinState,

    # What devices send us
    RegisterRequest,
    SignalDataRequest,

    # What we send back
    RegisterResponse,
    MessageResponse,
    ErrorResponse,

    # What we store in MongoDB
    User,
    SignalReading,
)

__all__ = [
    "PinState",
    "RegisterRequest",
    "SignalDataRequest",
    "RegisterResponse",
    "MessageResponse",
    "ErrorResponse",
    "User",
    "SignalReading",
]
