"""
Telemetry Service
=================

The part that actually does the work behind the two endpoints.

WHAT IT DOES:
------------
1. register_device - find the user for a unique_id, or create one with a new key
2. authenticate    - find the user that owns an API key
3. record_signal   - save one pin-state reading for a user

The routers handle HTTP (status codes, headers); this class only talks
to Storage. Database errors are not caught here, they go straight up to
the exception handlers in errors.py.
"""

import logging
from typing import Optional

from pin_telemetry.models import SignalReading, User
from pin_telemetry.services.key_generator import generate_api_key
from pin_telemetry.storage import Storage

logger = logging.getLogger(__name__)


def mask_key(api_key: str) -> str:
    """Show only the first few characters of a key in logs."""
    return f"{api_key[:6]}..." if len(api_key) > 6 else "***"


class TelemetryService:
    """Registration and ingestion on top of a Storage handle."""

    def __init__(self, storage: Storage):
        self.storage = storage

    def register_device(self, unique_id: str) -> tuple[User, bool]:
        """
        Get the user for a device, creating it on first contact.

        Calling this twice with the same unique_id returns the same key
        and never creates a second user.

        Args:
            unique_id: Device identifier (already checked to be non-empty)

        Returns:
            (user, created) - created is False for a known device
        """
        user = self.storage.find_user_by_unique_id(unique_id)
        if user is not None:
            logger.info(f"[AUTH] {unique_id} already registered, returning existing key")
            return user, False

        new_user = User(unique_id=unique_id, api_key=generate_api_key())
        stored = self.storage.create_user(new_user)
        created = stored.api_key == new_user.api_key
        if created:
            logger.info(f"[AUTH] Registered {unique_id} (key {mask_key(stored.api_key)})")
        return stored, created

    def authenticate(self, api_key: str) -> Optional[User]:
        """Return the user owning this key, or None if nobody does."""
        user = self.storage.find_user_by_api_key(api_key)
        if user is None:
            logger.warning(f"[DATA] Rejected unknown API key {mask_key(api_key)}")
        return user

    def record_signal(self, user: User, timestamp: str, pin_state: str) -> SignalReading:
        """
        Save one reading for a user.

        Raises:
            pydantic.ValidationError: If pin_state is not HIGH or LOW
        """
        reading = SignalReading(user_id=user.id, timestamp=timestamp, pin_state=pin_state)
        stored = self.storage.insert_signal_reading(reading)
        logger.info(f"[DATA] {user.unique_id} {reading.pin_state.value} at {timestamp}")
        return stored

