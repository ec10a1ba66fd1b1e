"""
Registration API Router
=======================

A device calls this once (on every boot is fine too) to get its API key.

Endpoint:
  POST /auth  - Send your unique_id, get back your api_key.

The same unique_id always gets the same key back. The first call creates
the user; every later call just looks it up.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from pin_telemetry.models import ErrorResponse, RegisterRequest, RegisterResponse
from pin_telemetry.services import TelemetryService
from pin_telemetry.storage import Storage, get_storage

router = APIRouter(tags=["auth"])


def get_telemetry_service(storage: Storage = Depends(get_storage)) -> TelemetryService:
    """Build the service around the app's storage handle."""
    return TelemetryService(storage)


@router.post(
    "/auth",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def register_device(
    body: Optional[RegisterRequest] = Body(None),
    service: TelemetryService = Depends(get_telemetry_service),
):
    """
    Register a device (or look it up if it's already registered).

    **Body (JSON)**
    - unique_id (required): Something that identifies the device, like its MAC address.

    **Returns**
    - api_key: Put this in the `api-key` header when calling POST /data.
    """
    if body is None or not body.unique_id or not body.unique_id.strip():
        raise HTTPException(status_code=400, detail="Unique ID is required")

    user, _ = service.register_device(body.unique_id)
    return RegisterResponse(api_key=user.api_key)
