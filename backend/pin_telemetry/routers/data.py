"""
Signal Data API Router
======================

Devices POST their pin readings here, as often as they like.

Endpoint:
  POST /data  - Save one reading (timestamp + pin_state).

Auth: Header `api-key: <api_key>` (the key you got from POST /auth).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import ValidationError

from pin_telemetry.models import ErrorResponse, MessageResponse, SignalDataRequest
from pin_telemetry.routers.auth import get_telemetry_service
from pin_telemetry.services import TelemetryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


@router.post(
    "/data",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def save_signal_data(
    body: SignalDataRequest,
    api_key: Optional[str] = Header(None, alias="api-key"),
    service: TelemetryService = Depends(get_telemetry_service),
):
    """
    Save a pin-state reading for the device that owns the API key.

    **Headers**
    - `api-key`: The key returned by POST /auth.

    **Body (JSON)**
    - timestamp (required): When the reading was taken.
    - pin_state (required): "HIGH" or "LOW".
    """
    # Everything must be there before we touch the database
    if not api_key or not body.timestamp or not body.pin_state:
        raise HTTPException(status_code=400, detail="Missing required fields")

    user = service.authenticate(api_key)
    if user is None:
        raise HTTPException(status_code=403, detail="Invalid API key")

    try:
        service.record_signal(user, body.timestamp, body.pin_state)
    except ValidationError:
        logger.warning(f"[DATA] {user.unique_id} sent invalid pin_state {body.pin_state!r}")
        raise HTTPException(status_code=400, detail="Invalid pin_state: must be HIGH or LOW")

    return MessageResponse(message="Signal data saved successfully")
