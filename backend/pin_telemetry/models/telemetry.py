"""
Telemetry Models
================
Pydantic models for device registration and signal readings.

This module defines all data structures used throughout the application:
- Request models: What the device sends to the backend
- Response models: What the backend returns to the device
- Document models: What we write to MongoDB

COLLECTIONS:
1. users       - One document per device (uniqueID -> apiKey)
2. signaldatas - One document per pin-state reading

The collection and field names (uniqueID, apiKey, userID, pinState) match
the documents written by the first version of this API, so an existing
esp32DB database can be reused as-is.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum

from bson import ObjectId


# =============================================================================
# ENUMS
# =============================================================================

class PinState(str, Enum):
    """
    Digital pin level reported by a device.

    Anything else is rejected before it reaches the database.
    """
    HIGH = "HIGH"
    LOW = "LOW"


# =============================================================================
# REQUEST MODELS - What the device sends to the backend
# =============================================================================

class RegisterRequest(BaseModel):
    """
    Request body for POST /auth.

    unique_id is optional at the model level so that a missing value
    gets our own 400 "Unique ID is required" instead of a generic
    validation error.

    Example Request:
        POST /auth
        {
            "unique_id": "dev-42"
        }
    """
    unique_id: Optional[str] = Field(
        None,
        description="Device identifier (MAC address, chip ID, serial...)",
        examples=["dev-42", "esp32-a4cf12"]
    )


class SignalDataRequest(BaseModel):
    """
    Request body for POST /data.

    The API key travels in the `api-key` header, not in the body.

    Example Request:
        POST /data
        api-key: 3f9c...
        {
            "timestamp": "2024-01-01T00:00:00Z",
            "pin_state": "HIGH"
        }
    """
    timestamp: Optional[str] = Field(
        None,
        description="When the reading was taken (as sent by the device)",
        examples=["2024-01-01T00:00:00Z"]
    )
    pin_state: Optional[str] = Field(
        None,
        description="Pin level: HIGH or LOW",
        examples=["HIGH", "LOW"]
    )


# =============================================================================
# RESPONSE MODELS - What the backend returns to the device
# =============================================================================

class RegisterResponse(BaseModel):
    """Returned by POST /auth, both for new and known devices."""
    api_key: str = Field(..., description="API key to send in the api-key header")


class MessageResponse(BaseModel):
    """Plain acknowledgment."""
    message: str = Field(..., description="Status message")


class ErrorResponse(BaseModel):
    """Every error response has this shape."""
    error: str = Field(..., description="What went wrong")


# =============================================================================
# DOCUMENT MODELS - What we store in MongoDB
# =============================================================================

class User(BaseModel):
    """
    One registered device.

    Fields:
        id: MongoDB _id (None until inserted)
        unique_id: Device-supplied identifier, unique across users
        api_key: Server-generated key, never changed after creation
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[ObjectId] = Field(None, description="MongoDB document id")
    unique_id: str = Field(..., min_length=1, description="Device identifier")
    api_key: str = Field(..., min_length=1, description="Issued API key")

    def to_document(self) -> dict:
        """Convert to the stored document shape (without _id)."""
        return {"uniqueID": self.unique_id, "apiKey": self.api_key}

    @classmethod
    def from_document(cls, document: dict) -> "User":
        """Build a User from a document read from the users collection."""
        return cls(
            id=document.get("_id"),
            unique_id=document["uniqueID"],
            api_key=document["apiKey"],
        )


class SignalReading(BaseModel):
    """
    One pin-state sample.

    user_id references the owning User's _id, not the device's unique_id.
    Building this model is where an unknown pin_state gets rejected.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[ObjectId] = Field(None, description="MongoDB document id")
    user_id: ObjectId = Field(..., description="_id of the owning user")
    timestamp: str = Field(..., min_length=1, description="Reading timestamp")
    pin_state: PinState = Field(..., description="HIGH or LOW")

    def to_document(self) -> dict:
        """Convert to the stored document shape (without _id)."""
        return {
            "userID": self.user_id,
            "timestamp": self.timestamp,
            "pinState": self.pin_state.value,
        }
