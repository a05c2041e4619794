"""Pydantic request/response schemas for the Marketplace API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. Business rules (rating range, positive amounts,
state preconditions) are enforced by the domain, not here.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LocationSchema(BaseModel):
    latitude: float
    longitude: float


class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str
    email: str
    phone: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Salma Idrissi",
                    "email": "salma@example.com",
                    "phone": "+212600000000",
                }
            ]
        }
    }


class UpdateProfileRequest(BaseModel):
    name: str
    phone: str | None = None
    avatar_ref: str | None = None


class ChangeRoleRequest(BaseModel):
    role: str


class SetEnabledRequest(BaseModel):
    enabled: bool


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    role: str
    balance: float
    avatar_url: str | None = None
    is_enabled: bool
    is_verified: bool
    registered_at: datetime | None = None


# ---------------------------------------------------------------------------
# Couriers
# ---------------------------------------------------------------------------
class RegisterCourierRequest(BaseModel):
    name: str
    phone: str
    address: str | None = None
    national_id_code: str | None = None
    national_id_ref: str | None = None
    avatar_ref: str | None = None
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    vehicle_image_refs: list[str] = Field(default_factory=list)


class UpdateCourierRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    national_id_code: str | None = None
    national_id_ref: str | None = None
    avatar_ref: str | None = None
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    vehicle_image_refs: list[str] | None = None


class ReviewApplicationRequest(BaseModel):
    decision: str


class CourierProfileResponse(BaseModel):
    id: str
    user_id: str
    name: str
    phone: str | None = None
    address: str | None = None
    national_id_code: str | None = None
    national_id_url: str | None = None
    avatar_url: str | None = None
    vehicle_type: str | None = None
    vehicle_number: str | None = None
    vehicle_image_urls: list[str] = Field(default_factory=list)
    application_status: str
    rating: float | None = None
    rating_count: int = 0
    total_deliveries: int = 0
    current_location: LocationSchema | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    item: str
    pickup_address: str
    delivery_address: str
    pickup_location: LocationSchema | None = None
    delivery_location: LocationSchema | None = None
    total_amount: float | None = None
    distance_km: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "item": "Documents envelope",
                    "pickup_address": "12 Rue Atlas, Casablanca",
                    "delivery_address": "7 Avenue Hassan II, Casablanca",
                    "pickup_location": {"latitude": 33.5731, "longitude": -7.5898},
                    "total_amount": 25.0,
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class CompleteDeliveryRequest(BaseModel):
    rating: int
    review_message: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    user_id: str
    courier_id: str | None = None
    item: str
    pickup_address: str
    delivery_address: str
    pickup_location: LocationSchema | None = None
    delivery_location: LocationSchema | None = None
    distance_km: float | None = None
    total_amount: float
    delivery_fee: float
    rating: int | None = None
    review_message: str | None = None
    accepted_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------
class RequestDepositRequest(BaseModel):
    amount: float
    description: str | None = None
    proof_ref: str | None = None


class RejectDepositRequest(BaseModel):
    reason: str | None = None


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    transaction_type: str
    amount: float
    status: str
    description: str | None = None
    order_id: str | None = None
    proof_url: str | None = None
    rejection_reason: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    user_name: str | None = None
    user_email: str | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(BaseModel):
    id: str
    notification_type: str
    title: str
    message: str
    read: bool
    action_url: str | None = None
    order_id: str | None = None
    courier_id: str | None = None
    amount: float | None = None
    transaction_id: str | None = None
    rating: int | None = None
    created_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkAllReadResponse(BaseModel):
    marked: int
    has_more: bool


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------
class UploadResponse(BaseModel):
    ref: str
    url: str | None = None
    content_type: str
    size: int


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------
class SubmitContactRequest(BaseModel):
    first_name: str
    last_name: str
    email: str
    message: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "first_name": "Hamza",
                    "last_name": "Benali",
                    "email": "hamza@example.com",
                    "message": "Do you deliver to Mohammedia?",
                }
            ]
        }
    }


class ContactMessageResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    message: str
    submitted_at: datetime | None = None
