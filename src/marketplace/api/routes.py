"""FastAPI routes for the Marketplace — users, couriers, orders, ledger, inbox.

The caller is identified by the ``X-Auth-Subject`` header set by the auth
gateway in front of this service. Routes translate requests into commands or
read-function calls; every authorisation rule lives in the domain.
"""

import json

from fastapi import APIRouter, Depends, Header, Query, Request, Response

from marketplace.access.guard import resolve_subject
from marketplace.account.management import ChangeUserRole, SetUserEnabled, UpdateProfile
from marketplace.account.queries import get_current_user, list_users
from marketplace.account.registration import RegisterUser
from marketplace.api.schemas import (
    CancelOrderRequest,
    ChangeRoleRequest,
    CompleteDeliveryRequest,
    ContactMessageResponse,
    CourierProfileResponse,
    CreateOrderRequest,
    IdResponse,
    MarkAllReadResponse,
    NotificationResponse,
    OrderResponse,
    RegisterCourierRequest,
    RegisterUserRequest,
    RejectDepositRequest,
    RequestDepositRequest,
    ReviewApplicationRequest,
    SetEnabledRequest,
    StatusResponse,
    SubmitContactRequest,
    TransactionResponse,
    UnreadCountResponse,
    UpdateCourierRequest,
    UpdateOrderStatusRequest,
    UpdateProfileRequest,
    UploadResponse,
    UserResponse,
)
from marketplace.api.schemas import LocationSchema
from marketplace.contact.queries import list_contact_messages
from marketplace.contact.submission import SubmitContactMessage
from marketplace.courier.onboarding import (
    RegisterCourier,
    RemoveCourierProfile,
    ReviewCourierApplication,
    UpdateCourierDetails,
    UpdateCourierLocation,
)
from marketplace.courier.queries import get_courier_profile, get_my_courier_profile, list_courier_applications
from marketplace.errors import NotFound, Unauthenticated
from marketplace.ledger.deposit import ApproveDeposit, RejectDeposit, RequestDeposit
from marketplace.ledger.queries import get_pending_transactions, get_user_transactions
from marketplace.notification.queries import get_notifications, get_unread_count
from marketplace.notification.reading import DeleteNotification, MarkAllNotificationsRead, MarkNotificationRead
from marketplace.order.acceptance import AcceptOrder
from marketplace.order.cancellation import CancelOrder
from marketplace.order.creation import CreateOrder
from marketplace.order.delivery import CompleteDelivery
from marketplace.order.queries import (
    get_all_orders,
    get_available_orders,
    get_courier_orders,
    get_order,
    get_recent_orders,
    get_user_orders,
    search_orders,
)
from marketplace.order.status import UpdateOrderStatus
from marketplace.projections.dashboards import get_client_order_stats, get_courier_stats, get_platform_stats
from marketplace.storage import get_blob_store
from marketplace.utils.commands import dispatch


# ---------------------------------------------------------------------------
# Caller resolution
# ---------------------------------------------------------------------------
def current_caller_id(x_auth_subject: str = Header(default="")) -> str | None:
    """Map the auth subject header to the caller's user id; None when unknown."""
    user = resolve_subject(x_auth_subject)
    return str(user.id) if user else None


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------
def _location(value):
    return LocationSchema(latitude=value.latitude, longitude=value.longitude) if value else None


def user_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        balance=user.balance or 0.0,
        avatar_url=get_blob_store().url_for(user.avatar_ref),
        is_enabled=user.is_enabled,
        is_verified=user.is_verified,
        registered_at=user.registered_at,
    )


def order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        user_id=str(order.user_id),
        courier_id=str(order.courier_id) if order.courier_id else None,
        item=order.item,
        pickup_address=order.pickup_address,
        delivery_address=order.delivery_address,
        pickup_location=_location(order.pickup_location),
        delivery_location=_location(order.delivery_location),
        distance_km=order.distance_km,
        total_amount=order.total_amount,
        delivery_fee=order.delivery_fee,
        rating=order.rating.score if order.rating else None,
        review_message=order.review_message,
        accepted_at=order.accepted_at,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
        created_at=order.created_at,
    )


def notification_response(notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(notification.id),
        notification_type=notification.notification_type,
        title=notification.title,
        message=notification.message,
        read=notification.read,
        action_url=notification.action_url,
        order_id=str(notification.order_id) if notification.order_id else None,
        courier_id=str(notification.courier_id) if notification.courier_id else None,
        amount=notification.amount,
        transaction_id=str(notification.transaction_id) if notification.transaction_id else None,
        rating=notification.rating,
        created_at=notification.created_at,
    )


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("/register", status_code=201, response_model=IdResponse)
async def register_user(body: RegisterUserRequest, x_auth_subject: str = Header(default="")) -> IdResponse:
    """Register the authenticated subject on first sign-in. Idempotent."""
    if not x_auth_subject:
        raise Unauthenticated("Unauthenticated")
    command = RegisterUser(
        external_id=x_auth_subject,
        name=body.name,
        email=body.email,
        phone=body.phone,
    )
    result = dispatch(command)
    return IdResponse(id=result)


@user_router.get("/me", response_model=UserResponse)
async def read_current_user(caller_id: str | None = Depends(current_caller_id)) -> UserResponse:
    return user_response(get_current_user(caller_id))


@user_router.put("/me", response_model=StatusResponse)
async def update_profile(body: UpdateProfileRequest, caller_id: str | None = Depends(current_caller_id)):
    command = UpdateProfile(caller_id=caller_id, name=body.name, phone=body.phone, avatar_ref=body.avatar_ref)
    dispatch(command)
    return StatusResponse()


@user_router.get("", response_model=list[UserResponse])
async def read_users(
    role: str | None = None,
    limit: int | None = None,
    caller_id: str | None = Depends(current_caller_id),
) -> list[UserResponse]:
    return [user_response(user) for user in list_users(caller_id, role=role, limit=limit)]


@user_router.put("/{user_id}/role", response_model=StatusResponse)
async def change_user_role(
    user_id: str, body: ChangeRoleRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    dispatch(ChangeUserRole(caller_id=caller_id, user_id=user_id, role=body.role))
    return StatusResponse()


@user_router.put("/{user_id}/enabled", response_model=StatusResponse)
async def set_user_enabled(
    user_id: str, body: SetEnabledRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    command = SetUserEnabled(caller_id=caller_id, user_id=user_id, enabled=body.enabled)
    dispatch(command)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Courier Router
# ---------------------------------------------------------------------------
courier_router = APIRouter(prefix="/couriers", tags=["couriers"])


@courier_router.post("", status_code=201, response_model=IdResponse)
async def register_courier(
    body: RegisterCourierRequest, caller_id: str | None = Depends(current_caller_id)
) -> IdResponse:
    command = RegisterCourier(
        caller_id=caller_id,
        name=body.name,
        phone=body.phone,
        address=body.address,
        national_id_code=body.national_id_code,
        national_id_ref=body.national_id_ref,
        avatar_ref=body.avatar_ref,
        vehicle_type=body.vehicle_type,
        vehicle_number=body.vehicle_number,
        vehicle_image_refs=json.dumps(body.vehicle_image_refs),
    )
    result = dispatch(command)
    return IdResponse(id=result)


@courier_router.get("/me", response_model=CourierProfileResponse)
async def read_my_courier_profile(caller_id: str | None = Depends(current_caller_id)):
    return CourierProfileResponse(**get_my_courier_profile(caller_id))


@courier_router.put("/me", response_model=StatusResponse)
async def update_courier_details(
    body: UpdateCourierRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    changes = body.model_dump(exclude_none=True)
    if "vehicle_image_refs" in changes:
        changes["vehicle_image_refs"] = json.dumps(changes["vehicle_image_refs"])
    dispatch(UpdateCourierDetails(caller_id=caller_id, **changes))
    return StatusResponse()


@courier_router.put("/me/location", response_model=StatusResponse)
async def update_courier_location(
    body: LocationSchema, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    command = UpdateCourierLocation(caller_id=caller_id, latitude=body.latitude, longitude=body.longitude)
    dispatch(command)
    return StatusResponse()


@courier_router.get("/applications", response_model=list[CourierProfileResponse])
async def read_courier_applications(
    status: str | None = "pending",
    limit: int | None = None,
    caller_id: str | None = Depends(current_caller_id),
):
    return [CourierProfileResponse(**view) for view in list_courier_applications(caller_id, status, limit)]


@courier_router.get("/{courier_profile_id}", response_model=CourierProfileResponse)
async def read_courier_profile(courier_profile_id: str, caller_id: str | None = Depends(current_caller_id)):
    return CourierProfileResponse(**get_courier_profile(caller_id, courier_profile_id))


@courier_router.put("/{courier_profile_id}/review", response_model=StatusResponse)
async def review_courier_application(
    courier_profile_id: str,
    body: ReviewApplicationRequest,
    caller_id: str | None = Depends(current_caller_id),
) -> StatusResponse:
    command = ReviewCourierApplication(
        caller_id=caller_id,
        courier_profile_id=courier_profile_id,
        decision=body.decision,
    )
    dispatch(command)
    return StatusResponse()


@courier_router.delete("/{courier_profile_id}", response_model=StatusResponse)
async def remove_courier_profile(
    courier_profile_id: str, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    dispatch(RemoveCourierProfile(caller_id=caller_id, courier_profile_id=courier_profile_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=IdResponse)
async def create_order(body: CreateOrderRequest, caller_id: str | None = Depends(current_caller_id)) -> IdResponse:
    command = CreateOrder(
        caller_id=caller_id,
        item=body.item,
        pickup_address=body.pickup_address,
        delivery_address=body.delivery_address,
        pickup_location=body.pickup_location.model_dump_json() if body.pickup_location else None,
        delivery_location=body.delivery_location.model_dump_json() if body.delivery_location else None,
        total_amount=body.total_amount,
        distance_km=body.distance_km,
    )
    result = dispatch(command)
    return IdResponse(id=result)


@order_router.get("", response_model=list[OrderResponse])
async def read_all_orders(
    status: str | None = None,
    limit: int | None = None,
    caller_id: str | None = Depends(current_caller_id),
):
    return [order_response(order) for order in get_all_orders(caller_id, status=status, limit=limit)]


@order_router.get("/available", response_model=list[OrderResponse])
async def read_available_orders(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [order_response(order) for order in get_available_orders(caller_id, limit=limit)]


@order_router.get("/mine", response_model=list[OrderResponse])
async def read_my_orders(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [order_response(order) for order in get_user_orders(caller_id, limit=limit)]


@order_router.get("/assigned", response_model=list[OrderResponse])
async def read_assigned_orders(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [order_response(order) for order in get_courier_orders(caller_id, limit=limit)]


@order_router.get("/recent", response_model=list[OrderResponse])
async def read_recent_orders(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [order_response(order) for order in get_recent_orders(caller_id, limit=limit)]


@order_router.get("/search", response_model=list[OrderResponse])
async def search_order_numbers(
    term: str = Query(...),
    limit: int | None = None,
    caller_id: str | None = Depends(current_caller_id),
):
    return [order_response(order) for order in search_orders(caller_id, term, limit=limit)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: str, caller_id: str | None = Depends(current_caller_id)) -> OrderResponse:
    return order_response(get_order(caller_id, order_id))


@order_router.put("/{order_id}/accept", response_model=StatusResponse)
async def accept_order(order_id: str, caller_id: str | None = Depends(current_caller_id)) -> StatusResponse:
    dispatch(AcceptOrder(caller_id=caller_id, order_id=order_id))
    return StatusResponse()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    command = UpdateOrderStatus(caller_id=caller_id, order_id=order_id, status=body.status)
    dispatch(command)
    return StatusResponse()


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    command = CancelOrder(caller_id=caller_id, order_id=order_id, reason=body.reason)
    dispatch(command)
    return StatusResponse()


@order_router.put("/{order_id}/deliver", response_model=StatusResponse)
async def complete_delivery(
    order_id: str, body: CompleteDeliveryRequest, caller_id: str | None = Depends(current_caller_id)
) -> StatusResponse:
    command = CompleteDelivery(
        caller_id=caller_id,
        order_id=order_id,
        rating=body.rating,
        review_message=body.review_message,
    )
    dispatch(command)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Transaction Router
# ---------------------------------------------------------------------------
transaction_router = APIRouter(prefix="/transactions", tags=["transactions"])


@transaction_router.post("/deposits", status_code=201, response_model=IdResponse)
async def request_deposit(
    body: RequestDepositRequest, caller_id: str | None = Depends(current_caller_id)
) -> IdResponse:
    command = RequestDeposit(
        caller_id=caller_id,
        amount=body.amount,
        description=body.description,
        proof_ref=body.proof_ref,
    )
    result = dispatch(command)
    return IdResponse(id=result)


@transaction_router.get("/mine", response_model=list[TransactionResponse])
async def read_my_transactions(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [TransactionResponse(**view) for view in get_user_transactions(caller_id, limit=limit)]


@transaction_router.get("/pending", response_model=list[TransactionResponse])
async def read_pending_transactions(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [TransactionResponse(**view) for view in get_pending_transactions(caller_id, limit=limit)]


@transaction_router.put("/{transaction_id}/approve", response_model=StatusResponse)
async def approve_deposit(transaction_id: str, caller_id: str | None = Depends(current_caller_id)):
    dispatch(ApproveDeposit(caller_id=caller_id, transaction_id=transaction_id))
    return StatusResponse()


@transaction_router.put("/{transaction_id}/reject", response_model=StatusResponse)
async def reject_deposit(
    transaction_id: str, body: RejectDepositRequest, caller_id: str | None = Depends(current_caller_id)
):
    command = RejectDeposit(caller_id=caller_id, transaction_id=transaction_id, reason=body.reason)
    dispatch(command)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("", response_model=list[NotificationResponse])
async def read_notifications(limit: int | None = None, caller_id: str | None = Depends(current_caller_id)):
    return [notification_response(n) for n in get_notifications(caller_id, limit=limit)]


@notification_router.get("/unread-count", response_model=UnreadCountResponse)
async def read_unread_count(caller_id: str | None = Depends(current_caller_id)) -> UnreadCountResponse:
    return UnreadCountResponse(unread=get_unread_count(caller_id))


@notification_router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    batch_size: int | None = None, caller_id: str | None = Depends(current_caller_id)
) -> MarkAllReadResponse:
    result = dispatch(MarkAllNotificationsRead(caller_id=caller_id, batch_size=batch_size))
    return MarkAllReadResponse(**result)


@notification_router.put("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(notification_id: str, caller_id: str | None = Depends(current_caller_id)):
    command = MarkNotificationRead(caller_id=caller_id, notification_id=notification_id)
    dispatch(command)
    return StatusResponse()


@notification_router.delete("/{notification_id}", response_model=StatusResponse)
async def delete_notification(notification_id: str, caller_id: str | None = Depends(current_caller_id)):
    command = DeleteNotification(caller_id=caller_id, notification_id=notification_id)
    dispatch(command)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Upload Router
# ---------------------------------------------------------------------------
upload_router = APIRouter(prefix="/uploads", tags=["uploads"])


@upload_router.post("", status_code=201, response_model=UploadResponse)
async def upload_blob(request: Request, caller_id: str | None = Depends(current_caller_id)) -> UploadResponse:
    """Store the raw request body; the returned ``ref`` goes into later commands."""
    get_current_user(caller_id)
    content = await request.body()
    content_type = request.headers.get("content-type", "application/octet-stream")
    store = get_blob_store()
    stored = store.put(content, content_type)
    return UploadResponse(
        ref=stored.ref,
        url=store.url_for(stored.ref),
        content_type=stored.content_type,
        size=stored.size,
    )


@upload_router.get("/{ref}")
async def download_blob(ref: str) -> Response:
    blob = get_blob_store().get(ref)
    if blob is None:
        raise NotFound("Upload not found")
    content, content_type = blob
    return Response(content=content, media_type=content_type)


# ---------------------------------------------------------------------------
# Stats Router
# ---------------------------------------------------------------------------
stats_router = APIRouter(prefix="/stats", tags=["stats"])


@stats_router.get("/platform")
async def read_platform_stats(caller_id: str | None = Depends(current_caller_id)) -> dict:
    return get_platform_stats(caller_id)


@stats_router.get("/courier")
async def read_courier_stats(caller_id: str | None = Depends(current_caller_id)) -> dict:
    return get_courier_stats(caller_id)


@stats_router.get("/client")
async def read_client_stats(caller_id: str | None = Depends(current_caller_id)) -> dict:
    return get_client_order_stats(caller_id)


# ---------------------------------------------------------------------------
# Contact Router
# ---------------------------------------------------------------------------
contact_router = APIRouter(prefix="/contact", tags=["contact"])


@contact_router.post("", status_code=201, response_model=IdResponse)
async def submit_contact_message(body: SubmitContactRequest) -> IdResponse:
    """Public contact form; no caller is required."""
    command = SubmitContactMessage(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        message=body.message,
    )
    return IdResponse(id=dispatch(command))


@contact_router.get("", response_model=list[ContactMessageResponse])
async def read_contact_messages(
    limit: int | None = None, caller_id: str | None = Depends(current_caller_id)
) -> list[ContactMessageResponse]:
    return [
        ContactMessageResponse(
            id=str(contact_message.id),
            first_name=contact_message.first_name,
            last_name=contact_message.last_name,
            email=contact_message.email,
            message=contact_message.message,
            submitted_at=contact_message.submitted_at,
        )
        for contact_message in list_contact_messages(caller_id, limit=limit)
    ]
