"""Admin moderation: users, role requests, properties, bookings, support inbox, settings."""
from typing import Any

from fastapi import APIRouter, Body, Depends

from ownbroker.dependencies import (
    get_bookings,
    get_contact_messages,
    get_properties,
    get_role_requests,
    get_settings_store,
    get_user_moderation,
    require_admin,
)
from ownbroker.models.booking import BookingStatus
from ownbroker.models.contact_message import ContactMessageStatus
from ownbroker.models.property import PropertyStatus
from ownbroker.models.role_request import RoleRequestStatus
from ownbroker.models.user import UserRole, UserStatus
from ownbroker.schemas import (
    BookingResponse,
    ContactMessageResponse,
    ContactReply,
    DashboardStats,
    PlatformSettings,
    PropertyResponse,
    RejectWithReason,
    RoleChange,
    RoleRequestDecision,
    RoleRequestResponse,
    SettingsUpdateResult,
    UserResponse,
)
from ownbroker.services.bookings import BookingWorkflow
from ownbroker.services.contact_messages import ContactMessageService
from ownbroker.services.properties import PropertyWorkflow
from ownbroker.services.role_requests import RoleRequestWorkflow
from ownbroker.services.settings_store import SettingsStore
from ownbroker.services.users import UserModeration

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(users: UserModeration = Depends(get_user_moderation)):
    return users.dashboard_stats()


# --- Users ---

@router.get("/users", response_model=list[UserResponse])
def list_users(
    role: UserRole | None = None,
    status: UserStatus | None = None,
    users: UserModeration = Depends(get_user_moderation),
):
    return users.list_users(role=role, status=status)


@router.post("/users/{user_id}/toggle-suspension", response_model=UserResponse)
def toggle_suspension(user_id: str, users: UserModeration = Depends(get_user_moderation)):
    return users.toggle_suspension(user_id)


@router.put("/users/{user_id}/role", response_model=UserResponse)
def change_role(user_id: str, data: RoleChange, users: UserModeration = Depends(get_user_moderation)):
    return users.change_role(user_id, data.role)


@router.delete("/users/{user_id}")
def delete_user(user_id: str, users: UserModeration = Depends(get_user_moderation)):
    users.delete(user_id)
    return {"status": "ok"}


# --- Role requests ---

@router.get("/role-requests", response_model=list[RoleRequestResponse])
def list_role_requests(
    status: RoleRequestStatus | None = None,
    role_requests: RoleRequestWorkflow = Depends(get_role_requests),
):
    return role_requests.list_requests(status=status)


@router.post("/role-requests/{request_id}/approve", response_model=RoleRequestResponse)
def approve_role_request(
    request_id: int,
    data: RoleRequestDecision,
    role_requests: RoleRequestWorkflow = Depends(get_role_requests),
):
    return role_requests.approve(request_id, data.user_id, data.admin_notes)


@router.post("/role-requests/{request_id}/reject", response_model=RoleRequestResponse)
def reject_role_request(
    request_id: int,
    data: RoleRequestDecision,
    role_requests: RoleRequestWorkflow = Depends(get_role_requests),
):
    return role_requests.reject(request_id, data.user_id, data.admin_notes or "")


# --- Properties ---

@router.get("/properties", response_model=list[PropertyResponse])
def list_properties(
    status: PropertyStatus | None = None,
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.list_properties(status=status)


@router.post("/properties/{property_id}/approve", response_model=PropertyResponse)
def approve_property(property_id: str, properties: PropertyWorkflow = Depends(get_properties)):
    return properties.approve(property_id)


@router.post("/properties/{property_id}/reject", response_model=PropertyResponse)
def reject_property(
    property_id: str,
    data: RejectWithReason,
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.reject(property_id, data.reason)


@router.delete("/properties/{property_id}")
def delete_property(property_id: str, properties: PropertyWorkflow = Depends(get_properties)):
    properties.delete(property_id)
    return {"status": "ok"}


# --- Bookings ---

@router.get("/bookings", response_model=list[BookingResponse])
def list_bookings(
    status: BookingStatus | None = None,
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.list_bookings(status=status)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(booking_id: str, bookings: BookingWorkflow = Depends(get_bookings)):
    return bookings.admin_cancel(booking_id)


@router.delete("/bookings/{booking_id}")
def delete_booking(booking_id: str, bookings: BookingWorkflow = Depends(get_bookings)):
    bookings.delete(booking_id)
    return {"status": "ok"}


# --- Support inbox ---

@router.get("/messages", response_model=list[ContactMessageResponse])
def list_messages(
    status: ContactMessageStatus | None = None,
    messages: ContactMessageService = Depends(get_contact_messages),
):
    return messages.list_messages(status=status)


@router.post("/messages/{message_id}/seen", response_model=ContactMessageResponse)
def mark_message_seen(message_id: int, messages: ContactMessageService = Depends(get_contact_messages)):
    return messages.mark_seen(message_id)


@router.post("/messages/{message_id}/reply", response_model=ContactMessageResponse)
def reply_to_message(
    message_id: int,
    data: ContactReply,
    messages: ContactMessageService = Depends(get_contact_messages),
):
    return messages.reply(message_id, data.reply_text)


@router.delete("/messages/{message_id}")
def delete_message(message_id: int, messages: ContactMessageService = Depends(get_contact_messages)):
    messages.delete(message_id)
    return {"status": "ok"}


# --- Platform settings ---

@router.get("/settings", response_model=PlatformSettings, response_model_by_alias=True)
def get_platform_settings(store: SettingsStore = Depends(get_settings_store)):
    return store.get_all()


@router.patch("/settings", response_model=SettingsUpdateResult, response_model_by_alias=True)
def update_platform_settings(
    patch: dict[str, Any] = Body(...),
    store: SettingsStore = Depends(get_settings_store),
):
    """Partial update; accepts camelCase keys or snake_case names. Unknown keys are ignored."""
    changed = store.update_partial(patch)
    return SettingsUpdateResult(changed=changed, settings=store.get_all())
