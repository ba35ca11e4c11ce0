"""Account endpoints: registration, role request, bookings, notifications; public listings."""
from fastapi import APIRouter, Depends

from ownbroker.dependencies import (
    get_bookings,
    get_current_user,
    get_notifier,
    get_properties,
    get_role_requests,
    get_user_moderation,
)
from ownbroker.errors import NotFound
from ownbroker.models.notification import NotificationStatus
from ownbroker.models.property import PropertyStatus
from ownbroker.models.user import User
from ownbroker.schemas import (
    BookingCreate,
    BookingResponse,
    NotificationResponse,
    ProfileUpdate,
    PropertyResponse,
    RoleRequestCreate,
    RoleRequestResponse,
    UserCreate,
    UserBookingsSummary,
    UserResponse,
)
from ownbroker.services.bookings import BookingWorkflow
from ownbroker.services.notifications import NotificationDispatcher
from ownbroker.services.properties import PropertyWorkflow
from ownbroker.services.role_requests import RoleRequestWorkflow
from ownbroker.services.users import UserModeration

router = APIRouter(tags=["users"])


@router.post("/users/register", response_model=UserResponse, status_code=201)
def register(data: UserCreate, users: UserModeration = Depends(get_user_moderation)):
    return users.register(data.name, data.email, data.password, mobile=data.mobile)


@router.get("/users/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/users/me", response_model=UserResponse)
def update_me(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    users: UserModeration = Depends(get_user_moderation),
):
    return users.update_profile(current_user.uid, data.name, data.mobile)


@router.post("/users/me/role-request", response_model=RoleRequestResponse, status_code=201)
def request_owner_role(
    data: RoleRequestCreate | None = None,
    current_user: User = Depends(get_current_user),
    role_requests: RoleRequestWorkflow = Depends(get_role_requests),
):
    return role_requests.submit(current_user.uid, message=data.message if data else None)


@router.get("/users/me/role-request", response_model=RoleRequestResponse)
def my_role_request(
    current_user: User = Depends(get_current_user),
    role_requests: RoleRequestWorkflow = Depends(get_role_requests),
):
    request = role_requests.get_for_user(current_user.uid)
    if request is None:
        raise NotFound("No role request on file.")
    return request


@router.get("/users/me/bookings", response_model=list[BookingResponse])
def my_bookings(
    current_user: User = Depends(get_current_user),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.list_bookings(user_id=current_user.uid)


@router.get("/users/me/bookings/summary", response_model=UserBookingsSummary)
def my_bookings_summary(
    current_user: User = Depends(get_current_user),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.user_bookings_summary(current_user.uid)


@router.post("/users/me/bookings", response_model=BookingResponse, status_code=201)
def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.request(current_user.uid, data.property_id, data.start_date, data.end_date)


@router.post("/users/me/bookings/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.cancel(booking_id, current_user.uid)


@router.get("/users/me/notifications", response_model=list[NotificationResponse])
def my_notifications(
    status: NotificationStatus | None = None,
    current_user: User = Depends(get_current_user),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    return notifier.list_for_user(current_user.uid, status=status)


@router.post("/users/me/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    return {"updated": notifier.mark_read(notification_id, current_user.uid)}


@router.post("/users/me/notifications/read-all")
def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    return {"updated": notifier.mark_all_read(current_user.uid)}


@router.get("/properties", response_model=list[PropertyResponse])
def browse_properties(properties: PropertyWorkflow = Depends(get_properties)):
    """Verified listings only."""
    return properties.list_properties(status=PropertyStatus.verified)


@router.get("/properties/{property_id}", response_model=PropertyResponse)
def property_detail(property_id: str, properties: PropertyWorkflow = Depends(get_properties)):
    prop = properties.get(property_id)
    if prop.status != PropertyStatus.verified.value:
        raise NotFound("Property not found.")
    return prop
