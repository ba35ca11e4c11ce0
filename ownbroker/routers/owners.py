"""Owner endpoints: own listings and booking decisions."""
from fastapi import APIRouter, Depends

from ownbroker.dependencies import get_bookings, get_properties, require_owner
from ownbroker.models.booking import BookingStatus
from ownbroker.models.user import User
from ownbroker.schemas import BookingResponse, OwnerDashboardStats, PropertyCreate, PropertyResponse, PropertyUpdate
from ownbroker.services.bookings import BookingWorkflow
from ownbroker.services.properties import PropertyWorkflow

router = APIRouter(prefix="/owners", tags=["owners"])


@router.get("/stats", response_model=OwnerDashboardStats)
def owner_stats(
    current_user: User = Depends(require_owner),
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.owner_dashboard_stats(current_user.uid)


@router.get("/properties", response_model=list[PropertyResponse])
def my_properties(
    current_user: User = Depends(require_owner),
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.list_properties(owner_id=current_user.uid)


@router.post("/properties", response_model=PropertyResponse, status_code=201)
def create_property(
    data: PropertyCreate,
    current_user: User = Depends(require_owner),
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.create(current_user.uid, data.model_dump())


@router.put("/properties/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: str,
    data: PropertyUpdate,
    current_user: User = Depends(require_owner),
    properties: PropertyWorkflow = Depends(get_properties),
):
    return properties.update(property_id, current_user.uid, data.model_dump(exclude_unset=True))


@router.delete("/properties/{property_id}")
def delete_property(
    property_id: str,
    current_user: User = Depends(require_owner),
    properties: PropertyWorkflow = Depends(get_properties),
):
    properties.delete(property_id, owner_id=current_user.uid)
    return {"status": "ok"}


@router.get("/bookings", response_model=list[BookingResponse])
def bookings_for_my_properties(
    status: BookingStatus | None = None,
    current_user: User = Depends(require_owner),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.list_bookings(owner_id=current_user.uid, status=status)


@router.post("/bookings/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: str,
    current_user: User = Depends(require_owner),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.approve(booking_id, current_user.uid)


@router.post("/bookings/{booking_id}/reject", response_model=BookingResponse)
def reject_booking(
    booking_id: str,
    current_user: User = Depends(require_owner),
    bookings: BookingWorkflow = Depends(get_bookings),
):
    return bookings.reject(booking_id, current_user.uid)
