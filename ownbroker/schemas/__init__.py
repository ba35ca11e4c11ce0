from ownbroker.schemas.user import (
    UserCreate,
    UserResponse,
    RoleChange,
    DashboardStats,
    ProfileUpdate,
    OwnerDashboardStats,
    UserBookingsSummary,
)
from ownbroker.schemas.property import PropertyCreate, PropertyUpdate, PropertyResponse, RejectWithReason
from ownbroker.schemas.booking import BookingCreate, BookingResponse
from ownbroker.schemas.role_request import RoleRequestCreate, RoleRequestDecision, RoleRequestResponse
from ownbroker.schemas.notification import NotificationResponse
from ownbroker.schemas.contact import ContactMessageCreate, ContactReply, ContactMessageResponse
from ownbroker.schemas.settings import PlatformSettings, SettingsUpdateResult
