"""
All SQLAlchemy models. Schema is the source of truth for new stores.
SchemaManager.apply() creates every table and index declared here.
"""
from ownbroker.models.user import User, UserRole, UserStatus
from ownbroker.models.property import Property, PropertyStatus, Facing
from ownbroker.models.booking import Booking, BookingStatus
from ownbroker.models.contact_message import ContactMessage, ContactMessageStatus
from ownbroker.models.role_request import RoleRequest, RoleRequestStatus
from ownbroker.models.notification import Notification, NotificationKind, NotificationStatus
from ownbroker.models.platform_setting import PlatformSetting

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Property",
    "PropertyStatus",
    "Facing",
    "Booking",
    "BookingStatus",
    "ContactMessage",
    "ContactMessageStatus",
    "RoleRequest",
    "RoleRequestStatus",
    "Notification",
    "NotificationKind",
    "NotificationStatus",
    "PlatformSetting",
]
