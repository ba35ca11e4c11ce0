"""Property listings. Created pending; only moderation moves them on."""
from sqlalchemy import Column, Integer, String, Text, Float, Boolean, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func
from ownbroker.database import Base
from ownbroker.models.base import one_of
import enum


class PropertyStatus(str, enum.Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class Facing(str, enum.Enum):
    east = "East"
    west = "West"
    north = "North"
    south = "South"
    north_east = "North-East"
    north_west = "North-West"
    south_east = "South-East"
    south_west = "South-West"


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        one_of("status", PropertyStatus, "ck_properties_status"),
        one_of("facing", Facing, "ck_properties_facing"),
        Index("idx_properties_ownerId", "ownerId"),
        Index("idx_properties_status", "status"),
    )

    id = Column("id", String, primary_key=True)
    owner_id = Column("ownerId", String, ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)

    title = Column("title", String, nullable=False)
    description = Column("description", Text, nullable=True)
    price = Column("price", Float, nullable=False)
    city = Column("city", String, nullable=True)
    property_type = Column("propertyType", String, nullable=True)
    image_url = Column("imageUrl", String, nullable=True)
    pano_image_url = Column("panoImageUrl", String, nullable=True)
    amenities = Column("amenities", JSON, nullable=True)  # list of strings

    status = Column("status", String, nullable=False, default=PropertyStatus.pending.value, server_default=PropertyStatus.pending.value)

    latitude = Column("latitude", Float, nullable=True)
    longitude = Column("longitude", Float, nullable=True)
    bedrooms = Column("bedrooms", Integer, nullable=True)
    bathrooms = Column("bathrooms", Integer, nullable=True)
    balconies = Column("balconies", Integer, nullable=True)
    kitchen_available = Column("kitchenAvailable", Boolean, nullable=True)
    hall_available = Column("hallAvailable", Boolean, nullable=True)
    size = Column("size", Float, nullable=True)  # sq.ft
    floor_number = Column("floorNumber", Integer, nullable=True)
    total_floors = Column("totalFloors", Integer, nullable=True)
    facing = Column("facing", String, nullable=True)
    gallery_images = Column("galleryImages", JSON, nullable=True)
    tags = Column("tags", JSON, nullable=True)

    created_at = Column("createdAt", DateTime, server_default=func.now())

    owner = relationship("User", backref=backref("properties", passive_deletes=True))
