"""Property schemas."""
from datetime import datetime
from pydantic import BaseModel, field_validator
from ownbroker.models.property import Facing, PropertyStatus


class PropertyCreate(BaseModel):
    title: str
    description: str | None = None
    price: float
    city: str | None = None
    property_type: str | None = None
    image_url: str | None = None
    pano_image_url: str | None = None
    amenities: list[str] = []
    latitude: float | None = None
    longitude: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    balconies: int | None = None
    kitchen_available: bool = False
    hall_available: bool = False
    size: float | None = None
    floor_number: int | None = None
    total_floors: int | None = None
    facing: Facing | None = None
    gallery_images: list[str] = []
    tags: list[str] = []

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("title is required")
        return v

    @field_validator("price")
    @classmethod
    def check_price(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("price must be positive")
        return v

    @field_validator("facing", mode="before")
    @classmethod
    def blank_facing(cls, v):
        # Forms send "none" or "" for no selection
        if v in ("", "none"):
            return None
        return v


class PropertyUpdate(BaseModel):
    """All optional; only provided fields are updated."""
    title: str | None = None
    description: str | None = None
    price: float | None = None
    city: str | None = None
    property_type: str | None = None
    image_url: str | None = None
    pano_image_url: str | None = None
    amenities: list[str] | None = None
    latitude: float | None = None
    longitude: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    balconies: int | None = None
    kitchen_available: bool | None = None
    hall_available: bool | None = None
    size: float | None = None
    floor_number: int | None = None
    total_floors: int | None = None
    facing: Facing | None = None
    gallery_images: list[str] | None = None
    tags: list[str] | None = None

    @field_validator("price")
    @classmethod
    def check_price(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("price must be positive")
        return v


class PropertyResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str | None = None
    price: float
    city: str | None = None
    property_type: str | None = None
    image_url: str | None = None
    pano_image_url: str | None = None
    amenities: list[str] = []
    status: PropertyStatus
    latitude: float | None = None
    longitude: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    balconies: int | None = None
    kitchen_available: bool | None = None
    hall_available: bool | None = None
    size: float | None = None
    floor_number: int | None = None
    total_floors: int | None = None
    facing: Facing | None = None
    gallery_images: list[str] = []
    tags: list[str] = []
    created_at: datetime | None = None

    @field_validator("amenities", "gallery_images", "tags", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []

    class Config:
        from_attributes = True


class RejectWithReason(BaseModel):
    reason: str
