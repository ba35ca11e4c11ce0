"""Platform settings schemas (typed view over the key/value table)."""
from pydantic import BaseModel, Field


class PlatformSettings(BaseModel):
    """Complete, typed settings record. Field aliases are the stored keys."""
    platform_name: str = Field(alias="platformName")
    logo_url: str = Field(alias="logoUrl")
    maintenance_mode: bool = Field(alias="maintenanceMode")
    allow_new_registrations: bool = Field(alias="allowNewRegistrations")
    default_booking_fee: float = Field(alias="defaultBookingFee")
    admin_email: str = Field(alias="adminEmail")
    terms_and_conditions: str = Field(alias="termsAndConditions")

    class Config:
        populate_by_name = True


class SettingsUpdateResult(BaseModel):
    changed: int
    settings: PlatformSettings
