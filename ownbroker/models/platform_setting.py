"""Key/value platform settings. Values are strings; typing happens in SettingsStore."""
from sqlalchemy import Column, String, Text
from ownbroker.database import Base


class PlatformSetting(Base):
    __tablename__ = "platformSettings"

    key = Column("key", String, primary_key=True)
    value = Column("value", Text, nullable=True)
