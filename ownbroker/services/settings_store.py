"""Typed platform settings over the platformSettings key/value table.

Every key has one definition (storage key, attribute name, kind, default). Values are
stored as text: bools as "true"/"false", numbers as decimal strings. Reads merge the
stored rows onto the defaults, so callers always get a complete PlatformSettings.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping

from ownbroker.database import Database
from ownbroker.errors import InvalidRequest
from ownbroker.models.platform_setting import PlatformSetting
from ownbroker.schemas.settings import PlatformSettings

logger = logging.getLogger(__name__)


class SettingKind(str, enum.Enum):
    string = "string"
    bool = "bool"
    number = "number"


@dataclass(frozen=True)
class SettingDefinition:
    key: str  # storage key (camelCase)
    attr: str  # PlatformSettings attribute (snake_case)
    kind: SettingKind
    default: Any

    def encode(self, value: Any) -> str:
        """Validate `value` for this kind and return its stored text form."""
        if self.kind is SettingKind.bool:
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, str) and value.strip().lower() in ("true", "false"):
                return value.strip().lower()
            raise InvalidRequest(f"Setting '{self.key}' must be a boolean.")
        if self.kind is SettingKind.number:
            if isinstance(value, bool):
                raise InvalidRequest(f"Setting '{self.key}' must be a number.")
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise InvalidRequest(f"Setting '{self.key}' must be a number.") from None
            if not math.isfinite(number):
                raise InvalidRequest(f"Setting '{self.key}' must be a finite number.")
            return str(number)
        if not isinstance(value, str):
            raise InvalidRequest(f"Setting '{self.key}' must be a string.")
        return value

    def decode(self, raw: str) -> Any:
        """Parse stored text. Raises ValueError when the text is not valid for this kind."""
        if self.kind is SettingKind.bool:
            lowered = raw.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        if self.kind is SettingKind.number:
            number = float(raw)
            if not math.isfinite(number):
                raise ValueError(f"not a finite number: {raw!r}")
            return number
        return raw


SETTING_DEFINITIONS: tuple[SettingDefinition, ...] = (
    SettingDefinition("platformName", "platform_name", SettingKind.string, "OwnBroker Simplified"),
    SettingDefinition("logoUrl", "logo_url", SettingKind.string, "/images/logo.png"),
    SettingDefinition("maintenanceMode", "maintenance_mode", SettingKind.bool, False),
    SettingDefinition("allowNewRegistrations", "allow_new_registrations", SettingKind.bool, True),
    SettingDefinition("defaultBookingFee", "default_booking_fee", SettingKind.number, 5.0),
    SettingDefinition("adminEmail", "admin_email", SettingKind.string, "admin@ownbroker.com"),
    SettingDefinition(
        "termsAndConditions",
        "terms_and_conditions",
        SettingKind.string,
        "Please refer to the /terms page for the full terms and conditions.",
    ),
)

_BY_KEY = {d.key: d for d in SETTING_DEFINITIONS}
_BY_ATTR = {d.attr: d for d in SETTING_DEFINITIONS}


def find_definition(name: str) -> SettingDefinition | None:
    """Look up by storage key or by attribute name."""
    return _BY_KEY.get(name) or _BY_ATTR.get(name)


def default_rows() -> dict[str, str]:
    """Encoded defaults keyed by storage key (used for seeding)."""
    return {d.key: d.encode(d.default) for d in SETTING_DEFINITIONS}


class SettingsStore:
    def __init__(self, db: Database):
        self.db = db

    def get_all(self) -> PlatformSettings:
        with self.db.session() as session:
            stored = {row.key: row.value for row in session.query(PlatformSetting).all()}
        values = {}
        for definition in SETTING_DEFINITIONS:
            raw = stored.get(definition.key)
            if raw is None:
                values[definition.attr] = definition.default
                continue
            try:
                values[definition.attr] = definition.decode(raw)
            except ValueError:
                logger.warning(
                    "[Settings] Stored value for %s is invalid (%r); using default %r",
                    definition.key,
                    raw,
                    definition.default,
                )
                values[definition.attr] = definition.default
        return PlatformSettings(**values)

    def get(self, name: str) -> Any:
        definition = find_definition(name)
        if definition is None:
            raise InvalidRequest(f"Unknown setting '{name}'.")
        return getattr(self.get_all(), definition.attr)

    def update_partial(self, patch: Mapping[str, Any]) -> int:
        """Apply only the provided keys. Returns how many stored values actually changed.

        Unknown keys and None values are ignored. All values are validated before any write,
        and all writes share one transaction.
        """
        encoded: dict[str, tuple[SettingDefinition, str]] = {}
        for name, value in (patch or {}).items():
            if value is None:
                continue
            definition = find_definition(name)
            if definition is None:
                logger.debug("[Settings] Ignoring unknown key %s", name)
                continue
            encoded[definition.key] = (definition, definition.encode(value))
        if not encoded:
            return 0

        changed = 0
        with self.db.session() as session:
            for key, (definition, new_value) in encoded.items():
                row = session.get(PlatformSetting, key)
                if row is None:
                    # Missing row reads as the default, so writing the default is not a change
                    if new_value != definition.encode(definition.default):
                        changed += 1
                    session.add(PlatformSetting(key=key, value=new_value))
                    continue
                if row.value != new_value:
                    row.value = new_value
                    changed += 1
        if changed:
            logger.info("[Settings] Updated %d setting(s): %s", changed, ", ".join(sorted(encoded)))
        return changed
