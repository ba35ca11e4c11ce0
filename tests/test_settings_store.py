import pytest

from ownbroker.errors import InvalidRequest
from ownbroker.models.platform_setting import PlatformSetting
from ownbroker.services.settings_store import SETTING_DEFINITIONS


def _raw(db, key):
    with db.session() as session:
        row = session.get(PlatformSetting, key)
        return row.value if row else None


class TestGetAll:
    def test_defaults_are_complete_and_typed(self, settings_store):
        current = settings_store.get_all()
        assert current.platform_name == "OwnBroker Simplified"
        assert current.maintenance_mode is False
        assert current.allow_new_registrations is True
        assert current.default_booking_fee == 5.0

    def test_missing_rows_fall_back_to_defaults(self, db, settings_store):
        with db.session() as session:
            session.query(PlatformSetting).delete()
        assert settings_store.get_all().admin_email == "admin@ownbroker.com"

    def test_undecodable_value_falls_back_to_default(self, db, settings_store):
        with db.session() as session:
            session.get(PlatformSetting, "defaultBookingFee").value = "five"
        assert settings_store.get_all().default_booking_fee == 5.0

    def test_serializes_with_storage_keys(self, settings_store):
        dumped = settings_store.get_all().model_dump(by_alias=True)
        assert set(dumped) == {d.key for d in SETTING_DEFINITIONS}


class TestUpdatePartial:
    def test_encodes_by_kind(self, db, settings_store):
        changed = settings_store.update_partial(
            {"maintenanceMode": True, "default_booking_fee": 7, "platformName": "Brokerly"}
        )
        assert changed == 3
        assert _raw(db, "maintenanceMode") == "true"
        assert _raw(db, "defaultBookingFee") == "7.0"
        current = settings_store.get_all()
        assert current.maintenance_mode is True
        assert current.platform_name == "Brokerly"

    def test_counts_only_real_changes(self, settings_store):
        assert settings_store.update_partial({"platformName": "OwnBroker Simplified", "maintenanceMode": False}) == 0
        assert settings_store.update_partial({"defaultBookingFee": "5"}) == 0
        assert settings_store.update_partial({"defaultBookingFee": 6.5}) == 1

    def test_unknown_keys_and_nulls_are_ignored(self, settings_store):
        assert settings_store.update_partial({"colorScheme": "dark", "logoUrl": None}) == 0

    def test_invalid_value_writes_nothing(self, db, settings_store):
        with pytest.raises(InvalidRequest):
            settings_store.update_partial({"platformName": "Other", "maintenanceMode": "sometimes"})
        assert _raw(db, "platformName") == "OwnBroker Simplified"

    def test_rejects_non_numeric_fee(self, settings_store):
        with pytest.raises(InvalidRequest):
            settings_store.update_partial({"defaultBookingFee": "cheap"})
        with pytest.raises(InvalidRequest):
            settings_store.update_partial({"defaultBookingFee": True})

    def test_missing_row_is_recreated(self, db, settings_store):
        with db.session() as session:
            session.query(PlatformSetting).filter(PlatformSetting.key == "logoUrl").delete()
        assert settings_store.update_partial({"logoUrl": "/img/new.svg"}) == 1
        assert _raw(db, "logoUrl") == "/img/new.svg"


class TestGet:
    def test_lookup_by_key_or_attribute(self, settings_store):
        settings_store.update_partial({"maintenanceMode": True})
        assert settings_store.get("maintenanceMode") is True
        assert settings_store.get("maintenance_mode") is True

    def test_unknown_setting(self, settings_store):
        with pytest.raises(InvalidRequest):
            settings_store.get("colorScheme")
