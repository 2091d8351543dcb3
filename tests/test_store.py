"""
Tests for local store bootstrap, CRUD and app settings.
"""
from app import crud
from app.db import open_store
from app.models import FavoriteTeam
from app.settings_store import AppSettingsStore


class TestOpenStore:

    def test_creates_store_file(self, tmp_path):
        store = open_store(tmp_path / "AFCON2025")
        try:
            assert store.in_memory is False
            assert (tmp_path / "AFCON2025" / "afcon2025.store").exists()
        finally:
            store.close()

    def test_reopens_existing_store(self, tmp_path):
        store = open_store(tmp_path)
        with store.session() as db:
            crud.set_setting(db, "device_uuid", "abc")
        store.close()

        store = open_store(tmp_path)
        try:
            with store.session() as db:
                assert crud.get_setting(db, "device_uuid") == "abc"
        finally:
            store.close()

    def test_corrupt_store_is_replaced_with_fresh_file(self, tmp_path):
        store_path = tmp_path / "afcon2025.store"
        store_path.write_bytes(b"this is not a sqlite database" * 200)
        (tmp_path / "afcon2025.store-wal").write_bytes(b"stale")

        store = open_store(tmp_path)
        try:
            assert store.in_memory is False
            assert not (tmp_path / "afcon2025.store-wal").exists()
            with store.session() as db:
                crud.set_setting(db, "k", "v")
                assert crud.get_setting(db, "k") == "v"
        finally:
            store.close()

    def test_falls_back_to_memory_when_directory_unusable(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")

        store = open_store(blocker / "AFCON2025")
        try:
            assert store.in_memory is True
            with store.session() as db:
                crud.set_setting(db, "k", "v")
                assert crud.get_setting(db, "k") == "v"
        finally:
            store.close()


class TestCrud:

    def test_favorite_team_keeps_single_row(self, memory_store):
        with memory_store.session() as db:
            crud.set_favorite_team(db, 31, "Morocco")
            crud.set_favorite_team(db, 13, "Senegal")

            assert db.query(FavoriteTeam).count() == 1
            favorite = crud.get_favorite_team(db)
            assert favorite.team_id == 13
            assert favorite.team_name == "Senegal"

    def test_changing_team_clears_sync_time(self, memory_store):
        with memory_store.session() as db:
            crud.set_favorite_team(db, 31, "Morocco")
            crud.mark_favorite_synced(db)
            assert crud.get_favorite_team(db).last_synced is not None

            crud.set_favorite_team(db, 19, "Nigeria")
            assert crud.get_favorite_team(db).last_synced is None

    def test_clear_favorite(self, memory_store):
        with memory_store.session() as db:
            crud.set_favorite_team(db, 31, "Morocco")
            crud.clear_favorite_team(db)
            assert crud.get_favorite_team(db) is None

    def test_settings_update_and_delete(self, memory_store):
        with memory_store.session() as db:
            crud.set_setting(db, "k", "1")
            crud.set_setting(db, "k", "2")
            assert crud.get_setting(db, "k") == "2"

            crud.delete_setting(db, "k")
            assert crud.get_setting(db, "k") is None


class TestAppSettingsStore:

    def test_onboarding(self, memory_store):
        settings = AppSettingsStore(memory_store.session_factory, "1.0")
        assert settings.has_completed_onboarding is False

        settings.complete_onboarding()
        assert settings.has_completed_onboarding is True

        settings.reset_onboarding()
        assert settings.has_completed_onboarding is False

    def test_launch_version_tracking(self, memory_store):
        first = AppSettingsStore(memory_store.session_factory, "1.0")
        assert first.is_first_launch_ever is True
        assert first.was_app_updated is False
        first.update_last_launch_version()

        same = AppSettingsStore(memory_store.session_factory, "1.0")
        assert same.is_first_launch_ever is False
        assert same.was_app_updated is False

        upgraded = AppSettingsStore(memory_store.session_factory, "1.1")
        assert upgraded.was_app_updated is True

    def test_device_id_is_stable(self, memory_store):
        settings = AppSettingsStore(memory_store.session_factory, "1.0")
        device_id = settings.device_id()

        assert device_id
        assert settings.device_id() == device_id
