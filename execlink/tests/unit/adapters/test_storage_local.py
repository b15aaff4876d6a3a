import json

import pytest

from execlink.adapters.storage_local import StorageLocal
from execlink.viewmodels.settings_vm import SettingsVM


def test_user_settings_round_trip(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path))
    payload = {
        "send_timeout_ms": 2500,
        "probe_timeout_ms": 800,
        "last_port": "8394",
        "debug_logging": True,
    }

    storage.save_user_settings(payload)

    assert storage.load_user_settings() == payload
    assert not (tmp_path / "user_settings.json.tmp").exists()


def test_user_settings_missing_file_and_save(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path / "nested"))
    settings_path = tmp_path / "nested" / "user_settings.json"

    assert storage.load_user_settings() is None
    assert not settings_path.exists()

    vm = SettingsVM()
    storage.save_user_settings(vm.to_dict())

    with settings_path.open("r", encoding="utf-8") as fh:
        persisted = json.load(fh)
    assert persisted == vm.to_dict()


def test_non_object_settings_file_rejected(tmp_path):
    (tmp_path / "user_settings.json").write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        StorageLocal(root_dir=str(tmp_path)).load_user_settings()
