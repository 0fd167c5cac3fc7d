from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("appdirs")

from farmviz.core import settings as settings_mod
from farmviz.core.settings import AppSettings


def test_env_overrides_win_over_saved_values() -> None:
    saved = AppSettings(api_base_url="https://saved.test", user_email="saved@example.com")

    s = saved.with_env_overrides(
        {
            "FARMVIZ_API_BASE_URL": "https://env.test",
            "FARMVIZ_USER_EMAIL": "  ",
            "FARMVIZ_CLOUDINARY_CLOUD_NAME": "demo",
        }
    )

    assert s.api_base_url == "https://env.test"
    assert s.user_email == "saved@example.com"
    assert s.cloudinary_cloud_name == "demo"
    assert saved.api_base_url == "https://saved.test"


def test_missing_service_fields() -> None:
    s = AppSettings(api_base_url="https://api.test", cloudinary_cloud_name="demo")
    assert s.missing_service_fields() == ["user_email", "cloudinary_upload_preset"]


def test_save_and_load(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_config_path", lambda: cfg)

    AppSettings(user_email="grower@example.com", request_timeout_seconds=12.0).save()
    loaded = AppSettings.load()

    assert loaded.user_email == "grower@example.com"
    assert loaded.request_timeout_seconds == 12.0


def test_load_falls_back_to_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_config_path", lambda: cfg)

    cfg.write_text("{broken", encoding="utf-8")
    assert AppSettings.load() == AppSettings()

    cfg.write_text('{"user_email": "a@b.c", "ui_theme": "dark"}', encoding="utf-8")
    assert AppSettings.load().user_email == "a@b.c"
