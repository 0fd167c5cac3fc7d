from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
import json
import os
from typing import Mapping
from appdirs import user_config_dir, user_data_dir, user_log_dir

APP_NAME = "FarmViz"
DEFAULT_UPLOAD_FOLDER = "farm-crops"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Environment variable -> settings field.
ENV_OVERRIDES = {
    "FARMVIZ_API_BASE_URL": "api_base_url",
    "FARMVIZ_USER_EMAIL": "user_email",
    "FARMVIZ_CLOUDINARY_CLOUD_NAME": "cloudinary_cloud_name",
    "FARMVIZ_CLOUDINARY_UPLOAD_PRESET": "cloudinary_upload_preset",
}

def _config_path() -> Path:
    cfg_dir = Path(user_config_dir(appname=APP_NAME, appauthor=False))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir / "settings.json"

def cache_path() -> Path:
    return Path(user_data_dir(appname=APP_NAME, appauthor=False)) / "local_storage.json"

def log_path() -> Path:
    return Path(user_log_dir(appname=APP_NAME, appauthor=False)) / "farmviz.log"

@dataclass
class AppSettings:
    """User-persistent settings.

    Stored in: ~/Library/Application Support/FarmViz/settings.json (macOS)
    """
    api_base_url: str = ""
    user_email: str = ""
    cloudinary_cloud_name: str = ""
    cloudinary_upload_preset: str = ""
    upload_folder: str = DEFAULT_UPLOAD_FOLDER
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    last_export_dir: str = ""

    @classmethod
    def load(cls) -> "AppSettings":
        p = _config_path()
        if not p.exists():
            return cls()
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
            known = {f.name for f in fields(cls)}
            return cls(**{k: v for k, v in data.items() if k in known})
        except Exception:
            # Fail safe: a broken settings file must not stop the app from starting.
            return cls()

    def save(self) -> None:
        p = _config_path()
        p.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    def with_env_overrides(self, environ: Mapping[str, str] | None = None) -> "AppSettings":
        env = os.environ if environ is None else environ
        changes = {
            field_name: env[var].strip()
            for var, field_name in ENV_OVERRIDES.items()
            if env.get(var, "").strip()
        }
        return replace(self, **changes)

    def missing_service_fields(self) -> list[str]:
        required = ("api_base_url", "user_email", "cloudinary_cloud_name", "cloudinary_upload_preset")
        return [name for name in required if not str(getattr(self, name)).strip()]
