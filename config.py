"""Store application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from werkzeug.security import generate_password_hash

from shopcore.utils.validators import validate_currency


@dataclass
class StoreConfig:
    """Settings for the store API and admin tooling."""

    secret_key: str
    database_url: str
    admin_username: str
    admin_password_hash: str
    jwt_secret: str
    project_root: Path
    upload_root: Path
    jwt_expires_minutes: int = 60 * 24 * 7
    max_upload_bytes: int = 10 * 1024 * 1024
    base_currency: str = "NPR"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=list)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def upload_dir(self) -> Path:
        return self.upload_root

    def upload_folder(self, folder: str) -> Path:
        return self.upload_root / folder

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "StoreConfig":
        """Build settings from the environment and make sure directories exist."""

        project_root = Path(__file__).resolve().parent
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # A pre-hashed password wins over the plain one
        password_hash = os.environ.get("STORE_ADMIN_PASS_HASH")
        if not password_hash:
            password_hash = generate_password_hash(os.environ.get("STORE_ADMIN_PASS", "gharsamma"))

        secret_key = os.environ.get("STORE_SECRET_KEY", "gharsamma-dev-secret")
        upload_root = Path(os.environ.get("UPLOAD_DIR", str(project_root / "uploads")))
        origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()]

        config = cls(
            secret_key=secret_key,
            database_url=os.environ.get("DATABASE_URL", f"sqlite:///{project_root / 'data' / 'store.db'}"),
            admin_username=os.environ.get("STORE_ADMIN_USER", "admin"),
            admin_password_hash=password_hash,
            jwt_secret=os.environ.get("JWT_SECRET", secret_key),
            project_root=project_root,
            upload_root=upload_root,
            jwt_expires_minutes=int(os.environ.get("JWT_EXPIRES_MINUTES", str(60 * 24 * 7))),
            max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            base_currency=validate_currency(os.environ.get("BASE_CURRENCY", "NPR")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            cors_origins=origins,
        )

        config.data_dir.mkdir(parents=True, exist_ok=True)
        config.upload_dir.mkdir(parents=True, exist_ok=True)
        return config
