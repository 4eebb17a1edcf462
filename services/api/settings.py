# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field, field_validator
import os
import json
import logging
from typing import Dict, List
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "change-me"


def _default_config_directory() -> str:
    # The site's public/config folder sits next to the backend checkout
    return str(Path(os.getcwd()).resolve().parent / "public" / "config")


def _default_github_file_paths() -> Dict[str, str]:
    return {
        "home": "public/config/home.json",
        "services": "public/config/services.json",
        "products": "public/config/products.json",
        "get-started": "public/config/get-started.json",
        "contact": "public/config/contact.json",
    }


class Settings(BaseSettings):
    # Admin credentials
    # Single pair, used as the fallback when ADMIN_CREDENTIALS is missing or unusable
    admin_username: str = DEFAULT_ADMIN_USERNAME
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    # JSON object of username -> password. Example in .env:
    # ADMIN_CREDENTIALS={"alice": "s3cret", "bob": "hunter2"}
    admin_credentials: str = Field(
        default="",
        description="JSON map of username -> password for admin access",
    )

    # Local storage
    config_directory: str = Field(default_factory=_default_config_directory)

    # GitHub contents API
    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = "main"
    github_api_url: str = "https://api.github.com"
    github_file_paths: Dict[str, str] = Field(
        default_factory=_default_github_file_paths,
        description="Path of each page config inside the repository",
    )

    # HTTP
    admin_base_path: str = "/admin"
    allowed_origins: str = "*"
    # Same limit the old express.json() parser used
    max_body_bytes: int = 1024 * 1024
    port: int = 3000
    log_level: str = "INFO"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("github_file_paths")
    @classmethod
    def merge_file_paths(cls, v: Dict[str, str]) -> Dict[str, str]:
        """
        Overlay GITHUB_FILE_PATHS on the default layout.

        A partial map only moves the pages it names; the rest keep their
        public/config/<page>.json path. Unknown page keys are rejected.
        """
        defaults = _default_github_file_paths()
        unknown = sorted(set(v) - set(defaults))
        if unknown:
            raise ValueError(f"Unknown page keys in GITHUB_FILE_PATHS: {', '.join(unknown)}")
        defaults.update(v)
        return defaults

    def resolved_credentials(self) -> Dict[str, str]:
        """
        Return the username -> password map used by the auth guard.

        ADMIN_CREDENTIALS wins when it is a JSON object with at least one
        string password. Anything else falls back to the single
        ADMIN_USERNAME / ADMIN_PASSWORD pair, so the map is never empty.
        """
        fallback = {self.admin_username: self.admin_password}
        raw = self.admin_credentials.strip()
        if not raw:
            return fallback

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Invalid ADMIN_CREDENTIALS: %s", e)
            return fallback

        if not isinstance(parsed, dict):
            return fallback

        creds = {
            str(user): password
            for user, password in parsed.items()
            if isinstance(password, str)
        }
        return creds or fallback

    def remote_configured(self) -> bool:
        """True when token, owner and repo are all set."""
        return bool(self.github_token and self.github_owner and self.github_repo)

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
